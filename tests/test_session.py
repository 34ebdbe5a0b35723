import json

import pytest

from conftest import FakeGeocoder, geocode_result
from voter_guide.config import ResolverConfig
from voter_guide.exceptions import DataFormatError
from voter_guide.index_builder import AGGREGATED_SOURCE, UPLOAD_SOURCE, WARD_FILES_SOURCE
from voter_guide.logging_config import VoterGuideLogger
from voter_guide.models import Prediction, ResolutionSource
from voter_guide.session import VoterGuideSession


CANDIDATE_DOC = """
<script>
const candidates = [
  {name: "Jane Doe", position: "Mayor"},
  {name: "John Roe", position: "Councillor", ward: "8"},
  {name: "Jim Poe", position: "Councillor", ward: "7"},
];
</script>
"""


@pytest.fixture
def data_root(tmp_path):
    wards = tmp_path / 'wards'
    wards.mkdir()
    (wards / 'ward-8.json').write_text(json.dumps(['Downtown', 'Beltline']), encoding='utf-8')
    (wards / 'ward-7.json').write_text(json.dumps(['Montgomery']), encoding='utf-8')
    (tmp_path / 'index.html').write_text(CANDIDATE_DOC, encoding='utf-8')
    (tmp_path / 'addresses.json').write_text(
        json.dumps({'data': [{'address': '123 Main St', 'community': 'Downtown'}]}),
        encoding='utf-8'
    )
    return tmp_path


@pytest.fixture
def session_config(data_root):
    return ResolverConfig(
        data_root=str(data_root),
        candidates_source=str(data_root / 'index.html'),
        address_dataset_url=str(data_root / 'addresses.json'),
        debounce_seconds=0.05,
    )


@pytest.fixture
def geocoder():
    return FakeGeocoder(results=[geocode_result(('Montgomery', ['neighborhood']))])


@pytest.fixture
def session(session_config, geocoder):
    return VoterGuideSession(session_config, logger=VoterGuideLogger(level="DEBUG"),
                             geocoder=geocoder)


def test_load_bundled_data(session) -> None:
    stats = session.load_bundled_data()

    assert stats.ward_source == WARD_FILES_SOURCE
    assert stats.ward_entries == 3
    assert stats.candidates == 3
    assert stats.address_entries == 1
    assert stats.is_ready()
    assert session.lookup.ward_index['DOWNTOWN'] == '8'


def test_search_paths(session, geocoder) -> None:
    session.load_bundled_data()

    by_dataset = session.search('123 Main St, Calgary, AB')
    assert by_dataset.result.ward == '8'
    assert by_dataset.result.source == ResolutionSource.ADDRESS_DATASET
    assert [c.name for c in by_dataset.result.councillors] == ['John Roe']

    by_geocoder = session.search('99 Other Rd')
    assert by_geocoder.result.ward == '7'
    assert [c.name for c in by_geocoder.result.councillors] == ['Jim Poe']
    assert geocoder.geocode_calls == ['99 Other Rd, Calgary, AB']

    by_name = session.search_community('beltline')
    assert by_name.result.source == ResolutionSource.COMMUNITY_MATCH


def test_search_before_load_is_not_ready(session) -> None:
    outcome = session.search_community('Downtown')
    assert not outcome.succeeded
    assert 'not loaded' in outcome.message


def test_ward_upload_replaces_index_wholesale(session) -> None:
    session.load_bundled_data()

    count = session.upload_ward_csv("ward,community\n12,Cityscape\n")

    assert count == 1
    assert session.lookup.ward_index == {'CITYSCAPE': '12'}
    assert not session.search_community('Downtown').succeeded
    assert session.search_community('Cityscape').result.ward == '12'


def test_upload_takes_precedence_over_later_bundled_load(session) -> None:
    session.upload_ward_csv("ward,community\n12,Cityscape\n")
    session.upload_candidates_csv("name,position\nSolo Mayor,Mayor\n")

    stats = session.load_bundled_data()

    assert session.lookup.ward_index == {'CITYSCAPE': '12'}
    assert [c.name for c in session.lookup.candidates] == ['Solo Mayor']
    assert stats.ward_source == UPLOAD_SOURCE
    assert stats.address_entries == 1


def test_rejected_upload_keeps_existing_data(session) -> None:
    session.load_bundled_data()
    before = dict(session.lookup.ward_index)

    with pytest.raises(DataFormatError):
        session.upload_ward_csv("foo,bar\nx,y\n")
    with pytest.raises(DataFormatError):
        session.upload_candidates_csv("name\nJane\n")

    assert session.lookup.ward_index == before
    assert len(session.lookup.candidates) == 3


def test_upload_from_file(session, tmp_path) -> None:
    path = tmp_path / 'wards.csv'
    path.write_text("Ward,Neighbourhood\n3,Highland Park\n", encoding='utf-8')

    assert session.upload_ward_file(str(path)) == 1
    assert session.load_stats.ward_source == UPLOAD_SOURCE


def test_aggregated_fallback_when_no_ward_files(tmp_path) -> None:
    (tmp_path / 'ward-communities.json').write_text(json.dumps({'5': ['Cityscape']}),
                                                    encoding='utf-8')
    session = VoterGuideSession(ResolverConfig(data_root=str(tmp_path)), geocoder=FakeGeocoder())

    stats = session.load_bundled_data()

    assert stats.ward_source == AGGREGATED_SOURCE
    assert stats.candidates == 0
    assert stats.address_entries == 0


def test_select_suggestion_clears_suggestions(session, geocoder) -> None:
    session.load_bundled_data()
    session.autocomplete.suggestions = [Prediction('99 Other Rd NE, Calgary, AB, Canada')]

    outcome = session.select_suggestion(session.suggestions[0])

    assert outcome.result.ward == '7'
    assert session.suggestions == []
    assert geocoder.geocode_calls == ['99 Other Rd NE, Calgary, AB, Canada']


def test_no_geocoder_without_credentials(session_config) -> None:
    session = VoterGuideSession(session_config)
    assert session.geocoder is None
