import pytest

from conftest import geocode_result
from voter_guide.config import ResolverConfig
from voter_guide.exceptions import (
    ConfigurationError, IndexNotReadyError, InputError, LookupMissError, UpstreamError
)
from voter_guide.models import Candidate, LookupState, ResolutionSource, ResolutionState
from voter_guide.resolution_engine import (
    ADDRESS_NOT_FOUND_MESSAGE,
    EMPTY_INPUT_MESSAGE,
    GEOCODE_FAILED_MESSAGE,
    NOT_READY_MESSAGE,
    UNDETERMINED_COMMUNITY_MESSAGE,
    ResolutionEngine,
    partition_candidates,
)


@pytest.fixture
def engine(lookup_state, fake_geocoder, logger):
    return ResolutionEngine(lookup_state, ResolverConfig(), fake_geocoder, logger)


def names(candidates):
    return [c.name for c in candidates]


def test_downtown_scenario() -> None:
    state = LookupState()
    state.replace_ward_index({'DOWNTOWN': '8'})
    state.replace_candidates([
        Candidate('A', 'Mayor'),
        Candidate('B', 'Councillor', ward='8'),
        Candidate('C', 'Councillor', ward='3'),
    ])

    outcome = ResolutionEngine(state).search_community('Downtown')

    assert outcome.succeeded
    assert outcome.result.ward == '8'
    assert names(outcome.result.mayors) == ['A']
    assert names(outcome.result.councillors) == ['B']


def test_partition_keeps_load_order(lookup_state) -> None:
    mayors, councillors, trustees = partition_candidates(lookup_state.candidates, '8')
    assert names(mayors) == ['Alice Mayor', 'Bob Mayor']
    assert names(councillors) == ['Carol Eight', 'Erin Eight']
    assert names(trustees) == ['Frank Trustee']


def test_partition_groups_by_office() -> None:
    candidates = [
        Candidate('Ola', 'Senator'),
        Candidate('Pat', 'Public School Board'),
        Candidate('Quin', 'Mayoral candidate'),
        Candidate('Ray', 'City councilor', ward='8'),
    ]

    mayors, councillors, trustees = partition_candidates(candidates, '8')

    assert names(mayors) == ['Quin']
    assert names(councillors) == ['Ray']
    assert names(trustees) == ['Pat']


def test_leading_zero_wards_are_distinct() -> None:
    candidates = [Candidate('Zed', 'Councillor', ward='Ward 07')]
    _, councillors, _ = partition_candidates(candidates, '7')
    assert councillors == []
    _, councillors, _ = partition_candidates(candidates, '07')
    assert names(councillors) == ['Zed']


def test_every_indexed_community_resolves(engine, lookup_state) -> None:
    for key, ward in lookup_state.ward_index.items():
        result = engine.resolve_community(key.lower())
        assert result.ward == ward
        assert result.source == ResolutionSource.COMMUNITY_MATCH


def test_unknown_community_fails(engine) -> None:
    outcome = engine.search_community('Qqqqq')
    assert outcome.state == ResolutionState.FAILED
    assert outcome.message.startswith('Community "Qqqqq" not found in database')
    assert isinstance(outcome.error, LookupMissError)
    assert outcome.error.reason == 'community_not_found'
    assert engine.state == ResolutionState.FAILED


def test_misspelled_community_gets_suggestions(engine) -> None:
    with pytest.raises(LookupMissError) as excinfo:
        engine.resolve_community('Downtwn')
    assert 'DOWNTOWN' in excinfo.value.suggestions
    assert 'Did you mean' in excinfo.value.message


def test_address_dataset_fast_path(engine, lookup_state, fake_geocoder) -> None:
    lookup_state.replace_address_index({'123 MAIN STREET': 'Downtown'})

    outcome = engine.search('123 Main St')

    assert outcome.succeeded
    assert outcome.result.ward == '8'
    assert outcome.result.source == ResolutionSource.ADDRESS_DATASET
    assert outcome.result.community == 'Downtown'
    assert fake_geocoder.geocode_calls == []


def test_geocoded_address(engine, fake_geocoder) -> None:
    fake_geocoder.results = [
        geocode_result(('Bridgeland-Riverside', ['neighborhood', 'political']),
                       ('Calgary', ['locality', 'political'])),
        geocode_result(('Beltline', ['neighborhood'])),
    ]

    outcome = engine.search(' 12 Main St NE ')

    assert outcome.succeeded
    assert outcome.result.ward == '7'
    assert outcome.result.source == ResolutionSource.GEOCODE_THEN_COMMUNITY
    assert fake_geocoder.geocode_calls == ['12 Main St NE, Calgary, AB']
    assert outcome.result.source_description() == (
        'Matched by Geocoded community - Community: Bridgeland-Riverside'
    )


def test_suggestion_geocoded_without_region_suffix(engine, fake_geocoder) -> None:
    fake_geocoder.results = [geocode_result(('Beltline', ['neighborhood']))]

    outcome = engine.search_suggestion('1 1st St SW, Calgary, AB, Canada')

    assert outcome.result.ward == '8'
    assert fake_geocoder.geocode_calls == ['1 1st St SW, Calgary, AB, Canada']


def test_generic_area_is_not_resolved(engine, fake_geocoder) -> None:
    fake_geocoder.results = [geocode_result(('CALGARY', ['neighborhood']))]

    outcome = engine.search('1 Main St')

    assert not outcome.succeeded
    assert outcome.message == UNDETERMINED_COMMUNITY_MESSAGE
    assert outcome.error.reason == 'community_undetermined'


def test_empty_geocoder_results(engine) -> None:
    outcome = engine.search('nowhere at all')
    assert outcome.message == ADDRESS_NOT_FOUND_MESSAGE
    assert outcome.error.reason == 'address_not_found'


def test_geocoder_failure_gives_generic_message(engine, fake_geocoder) -> None:
    fake_geocoder.error = UpstreamError("Proxy error 500: boom", status_code=500)
    outcome = engine.search('1 Main St')
    assert outcome.state == ResolutionState.FAILED
    assert outcome.message == GEOCODE_FAILED_MESSAGE


def test_unexpected_exception_never_escapes(engine, fake_geocoder) -> None:
    fake_geocoder.error = RuntimeError("bug")
    outcome = engine.search('1 Main St')
    assert outcome.state == ResolutionState.FAILED
    assert outcome.message == GEOCODE_FAILED_MESSAGE
    assert isinstance(outcome.error, RuntimeError)


def test_without_geocoder(lookup_state) -> None:
    engine = ResolutionEngine(lookup_state)
    with pytest.raises(ConfigurationError):
        engine.resolve_address('1 Main St')


@pytest.mark.parametrize("value", ['', '   ', None])
def test_empty_input(engine, fake_geocoder, value) -> None:
    outcome = engine.search(value)
    assert outcome.message == EMPTY_INPUT_MESSAGE
    assert isinstance(outcome.error, InputError)
    assert fake_geocoder.geocode_calls == []


def test_index_not_ready(fake_geocoder) -> None:
    engine = ResolutionEngine(LookupState(), geocoder=fake_geocoder)

    outcome = engine.search_community('Downtown')

    assert outcome.message == NOT_READY_MESSAGE
    assert isinstance(outcome.error, IndexNotReadyError)


def test_state_returns_to_idle_on_next_query(engine) -> None:
    engine.search_community('Qqqqq')
    assert engine.state == ResolutionState.FAILED
    engine.search_community('Downtown')
    assert engine.state == ResolutionState.RESOLVED


def test_suggestions_can_be_disabled(lookup_state) -> None:
    engine = ResolutionEngine(lookup_state, ResolverConfig(max_suggestions=0))
    assert engine.suggest_communities('Downtwn') == []
