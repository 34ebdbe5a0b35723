from conftest import geocode_result
from voter_guide.geocoding.result_adapter import component_name, extract_community


def components(*pairs):
    return geocode_result(*pairs)['address_components']


def test_neighborhood_preferred_over_sublocality() -> None:
    parts = components(
        ('Sunnyside', ['sublocality', 'political']),
        ('Hillhurst', ['neighborhood', 'political']),
        ('Calgary', ['locality', 'political']),
    )
    assert extract_community(parts) == 'Hillhurst'


def test_sublocality_used_when_no_neighborhood() -> None:
    parts = components(('Bowness', ['sublocality_level_1', 'sublocality', 'political']))
    assert extract_community(parts) == 'Bowness'


def test_last_neighborhood_wins() -> None:
    parts = components(
        ('Beltline', ['neighborhood']),
        ('Connaught', ['neighborhood']),
    )
    assert extract_community(parts) == 'Connaught'


def test_generic_area_rejected() -> None:
    assert extract_community(components(('Calgary', ['neighborhood']))) is None
    assert extract_community(components(('north west', ['sublocality']))) is None
    assert extract_community(components((' South East ', ['neighborhood']))) is None


def test_custom_generic_areas() -> None:
    parts = components(('Calgary', ['neighborhood']))
    assert extract_community(parts, generic_areas=['EDMONTON']) == 'Calgary'


def test_no_usable_component() -> None:
    assert extract_community(None) is None
    assert extract_community([]) is None
    assert extract_community(components(('Calgary', ['locality']))) is None
    assert extract_community([{'types': ['neighborhood']}, 'junk']) is None


def test_component_name_falls_back_to_name() -> None:
    assert component_name({'name': ' Mission '}) == 'Mission'
    assert component_name({'long_name': 'Mission', 'name': 'x'}) == 'Mission'
