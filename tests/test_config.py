import os

import pytest

from voter_guide.config import LoadStats, ResolverConfig, is_remote, join_location
from voter_guide.exceptions import ConfigurationError


def test_defaults() -> None:
    config = ResolverConfig()
    assert config.region_suffix == ", Calgary, AB"
    assert config.ward_count == 14
    assert config.debounce_seconds == 0.3
    assert config.min_autocomplete_length == 3
    assert config.request_timeout is None
    assert not config.has_proxy_credentials()


@pytest.mark.parametrize("overrides", [
    {'ward_count': 0},
    {'ward_file_template': 'wards/ward.json'},
    {'debounce_seconds': -1},
    {'request_timeout': 0},
    {'suggestion_threshold': 101},
    {'max_fetch_workers': 0},
    {'log_level': 'LOUD'},
])
def test_invalid_values(overrides) -> None:
    with pytest.raises(ConfigurationError):
        ResolverConfig(**overrides)


def test_log_level_normalized() -> None:
    assert ResolverConfig(log_level='debug').log_level == 'DEBUG'


def test_ward_file_locations() -> None:
    config = ResolverConfig(data_root='https://cdn.example/data/calgary/')
    assert config.ward_file_location(3) == 'https://cdn.example/data/calgary/wards/ward-3.json'
    assert config.aggregated_ward_location() == 'https://cdn.example/data/calgary/ward-communities.json'

    local = ResolverConfig(data_root='assets')
    assert local.ward_file_location(1) == os.path.join('assets', 'wards', 'ward-1.json')


def test_from_env(monkeypatch) -> None:
    monkeypatch.delenv('SUPABASE_URL', raising=False)
    monkeypatch.setenv('NEXT_PUBLIC_SUPABASE_URL', 'https://proxy.example')
    monkeypatch.setenv('SUPABASE_ANON_KEY', 'secret')

    config = ResolverConfig.from_env(city_name='Calgary', proxy_base_url=None)

    assert config.proxy_base_url == 'https://proxy.example'
    assert config.proxy_anon_key == 'secret'
    assert config.has_proxy_credentials()
    assert config.to_dict()['proxy_anon_key'] == '***'


def test_from_dict_round_trip() -> None:
    config = ResolverConfig(data_root='x', max_suggestions=1)
    data = config.to_dict()
    data['proxy_anon_key'] = None
    assert ResolverConfig.from_dict(data) == config


def test_load_stats_ready() -> None:
    assert not LoadStats().is_ready()
    assert LoadStats(ward_entries=1).is_ready()


def test_location_helpers() -> None:
    assert is_remote('http://x') and is_remote('https://x')
    assert not is_remote('/data/x')
    assert join_location('', 'a.json') == 'a.json'


def test_city_dependent_defaults() -> None:
    config = ResolverConfig()
    assert config.generic_area_names == ['CALGARY', 'NORTH EAST', 'NORTH WEST',
                                         'SOUTH EAST', 'SOUTH WEST']
    assert config.address_qualifiers == ['CANADA', 'AB', 'ALBERTA', 'CALGARY']


def test_other_city_derives_denylist_and_suffix() -> None:
    config = ResolverConfig(city_name='Edmonton')

    assert config.region_suffix == ", Edmonton, AB"
    assert config.generic_area_names[0] == 'EDMONTON'
    assert 'CALGARY' not in config.generic_area_names
    assert config.address_qualifiers[-1] == 'EDMONTON'


def test_explicit_city_settings_are_kept() -> None:
    config = ResolverConfig(city_name='Edmonton', region_suffix=', Edmonton',
                            generic_area_names=['DOWNTOWN'])
    assert config.region_suffix == ', Edmonton'
    assert config.generic_area_names == ['DOWNTOWN']


def test_empty_city_name_rejected() -> None:
    with pytest.raises(ConfigurationError):
        ResolverConfig(city_name=' ')
