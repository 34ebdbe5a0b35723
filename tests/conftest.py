"""Shared fixtures: lookup data, a fake geocoder and a stub HTTP session."""

import json
import logging

import pytest
import requests

from voter_guide.config import ResolverConfig
from voter_guide.models import Candidate, LookupState


CANDIDATES = [
    Candidate("Alice Mayor", "Mayor"),
    Candidate("Bob Mayor", "mayoral candidate"),
    Candidate("Carol Eight", "Councillor", ward="Ward 8"),
    Candidate("Dave Seven", "Councillor", ward="7"),
    Candidate("Erin Eight", "Councilor", ward="8"),
    Candidate("Frank Trustee", "Public School Trustee"),
]


def geocode_result(*components):
    """A single geocoding result with the given (name, types) components."""
    return {
        'address_components': [
            {'long_name': name, 'short_name': name, 'types': list(types)}
            for name, types in components
        ]
    }


class FakeGeocoder:
    """Records queries and answers with canned results or raises."""

    def __init__(self, results=None, predictions=None, error=None):
        self.results = results or []
        self.predictions = predictions or []
        self.error = error
        self.geocode_calls = []
        self.autocomplete_calls = []

    def geocode(self, address):
        self.geocode_calls.append(address)
        if self.error is not None:
            raise self.error
        return self.results

    def autocomplete(self, query, country='ca'):
        self.autocomplete_calls.append((query, country))
        if self.error is not None:
            raise self.error
        return self.predictions


class StubResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code=200, text='', reason='OK'):
        self.status_code = status_code
        self.text = text
        self.reason = reason

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        return json.loads(self.text)


class StubSession:
    """Stand-in for requests.Session that serves canned responses by URL."""

    def __init__(self, responses=None, error=None):
        self.responses = responses or {}
        self.error = error
        self.calls = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append({'url': url, 'params': params, 'headers': headers, 'timeout': timeout})
        if self.error is not None:
            raise self.error
        response = self.responses.get(url)
        if response is None:
            return StubResponse(404, 'Not Found', 'Not Found')
        if isinstance(response, StubResponse):
            return response
        return StubResponse(200, response if isinstance(response, str) else json.dumps(response))


@pytest.fixture
def logger():
    return logging.getLogger("voter_guide.tests")


@pytest.fixture
def config(tmp_path):
    return ResolverConfig(data_root=str(tmp_path), debounce_seconds=0.05)


@pytest.fixture
def lookup_state():
    state = LookupState()
    state.replace_ward_index({
        'DOWNTOWN': '8',
        'BELTLINE': '8',
        'BRIDGELAND RIVERSIDE': '7',
        'MONTGOMERY': '7',
        'CITYSCAPE': '5',
    })
    state.replace_candidates(CANDIDATES)
    return state


@pytest.fixture
def fake_geocoder():
    return FakeGeocoder()


@pytest.fixture
def stub_session():
    return StubSession()


@pytest.fixture
def connection_error():
    return requests.exceptions.ConnectionError("connection refused")
