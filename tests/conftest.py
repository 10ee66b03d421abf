"""Shared test fixtures for pytest."""

import json

import pytest

from tests.factories import LINKS_PAYLOAD, make_platform_query, make_profile, make_url_query


class PickIndex:
    """Deterministic random source that always picks the same position."""

    def __init__(self, index=0):
        self.index = index
        self.calls = 0

    def choice(self, seq):
        self.calls += 1
        return seq[self.index]


@pytest.fixture
def pick_index():
    return PickIndex


@pytest.fixture
def url_query():
    return make_url_query()


@pytest.fixture
def platform_query():
    return make_platform_query()


@pytest.fixture
def sample_profile():
    return make_profile()


@pytest.fixture
def links_payload_bytes():
    return json.dumps(LINKS_PAYLOAD).encode()
