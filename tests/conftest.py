"""Shared test fixtures for the garage tests."""

import json

import pytest
import requests

from garage import Fleet, MemoryStorage


class CountingStorage(MemoryStorage):
    """MemoryStorage that counts writes."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.writes = 0

    def set(self, key, value):
        self.writes += 1
        super().set(key, value)


def make_response(status, body=None, url="http://test"):
    """Build a real requests.Response with a JSON body."""
    r = requests.Response()
    r.status_code = status
    r.url = url
    r._content = json.dumps(body).encode() if body is not None else b""
    return r


@pytest.fixture
def storage():
    return CountingStorage()


@pytest.fixture
def messages():
    """Collects operator notifications."""
    return []


@pytest.fixture
def fleet(storage, messages):
    return Fleet(storage, notify=messages.append)
