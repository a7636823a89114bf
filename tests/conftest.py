"""Shared fixtures for the Harvest client tests."""

import json

import pytest
import requests

from harvest.client import HarvestController


class Recorder:
    """Completion that remembers every call it receives."""

    def __init__(self):
        self.calls = []

    def __call__(self, *args):
        self.calls.append(args)

    @property
    def only_call(self):
        assert len(self.calls) == 1, f"completion called {len(self.calls)} times"
        return self.calls[0]


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def make_response():
    """Build a real requests.Response with a JSON (or raw bytes) body."""

    def build(status_code, body=None, url="https://acme.harvestapp.com/"):
        response = requests.Response()
        response.status_code = status_code
        response.url = url
        response.encoding = "utf-8"
        if body is None:
            response._content = b""
        elif isinstance(body, bytes):
            response._content = body
        else:
            response._content = json.dumps(body).encode("utf-8")
        return response

    return build


@pytest.fixture
def controller():
    harvest = HarvestController("acme", username="user@example.com", password="secret")
    yield harvest
    harvest.close()
