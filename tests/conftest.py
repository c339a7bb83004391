"""
Shared test fixtures.

GUESTIFY_REST_URL is set before anything imports guestify.config, so the
config guard never trips during collection.
"""

import os

os.environ.setdefault('GUESTIFY_REST_URL', 'https://example.test/wp-json/guestify/v1/')

import pytest

from guestify.app import TrackerApp
from guestify.storage import MemoryStorage
from stubs import StubClient, default_routes


@pytest.fixture
def stub_client():
    return StubClient(default_routes())


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def tracker(stub_client, storage):
    """A TrackerApp wired to the stub client, not yet started."""
    return TrackerApp(stub_client, storage=storage, user_id=3)


@pytest.fixture
def started(tracker):
    """A TrackerApp that has loaded stages, view, tags and appearances."""
    return tracker.start()
