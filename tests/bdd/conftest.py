"""
Shared fixtures and step definitions for BDD tests.

- runner, client, context: available to all scenario files in this directory
- app_factory: autouse, builds every CLI app around the recording StubClient
- no_logging: autouse, prevents log file creation during tests
- 'the output contains' / 'the error output contains' steps: shared across all feature files
"""

import pytest
from unittest.mock import patch
from click.testing import CliRunner
from pytest_bdd import then, parsers

from guestify.app import TrackerApp
from guestify.storage import MemoryStorage
from stubs import StubClient, default_routes


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def client():
    return StubClient(default_routes())


@pytest.fixture
def context():
    """Mutable dict shared between Given/When/Then steps within a scenario."""
    return {}


@pytest.fixture(autouse=True)
def app_factory(client):
    storage = MemoryStorage()
    with patch("guestify.cli.main.create_app",
               side_effect=lambda: TrackerApp(client, storage=storage, user_id=3)):
        yield


@pytest.fixture(autouse=True)
def no_logging():
    with patch("guestify.cli.main.configure_logging"):
        yield


@then(parsers.parse('the output contains "{text}"'))
def output_contains(context, text):
    assert text in context["result"].stdout, (
        f"Expected {text!r} in output:\n{context['result'].stdout}"
    )


@then(parsers.parse('the error output contains "{text}"'))
def error_output_contains(context, text):
    assert text in context["result"].stderr, (
        f"Expected {text!r} in error output:\n{context['result'].stderr}"
    )
