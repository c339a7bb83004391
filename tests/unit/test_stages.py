"""
Unit tests for the Stage Registry (guestify/engine/stages.py).
Driven by the recording StubClient — no network.
"""

import pytest

from guestify.api.client import ApiError
from guestify.bus.events import EventBus, EVENT_STAGES_LOADED
from guestify.engine.stages import StageRegistry, DEFAULT_STAGES, UNKNOWN_STAGE_COLOR
from stubs import StubClient, default_routes

DEFAULT_KEYS = ['potential', 'active', 'aired', 'convert', 'on_hold', 'cancelled', 'unqualified']


@pytest.fixture
def failing_client():
    routes = default_routes()
    routes[('GET', 'pipeline-stages')] = ApiError('Service unavailable', status=503)
    return StubClient(routes)


# ---------------------------------------------------------------------------
# load()
# ---------------------------------------------------------------------------

def test_load_uses_server_stages(stub_client):
    registry = StageRegistry(stub_client)
    stages = registry.load()
    assert [s.key for s in stages] == DEFAULT_KEYS
    assert registry.used_fallback is False


def test_load_reads_is_custom_flag():
    client = StubClient({('GET', 'pipeline-stages'): {
        'data': [{'key': 'pitched', 'label': 'Pitched', 'color': '#111111', 'row_group': 1}],
        'is_custom': True,
    }})
    registry = StageRegistry(client)
    registry.load()
    assert registry.is_custom is True
    assert registry.keys() == ['pitched']


def test_load_twice_issues_one_request(stub_client):
    registry = StageRegistry(stub_client)
    registry.load()
    registry.load()
    assert len(stub_client.calls_to('GET', 'pipeline-stages')) == 1


def test_load_emits_event(stub_client):
    bus = EventBus()
    seen = []
    bus.on(EVENT_STAGES_LOADED, seen.append)
    StageRegistry(stub_client, bus=bus).load()
    assert seen == [{'keys': DEFAULT_KEYS, 'is_custom': False}]


def test_duplicate_keys_keep_first():
    client = StubClient({('GET', 'pipeline-stages'): {'data': [
        {'key': 'active', 'label': 'Active', 'row_group': 1},
        {'key': 'active', 'label': 'Active again', 'row_group': 2},
    ]}})
    registry = StageRegistry(client)
    registry.load()
    assert len(registry.stages) == 1
    assert registry.get('active').label == 'Active'


# ---------------------------------------------------------------------------
# Fallback
# ---------------------------------------------------------------------------

class TestFallback:

    def test_failure_does_not_raise(self, failing_client):
        StageRegistry(failing_client).load()

    def test_failure_yields_seven_defaults_split_four_three(self, failing_client):
        registry = StageRegistry(failing_client)
        registry.load()
        row1 = registry.columns_for_row(1)
        row2 = registry.columns_for_row(2)
        assert [s.key for s in row1] == DEFAULT_KEYS[:4]
        assert [s.key for s in row2] == DEFAULT_KEYS[4:]
        assert len(row1) + len(row2) == len(DEFAULT_STAGES) == 7

    def test_failure_marks_not_custom(self, failing_client):
        registry = StageRegistry(failing_client)
        registry.load()
        assert registry.is_custom is False
        assert registry.used_fallback is True
        assert all(s.is_system for s in registry.stages)

    def test_empty_server_list_falls_back(self):
        registry = StageRegistry(StubClient({('GET', 'pipeline-stages'): {'data': [], 'is_custom': False}}))
        registry.load()
        assert registry.keys() == DEFAULT_KEYS

    def test_malformed_body_falls_back(self):
        registry = StageRegistry(StubClient({('GET', 'pipeline-stages'): {'data': 'nope'}}))
        registry.load()
        assert registry.keys() == DEFAULT_KEYS

    def test_fallback_is_cached(self, failing_client):
        registry = StageRegistry(failing_client)
        registry.load()
        registry.load()
        assert len(failing_client.calls_to('GET', 'pipeline-stages')) == 1


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------

def test_columns_for_row_preserves_received_order():
    client = StubClient({('GET', 'pipeline-stages'): {'data': [
        {'key': 'b', 'label': 'B', 'row_group': 1},
        {'key': 'x', 'label': 'X', 'row_group': 2},
        {'key': 'a', 'label': 'A', 'row_group': 1},
    ]}})
    registry = StageRegistry(client)
    registry.load()
    assert [s.key for s in registry.columns_for_row(1)] == ['b', 'a']
    assert registry.columns_for_row(3) == []


def test_label_and_color_for_known_stage(stub_client):
    registry = StageRegistry(stub_client)
    registry.load()
    assert registry.label_for('on_hold') == 'On Hold'
    assert registry.color_for('aired') == '#10b981'


def test_label_and_color_fall_back_for_unknown_stage(stub_client):
    registry = StageRegistry(stub_client)
    registry.load()
    assert registry.label_for('deleted_stage') == 'deleted_stage'
    assert registry.color_for('deleted_stage') == UNKNOWN_STAGE_COLOR
    assert registry.is_known('deleted_stage') is False
