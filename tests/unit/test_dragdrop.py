"""
Unit tests for the drag-and-drop protocol (guestify/engine/dragdrop.py).
Gestures are replayed as the sequence of calls a board view would make.
"""

from unittest.mock import MagicMock

import pytest

from guestify.api.client import ApiError
from guestify.engine.dragdrop import DragDropController, DETAIL_URL, parse_payload


@pytest.fixture
def drag(started, stub_client):
    stub_client.route('PATCH', 'appearances/42', {'message': 'ok'})
    return started.dragdrop


def full_gesture(drag, appearance_id, stage_key):
    drag.pointer_down(appearance_id)
    payload = drag.start_drag(appearance_id)
    drag.drag_enter(stage_key)
    result = drag.drop(stage_key, payload)
    drag.end_drag()
    return result


# ---------------------------------------------------------------------------
# parse_payload
# ---------------------------------------------------------------------------

@pytest.mark.parametrize('payload, expected', [
    ('42', 42),
    (42, 42),
    ('', None),
    (None, None),
    ('abc', None),
    ('0', None),
])
def test_parse_payload(payload, expected):
    assert parse_payload(payload) == expected


# ---------------------------------------------------------------------------
# drop
# ---------------------------------------------------------------------------

def test_drop_moves_card(drag, started, stub_client):
    assert full_gesture(drag, 42, 'aired') is True
    assert started.store.get(42).status == 'aired'
    assert len(stub_client.calls_to('PATCH', 'appearances/42')) == 1


def test_drop_calls_transition_exactly_once():
    store = MagicMock()
    store.transition_status.return_value = True
    drag = DragDropController(store)
    full_gesture(drag, 42, 'aired')
    store.transition_status.assert_called_once_with(42, 'aired')


def test_drop_on_same_column_is_noop(drag, started, stub_client):
    assert full_gesture(drag, 42, 'active') is True
    assert stub_client.calls_to('PATCH', 'appearances/42') == []
    assert started.store.get(42).status == 'active'


def test_drop_without_payload_uses_dragging_id(drag, started):
    drag.start_drag(42)
    assert drag.drop('convert') is True
    assert started.store.get(42).status == 'convert'


def test_drop_with_nothing_dragged_does_nothing(drag, stub_client):
    assert drag.drop('aired') is None
    assert drag.drop('aired', 'garbage') is None
    assert stub_client.calls_to('PATCH', 'appearances/42') == []


def test_drop_on_unknown_stage_is_ignored(drag, started, stub_client):
    drag.start_drag(42)
    assert drag.drop('retired_stage', '42') is None
    assert started.store.get(42).status == 'active'
    assert started.store.error is None
    assert stub_client.calls_to('PATCH', 'appearances/42') == []


def test_failed_drop_rolls_back(drag, started, stub_client):
    stub_client.route('PATCH', 'appearances/42', ApiError('Failed to update status'))
    assert full_gesture(drag, 42, 'aired') is False
    assert started.store.get(42).status == 'active'
    assert started.store.error == 'Failed to update status'


# ---------------------------------------------------------------------------
# Highlight bookkeeping
# ---------------------------------------------------------------------------

def test_drag_enter_and_leave_highlight(drag):
    drag.drag_enter('aired')
    assert drag.highlighted_column == 'aired'
    drag.drag_leave('convert')
    assert drag.highlighted_column == 'aired'
    drag.drag_leave('aired')
    assert drag.highlighted_column is None


def test_end_drag_clears_state(drag):
    drag.start_drag(42)
    drag.drag_enter('aired')
    drag.end_drag()
    assert drag.dragging_id is None
    assert drag.highlighted_column is None


# ---------------------------------------------------------------------------
# Click suppression
# ---------------------------------------------------------------------------

def test_plain_click_returns_detail_url(drag):
    drag.pointer_down(42)
    assert drag.click(42) == f"{DETAIL_URL}42"


def test_click_after_drag_is_swallowed(drag):
    full_gesture(drag, 42, 'aired')
    assert drag.click(42) is None


def test_only_first_click_after_drag_is_swallowed(drag):
    full_gesture(drag, 42, 'aired')
    drag.click(42)
    assert drag.click(42) == f"{DETAIL_URL}42"


def test_new_gesture_clears_stale_drag_tag(drag):
    # Dragged but the trailing click never fired (e.g. dropped outside the board)
    drag.start_drag(42)
    drag.end_drag()
    drag.pointer_down(42)
    assert drag.click(42) == f"{DETAIL_URL}42"


def test_custom_detail_url():
    drag = DragDropController(MagicMock(), detail_url='/detail?id=')
    assert drag.click(7) == '/detail?id=7'
