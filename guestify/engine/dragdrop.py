"""
Drag-and-Drop Transition Protocol
Turns a pointer gesture on the Kanban board into exactly one status
transition. A gesture is: pointer_down -> start_drag -> drag_enter/drag_leave
-> drop -> end_drag -> click. The trailing click of a gesture that dragged is
swallowed so a drop never also opens the detail page.
"""

import logging
from typing import Optional, Set, Union

from guestify.engine.appearances import AppearanceStore

logger = logging.getLogger(__name__)

DETAIL_URL = '/app/interview/detail/?id='


def parse_payload(payload: Union[str, int, None]) -> Optional[int]:
    """Read a dragged appearance id; None if missing or malformed."""
    if payload is None or payload == '':
        return None
    try:
        appearance_id = int(payload)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring drop with unreadable payload {payload!r}")
        return None
    return appearance_id or None


class DragDropController:

    def __init__(self, store: AppearanceStore, detail_url: str = DETAIL_URL):
        self.store = store
        self.detail_url = detail_url
        self.dragging_id: Optional[int] = None
        self.highlighted_column: Optional[str] = None
        self._dragged: Set[int] = set()

    def pointer_down(self, appearance_id: int):
        """A new gesture begins; forget any drag tag left from an earlier one."""
        self._dragged.discard(appearance_id)

    def start_drag(self, appearance_id: int) -> str:
        """Tag the card as dragged. Returns the transfer payload."""
        self.dragging_id = appearance_id
        self._dragged.add(appearance_id)
        return str(appearance_id)

    def end_drag(self):
        self.dragging_id = None
        self.highlighted_column = None

    def drag_enter(self, stage_key: str):
        self.highlighted_column = stage_key

    def drag_leave(self, stage_key: str):
        if self.highlighted_column == stage_key:
            self.highlighted_column = None

    def drop(self, stage_key: str, payload: Union[str, int, None] = None) -> Optional[bool]:
        """
        Move the dragged card to stage_key. Returns the transition result,
        or None if there was nothing to move or the stage is unknown.
        """
        self.highlighted_column = None
        appearance_id = parse_payload(payload) if payload is not None else self.dragging_id
        if not appearance_id:
            return None

        # A column rendered from stages that have since been reloaded
        if self.store.stages.stages and not self.store.stages.is_known(stage_key):
            logger.warning(f"Ignoring drop of appearance {appearance_id} on unknown stage '{stage_key}'")
            return None

        logger.debug(f"Drop appearance {appearance_id} on '{stage_key}'")
        return self.store.transition_status(appearance_id, stage_key)

    def click(self, appearance_id: int) -> Optional[str]:
        """Detail URL to navigate to, or None when this click ends a drag."""
        if appearance_id in self._dragged:
            self._dragged.discard(appearance_id)
            return None
        return f"{self.detail_url}{appearance_id}"
