"""
Tag Index - tag vocabulary plus per-appearance tag assignments.
Assignments are fetched in one batch call for the whole loaded collection and
refreshed whenever the collection is reloaded.
"""

import logging
from typing import Dict, Iterable, List, Optional

from guestify.api.client import ApiError
from guestify.bus.events import EventBus, EVENT_APPEARANCES_LOADED, EVENT_TAGS_LOADED
from guestify.models import FilterState, Tag

logger = logging.getLogger(__name__)


class TagIndex:

    def __init__(self, client, filters: Optional[FilterState] = None, bus: Optional[EventBus] = None):
        self.client = client
        self.filters = filters if filters is not None else FilterState()
        self.bus = bus or EventBus()
        self.available: List[Tag] = []
        self.assignments: Dict[int, List[Tag]] = {}
        self.error: Optional[str] = None

    def attach(self, bus: EventBus):
        """Refresh assignments every time the appearance collection reloads."""
        bus.on(EVENT_APPEARANCES_LOADED, self._on_appearances_loaded)

    def _on_appearances_loaded(self, event_data):
        self.fetch_assignments_for(event_data.get('ids', []))

    def fetch_available(self) -> List[Tag]:
        """Load the tag vocabulary once."""
        if self.available:
            return self.available

        try:
            response = self.client.get('tags')
        except ApiError as e:
            self.error = e.message
            logger.error(f"Failed to fetch tags: {e.message}")
            return self.available

        self.available = [Tag.from_dict(row) for row in response.get('data') or []]
        self.error = None
        self.bus.emit(EVENT_TAGS_LOADED, {'count': len(self.available)})
        return self.available

    def fetch_assignments_for(self, ids: Iterable[int]) -> Dict[int, List[Tag]]:
        """Batch-load tag assignments for the given appearance ids."""
        ids = list(ids)
        if not ids:
            self.assignments = {}
            return self.assignments

        try:
            response = self.client.post('appearances/tags/batch', {'appearance_ids': ids})
        except ApiError as e:
            self.error = e.message
            logger.error(f"Failed to fetch tag assignments for {len(ids)} appearances: {e.message}")
            return self.assignments

        # JSON object keys arrive as strings
        data = response.get('data') or {}
        self.assignments = {
            int(appearance_id): [Tag.from_dict(row) for row in rows or []]
            for appearance_id, rows in data.items()
        }
        self.error = None
        logger.debug(f"Loaded tag assignments for {len(self.assignments)} of {len(ids)} appearances")
        return self.assignments

    def tags_for(self, appearance_id: int) -> List[Tag]:
        return self.assignments.get(appearance_id, [])

    def has_any(self, appearance_id: int, tag_ids: Iterable[int]) -> bool:
        """True if the appearance carries at least one of the given tags."""
        wanted = set(tag_ids)
        return any(tag.id in wanted for tag in self.tags_for(appearance_id))

    def toggle_filter_tag(self, tag_id: int):
        if tag_id in self.filters.tag_ids:
            self.filters.tag_ids.discard(tag_id)
        else:
            self.filters.tag_ids.add(tag_id)

    def clear_filter_tags(self):
        self.filters.tag_ids.clear()
