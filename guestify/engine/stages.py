"""
Stage Registry - the ordered set of pipeline columns.
Loaded once per session. If the server can't be reached the board still
renders, using the built-in default stages.
"""

import logging
from typing import Dict, List, Optional

from guestify.api.client import ApiError
from guestify.bus.events import EventBus, EVENT_STAGES_LOADED
from guestify.models import Stage

logger = logging.getLogger(__name__)

UNKNOWN_STAGE_COLOR = '#6b7280'

# Matches the system default stages seeded on the server
DEFAULT_STAGES = (
    {'key': 'potential', 'label': 'Potential', 'color': '#6b7280', 'row_group': 1},
    {'key': 'active', 'label': 'Active', 'color': '#3b82f6', 'row_group': 1},
    {'key': 'aired', 'label': 'Aired', 'color': '#10b981', 'row_group': 1},
    {'key': 'convert', 'label': 'Convert', 'color': '#059669', 'row_group': 1},
    {'key': 'on_hold', 'label': 'On Hold', 'color': '#f59e0b', 'row_group': 2},
    {'key': 'cancelled', 'label': 'Cancelled', 'color': '#ef4444', 'row_group': 2},
    {'key': 'unqualified', 'label': 'Unqualified', 'color': '#9ca3af', 'row_group': 2},
)


def default_stages() -> List[Stage]:
    return [Stage(sort_order=i + 1, is_system=True, **row) for i, row in enumerate(DEFAULT_STAGES)]


class StageRegistry:
    """Read-only cache of pipeline stages. Customisation happens elsewhere."""

    def __init__(self, client, bus: Optional[EventBus] = None):
        self.client = client
        self.bus = bus or EventBus()
        self.stages: List[Stage] = []
        self.is_custom = False
        self.used_fallback = False

    def load(self) -> List[Stage]:
        """
        Fetch stages from the server once. Later calls are no-ops.
        Never raises: on failure the default stages are used.
        """
        if self.stages:
            return self.stages

        try:
            response = self.client.get('pipeline-stages')
            stages = _unique_by_key([Stage.from_dict(row) for row in response.get('data') or []])
            if not stages:
                raise ApiError('Server returned no pipeline stages')
            self.stages = stages
            self.is_custom = bool(response.get('is_custom', False))
            self.used_fallback = False
        except (ApiError, TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Failed to load pipeline stages, using defaults: {e}")
            self.stages = default_stages()
            self.is_custom = False
            self.used_fallback = True

        logger.info(f"Loaded {len(self.stages)} pipeline stages (custom={self.is_custom}, fallback={self.used_fallback})")
        self.bus.emit(EVENT_STAGES_LOADED, {'keys': self.keys(), 'is_custom': self.is_custom})
        return self.stages

    def columns_for_row(self, row_group: int) -> List[Stage]:
        """Stages in the given layout row, in the order received."""
        return [s for s in self.stages if s.row_group == row_group]

    def keys(self) -> List[str]:
        return [s.key for s in self.stages]

    def get(self, key: str) -> Optional[Stage]:
        for stage in self.stages:
            if stage.key == key:
                return stage
        return None

    def is_known(self, key: str) -> bool:
        return self.get(key) is not None

    def label_for(self, key: str) -> str:
        stage = self.get(key)
        return stage.label if stage else key

    def color_for(self, key: str) -> str:
        stage = self.get(key)
        return stage.color if stage else UNKNOWN_STAGE_COLOR


def _unique_by_key(stages: List[Stage]) -> List[Stage]:
    """Drop repeated keys, keeping the first occurrence."""
    seen: Dict[str, Stage] = {}
    for stage in stages:
        if stage.key in seen:
            logger.warning(f"Duplicate pipeline stage key '{stage.key}' ignored")
            continue
        seen[stage.key] = stage
    return list(seen.values())
