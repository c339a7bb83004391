"""
Appearance Store - in-memory state for the interview tracker.
Holds the loaded appearances, the filter state and the selection set, and
exposes the actions views are allowed to call. Every remote failure is caught
here and turned into store.error; nothing propagates to the views.
"""

import logging
from dataclasses import fields
from typing import Any, Dict, List, Optional

from guestify.api.client import ApiError
from guestify.bus.events import (
    EventBus,
    EVENT_APPEARANCES_LOADED, EVENT_APPEARANCES_LOAD_FAILED,
    EVENT_STATUS_CHANGED, EVENT_STATUS_ROLLED_BACK,
    EVENT_BULK_UPDATED, EVENT_BULK_UPDATE_FAILED,
    EVENT_SELECTION_CHANGED,
)
from guestify.engine.optimistic import optimistic, SUPERSEDED
from guestify.engine.stages import StageRegistry
from guestify.engine.tags import TagIndex
from guestify.logging_config import log_call
from guestify.models import Appearance, FilterState, GuestProfile, PRIORITIES

logger = logging.getLogger(__name__)

# Fields the bulk endpoint accepts from this client
BULK_FIELDS = {'guest_profile_id', 'status', 'priority', 'source', 'is_archived'}

_FILTER_NAMES = {f.name for f in fields(FilterState)}


class AppearanceStore:
    """State container owned by the application root and passed to views."""

    def __init__(
        self,
        client,
        stages: StageRegistry,
        tags: Optional[TagIndex] = None,
        filters: Optional[FilterState] = None,
        bus: Optional[EventBus] = None,
        per_page: int = 100,
        user_id: int = 0,
        filter_user_id: int = 0,
    ):
        self.client = client
        self.stages = stages
        self.bus = bus or EventBus()
        self.filters = filters or (tags.filters if tags else FilterState())
        self.tags = tags or TagIndex(client, self.filters, bus=self.bus)
        self.per_page = per_page
        self.user_id = user_id
        self.filter_user_id = filter_user_id

        self.appearances: List[Appearance] = []
        self.loading = False
        self.error: Optional[str] = None
        self.selected_ids: List[int] = []
        self.guest_profiles: List[GuestProfile] = []

        # Per-appearance write generation, bumped by every status transition
        self._generations: Dict[int, int] = {}
        self._warned_unknown: set = set()

    # =========================================================================
    # LOADING
    # =========================================================================

    def _list_params(self, query: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        params: Dict[str, Any] = {'per_page': self.per_page}

        # Admin viewing another user's data
        if self.filter_user_id and self.filter_user_id != self.user_id:
            params['user_id'] = self.filter_user_id

        if self.filters.show_archived:
            params['show_archived'] = 'true'

        if query:
            params.update(query)
        return params

    @log_call
    def load(self, query: Optional[Dict[str, Any]] = None) -> bool:
        """
        Replace the collection with the server's result.
        On failure the previous collection is kept and store.error is set.
        Returns True on success.
        """
        self.loading = True
        self.error = None
        try:
            response = self.client.get('appearances', params=self._list_params(query))
            rows = response.get('data') or []
            self.appearances = [Appearance.from_dict(row) for row in rows]
        except (ApiError, TypeError, ValueError, AttributeError) as e:
            self.error = getattr(e, 'message', None) or str(e) or 'Failed to fetch interviews'
            logger.error(f"Failed to load appearances: {self.error}")
            self.bus.emit(EVENT_APPEARANCES_LOAD_FAILED, {'error': self.error})
            return False
        finally:
            self.loading = False

        self._warned_unknown.clear()
        self._warn_unrecognized()
        logger.info(f"Loaded {len(self.appearances)} appearances")
        self.bus.emit(EVENT_APPEARANCES_LOADED, {'ids': [a.id for a in self.appearances]})
        return True

    @log_call
    def fetch_guest_profiles(self) -> List[GuestProfile]:
        """Load guest profiles once, keeping only the current user's own."""
        if self.guest_profiles:
            return self.guest_profiles

        try:
            response = self.client.get('guest-profiles')
        except ApiError as e:
            logger.error(f"Failed to fetch guest profiles: {e}")
            return self.guest_profiles

        profiles = [GuestProfile.from_dict(row) for row in response.get('data') or []]
        self.guest_profiles = [
            p for p in profiles
            if not p.author_id or not self.user_id or p.author_id == self.user_id
        ]
        return self.guest_profiles

    def dismiss_error(self):
        self.error = None

    # =========================================================================
    # DERIVED VIEWS
    # =========================================================================

    def get(self, appearance_id: int) -> Optional[Appearance]:
        for appearance in self.appearances:
            if appearance.id == appearance_id:
                return appearance
        return None

    def filtered(self) -> List[Appearance]:
        """Appearances passing every active filter, in load order."""
        f = self.filters
        result = list(self.appearances)

        if f.search:
            needle = f.search.lower()
            result = [
                a for a in result
                if needle in (a.podcast_name or '').lower() or needle in (a.episode_title or '').lower()
            ]

        if f.status:
            result = [a for a in result if a.status == f.status]

        if f.priority:
            result = [a for a in result if a.priority == f.priority]

        if f.source:
            result = [a for a in result if a.source == f.source]

        if f.guest_profile_id:
            result = [a for a in result if a.guest_profile_id == f.guest_profile_id]

        if not f.show_archived:
            result = [a for a in result if not a.is_archived]

        if f.tag_ids:
            result = [a for a in result if self.tags.has_any(a.id, f.tag_ids)]

        return result

    def grouped_by_stage(self) -> Dict[str, List[Appearance]]:
        """
        Filtered appearances bucketed by status. Every known stage key is
        present. Appearances whose status matches no stage are left out of
        every bucket (see unrecognized()).
        """
        grouped: Dict[str, List[Appearance]] = {key: [] for key in self.stages.keys()}
        for appearance in self.filtered():
            bucket = grouped.get(appearance.status)
            if bucket is not None:
                bucket.append(appearance)
        return grouped

    def unrecognized(self) -> List[Appearance]:
        """Filtered appearances whose status is not a loaded stage key."""
        return [a for a in self.filtered() if not self.stages.is_known(a.status)]

    def _warn_unrecognized(self):
        if not self.stages.stages:
            return
        for appearance in self.appearances:
            marker = (appearance.id, appearance.status)
            if not self.stages.is_known(appearance.status) and marker not in self._warned_unknown:
                self._warned_unknown.add(marker)
                logger.warning(
                    f"Appearance {appearance.id} has unknown status '{appearance.status}' "
                    f"and is not shown on the board"
                )

    @property
    def unique_sources(self) -> List[str]:
        return sorted({a.source for a in self.appearances if a.source})

    # =========================================================================
    # FILTERS
    # =========================================================================

    def set_filter(self, name: str, value: Any):
        """Set one filter. Changing show_archived refetches, since the server
        only returns archived rows when asked."""
        if name not in _FILTER_NAMES:
            raise ValueError(f"Unknown filter '{name}'")
        if name == 'priority' and value and value not in PRIORITIES:
            raise ValueError(f"Invalid priority '{value}'. Choose from: {', '.join(PRIORITIES)}")
        if name == 'tag_ids':
            value = set(value or ())

        previous = getattr(self.filters, name)
        setattr(self.filters, name, value)

        if name == 'show_archived' and bool(previous) != bool(value):
            self.load()

    def clear_filters(self):
        show_archived = self.filters.show_archived
        self.filters.search = ''
        self.filters.status = ''
        self.filters.priority = ''
        self.filters.source = ''
        self.filters.guest_profile_id = None
        self.filters.tag_ids.clear()
        if show_archived:
            self.set_filter('show_archived', False)

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    @log_call
    def transition_status(self, appearance_id: int, new_status: str) -> bool:
        """
        Optimistically move an appearance to another stage.
        The local status changes immediately; if the server rejects the
        change it is put back and store.error is set.
        Returns True when the server confirmed the change.
        """
        appearance = self.get(appearance_id)
        if appearance is None:
            logger.warning(f"transition_status: appearance {appearance_id} not loaded")
            return False

        if self.stages.stages and not self.stages.is_known(new_status):
            raise ValueError(f"Unknown stage '{new_status}'. Choose from: {', '.join(self.stages.keys())}")

        if appearance.status == new_status:
            logger.debug(f"transition_status: appearance {appearance_id} already '{new_status}'")
            return True

        generation = self._generations.get(appearance_id, 0) + 1
        self._generations[appearance_id] = generation
        old_status = appearance.status

        change = None
        try:
            with optimistic(appearance, 'status', new_status,
                            is_current=lambda: self._generations.get(appearance_id) == generation) as change:
                self.client.patch(f'appearances/{appearance_id}', {'status': new_status})
        except ApiError as e:
            self.error = e.message
            if change is not None and change.state == SUPERSEDED:
                logger.warning(f"Stale status update for appearance {appearance_id} failed, newer write kept: {e.message}")
                return False
            logger.error(f"Status update for appearance {appearance_id} failed, rolled back: {e.message}")
            self.bus.emit(EVENT_STATUS_ROLLED_BACK, {
                'appearance_id': appearance_id, 'status': appearance.status, 'attempted': new_status,
            })
            return False

        logger.info(f"Appearance {appearance_id}: {old_status} -> {new_status}")
        self.bus.emit(EVENT_STATUS_CHANGED, {
            'appearance_id': appearance_id, 'old_status': old_status, 'new_status': new_status,
        })
        return True

    @log_call
    def bulk_update(self, ids: List[int], patch: Dict[str, Any]) -> bool:
        """
        Apply one partial patch to many appearances in a single call, then
        reload the whole collection from the server. Nothing is changed
        locally on failure. Returns True on success.
        """
        invalid = set(patch) - BULK_FIELDS
        if invalid:
            raise ValueError(f"Invalid bulk update fields: {invalid}")
        if not ids or not patch:
            return False

        try:
            self.client.patch('appearances/bulk', {'ids': list(ids), 'updates': dict(patch)})
        except ApiError as e:
            self.error = e.message
            logger.error(f"Bulk update of {len(ids)} appearances failed: {e.message}")
            self.bus.emit(EVENT_BULK_UPDATE_FAILED, {'ids': list(ids), 'error': e.message})
            return False

        logger.info(f"Bulk updated {len(ids)} appearances: {sorted(patch)}")
        self.load()
        self.clear_selection()
        self.bus.emit(EVENT_BULK_UPDATED, {'ids': list(ids), 'updates': dict(patch)})
        return True

    # =========================================================================
    # SELECTION
    # =========================================================================

    def is_selected(self, appearance_id: int) -> bool:
        return appearance_id in self.selected_ids

    def toggle_selection(self, appearance_id: int):
        if appearance_id in self.selected_ids:
            self.selected_ids.remove(appearance_id)
        else:
            self.selected_ids.append(appearance_id)
        self._selection_changed()

    def select_all(self):
        """Select every appearance in the current filtered view."""
        self.selected_ids = [a.id for a in self.filtered()]
        self._selection_changed()

    def toggle_all(self):
        """Header checkbox: clear when everything is selected, else select all."""
        if self.all_selected:
            self.clear_selection()
        else:
            self.select_all()

    def clear_selection(self):
        self.selected_ids = []
        self._selection_changed()

    @property
    def all_selected(self) -> bool:
        visible = [a.id for a in self.filtered()]
        return bool(visible) and set(visible) <= set(self.selected_ids)

    @property
    def some_selected(self) -> bool:
        return len(self.selected_ids) > 0

    def _selection_changed(self):
        self.bus.emit(EVENT_SELECTION_CHANGED, {'ids': list(self.selected_ids)})
