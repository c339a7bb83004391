"""
Bulk Edit Session
Form-backed batch edit over the current selection. Every field starts as
UNSET ("don't change"), and only fields the user touched go into the patch.
Archive is a true tri-state (UNSET / False / True), so "unarchive" and
"leave alone" stay distinct.
"""

import logging
from typing import Any, Dict, Optional

from guestify.engine.appearances import AppearanceStore
from guestify.models import PRIORITIES

logger = logging.getLogger(__name__)


class _Unset:
    def __repr__(self):
        return 'UNSET'

    def __bool__(self):
        return False


UNSET = _Unset()

SOURCE_OPTIONS = (
    'Direct Outreach',
    'Referral / Introduction',
    'Podcast Agency / Network',
    'Event Connection',
    'Online Platform',
    'Internal Database',
    'Media / Press Opportunity',
    'Joint Venture / Strategic Partnership',
    'Inbound Request',
    'Personal Network',
    'Other',
)


class BulkEditSession:

    def __init__(self, store: AppearanceStore):
        self.store = store
        self.is_open = False
        self._reset()

    def _reset(self):
        self.guest_profile_id: Any = UNSET
        self.status: Any = UNSET
        self.priority: Any = UNSET
        self.source: Any = UNSET
        self.archive: Any = UNSET

    def open(self):
        if not self.store.selected_ids:
            raise ValueError("Select at least one appearance before bulk editing")
        self._reset()
        self.is_open = True
        if not self.store.guest_profiles:
            self.store.fetch_guest_profiles()

    # Setters. A blank value means "don't change".

    def set_guest_profile(self, profile_id: Optional[int]):
        self.guest_profile_id = int(profile_id) if profile_id else UNSET

    def set_status(self, status: Optional[str]):
        if status and self.store.stages.stages and not self.store.stages.is_known(status):
            raise ValueError(f"Unknown stage '{status}'")
        self.status = status or UNSET

    def set_priority(self, priority: Optional[str]):
        if priority and priority not in PRIORITIES:
            raise ValueError(f"Invalid priority '{priority}'. Choose from: {', '.join(PRIORITIES)}")
        self.priority = priority or UNSET

    def set_source(self, source: Optional[str]):
        self.source = source or UNSET

    def set_archive(self, archived: bool):
        self.archive = bool(archived)

    def clear_archive(self):
        self.archive = UNSET

    def build_patch(self) -> Dict[str, Any]:
        patch: Dict[str, Any] = {}
        if self.guest_profile_id is not UNSET:
            patch['guest_profile_id'] = self.guest_profile_id
        if self.status is not UNSET:
            patch['status'] = self.status
        if self.priority is not UNSET:
            patch['priority'] = self.priority
        if self.source is not UNSET:
            patch['source'] = self.source
        if self.archive is not UNSET:
            patch['is_archived'] = 1 if self.archive else 0
        return patch

    def apply(self) -> bool:
        """
        Send the touched fields for every selected appearance.
        An empty patch does nothing. On success the session closes (the store
        has already cleared the selection); on failure it stays open for retry.
        """
        if not self.is_open:
            raise ValueError("Bulk edit session is not open")

        patch = self.build_patch()
        if not patch:
            logger.debug("Bulk edit applied with no changes; nothing sent")
            return False

        ok = self.store.bulk_update(list(self.store.selected_ids), patch)
        if ok:
            self._reset()
            self.is_open = False
        return ok

    def cancel(self):
        """Discard edits and close. The selection is left as it was."""
        self._reset()
        self.is_open = False
