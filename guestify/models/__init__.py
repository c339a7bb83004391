"""
Data Models
Dataclasses for all entities. These are pure Python objects, no network logic.
Rows from the REST API carry many more keys than the tracker needs, so
from_dict() keeps only the declared fields.
"""

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional, Set

PRIORITIES = ('low', 'medium', 'high')


def _known_fields(cls, row: Dict[str, Any]) -> Dict[str, Any]:
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in row.items() if k in names}


@dataclass
class Stage:
    """Pipeline column. row_group 1 = active flow, 2 = terminal states."""
    key: str = ''
    label: str = ''
    color: str = '#6b7280'
    row_group: int = 1
    id: Optional[int] = None
    sort_order: int = 0
    is_system: bool = False
    is_active: bool = True

    @classmethod
    def from_dict(cls, row: Dict[str, Any]) -> 'Stage':
        stage = cls(**_known_fields(cls, row))
        stage.row_group = int(stage.row_group or 1)
        return stage


@dataclass
class Appearance:
    """A tracked podcast guest-booking opportunity (aka interview)."""
    id: int = 0
    podcast_id: Optional[int] = None
    podcast_name: str = ''
    podcast_image: str = ''
    episode_title: str = ''
    episode_date: str = ''
    source: str = ''
    priority: str = 'medium'
    guest_profile_id: Optional[int] = None
    guest_profile_name: str = ''
    status: str = 'potential'
    is_archived: bool = False
    updated_at: Optional[str] = None

    @classmethod
    def from_dict(cls, row: Dict[str, Any]) -> 'Appearance':
        appearance = cls(**_known_fields(cls, row))
        appearance.id = int(appearance.id)
        # The server sends 0 for "no guest profile"
        appearance.guest_profile_id = int(appearance.guest_profile_id) if appearance.guest_profile_id else None
        appearance.is_archived = bool(appearance.is_archived)
        appearance.status = appearance.status or 'potential'
        return appearance


@dataclass
class Tag:
    """User-defined label attached to appearances."""
    id: int = 0
    name: str = ''
    slug: str = ''
    color: str = '#6b7280'
    usage_count: int = 0

    @classmethod
    def from_dict(cls, row: Dict[str, Any]) -> 'Tag':
        tag = cls(**_known_fields(cls, row))
        tag.id = int(tag.id)
        tag.usage_count = int(tag.usage_count or 0)
        return tag


@dataclass
class GuestProfile:
    """Guest profile a booking is made on behalf of."""
    id: int = 0
    name: str = ''
    title: str = ''
    author_id: Optional[int] = None

    @classmethod
    def from_dict(cls, row: Dict[str, Any]) -> 'GuestProfile':
        profile = cls(**_known_fields(cls, row))
        profile.id = int(profile.id)
        profile.author_id = int(profile.author_id) if profile.author_id else None
        return profile

    @property
    def display_name(self) -> str:
        return self.name or self.title or f"Profile #{self.id}"


@dataclass
class PortfolioItem:
    """A confirmed past appearance (episode the user has a speaking credit on)."""
    id: int = 0
    episode_title: str = ''
    engagement_date: Optional[str] = None
    engagement_type: Optional[str] = None
    episode_url: Optional[str] = None
    podcast_id: Optional[int] = None
    podcast_name: Optional[str] = None
    role: Optional[str] = None
    is_verified: bool = False
    pipeline_status: Optional[str] = None

    @classmethod
    def from_dict(cls, row: Dict[str, Any]) -> 'PortfolioItem':
        return cls(**_known_fields(cls, row))


@dataclass
class FilterState:
    """Client-side filter predicates. Empty string / None means 'no filter'."""
    search: str = ''
    status: str = ''
    priority: str = ''
    source: str = ''
    guest_profile_id: Optional[int] = None
    tag_ids: Set[int] = field(default_factory=set)
    show_archived: bool = False


@dataclass
class PortfolioFilters:
    search: str = ''
    page: int = 1
    per_page: int = 20


@dataclass
class PortfolioPage:
    items: List[PortfolioItem] = field(default_factory=list)
    total: int = 0
    page: int = 1
    pages: int = 0
