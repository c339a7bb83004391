"""
Application root. Builds one of each component around a shared client and
event bus and starts a session: stages, then the saved view, then the
appearance collection and filter choices.
"""

import logging

from guestify.bus.events import EventBus
from guestify.engine.appearances import AppearanceStore
from guestify.engine.bulk_edit import BulkEditSession
from guestify.engine.dragdrop import DragDropController, DETAIL_URL
from guestify.engine.stages import StageRegistry
from guestify.engine.tags import TagIndex
from guestify.engine.views import PortfolioList, ViewController
from guestify.models import FilterState
from guestify.storage import MemoryStorage

logger = logging.getLogger(__name__)


class TrackerApp:

    def __init__(
        self,
        client,
        storage=None,
        user_id: int = 0,
        filter_user_id: int = 0,
        per_page: int = 100,
        portfolio_per_page: int = 20,
        initial_view: str = '',
        detail_url: str = DETAIL_URL,
    ):
        self.client = client
        self.bus = EventBus()
        self.initial_view = initial_view

        self.filters = FilterState()
        self.stages = StageRegistry(client, bus=self.bus)
        self.tags = TagIndex(client, self.filters, bus=self.bus)
        self.tags.attach(self.bus)
        self.store = AppearanceStore(
            client, self.stages, tags=self.tags, filters=self.filters, bus=self.bus,
            per_page=per_page, user_id=user_id, filter_user_id=filter_user_id,
        )
        self.portfolio = PortfolioList(client, bus=self.bus, per_page=portfolio_per_page)
        self.views = ViewController(storage or MemoryStorage(), self.portfolio, bus=self.bus)
        self.dragdrop = DragDropController(self.store, detail_url=detail_url)
        self.bulk_edit = BulkEditSession(self.store)

    def start(self, load_tags: bool = True) -> 'TrackerApp':
        self.stages.load()
        self.views.restore(self.initial_view)
        if load_tags:
            self.tags.fetch_available()
        self.store.load()
        self.store.fetch_guest_profiles()
        return self


def create_app(storage=None, client=None) -> TrackerApp:
    """Build an app from the loaded configuration."""
    from guestify.api.client import create_client
    from guestify.config import config
    from guestify.storage import JsonFileStorage

    return TrackerApp(
        client or create_client(),
        storage=storage or JsonFileStorage(config.STATE_FILE),
        user_id=config.USER_ID,
        filter_user_id=config.FILTER_USER_ID,
        per_page=config.PER_PAGE,
        portfolio_per_page=config.PORTFOLIO_PER_PAGE,
        initial_view=config.INITIAL_VIEW,
        detail_url=config.DETAIL_URL,
    )
