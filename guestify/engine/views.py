"""
View Controller and Portfolio list.

The tracker shows the same filtered collection as a Kanban board or a table;
the portfolio view is a sibling list of confirmed past appearances with its
own server resource, filters and pagination.
"""

import logging
from typing import List, Optional

from tqdm import tqdm

from guestify.api.client import ApiError
from guestify.bus.events import EventBus, EVENT_VIEW_CHANGED, EVENT_PORTFOLIO_LOADED
from guestify.models import PortfolioFilters, PortfolioItem, PortfolioPage

logger = logging.getLogger(__name__)

VIEW_KANBAN = 'kanban'
VIEW_TABLE = 'table'
VIEW_PORTFOLIO = 'portfolio'
VIEWS = (VIEW_KANBAN, VIEW_TABLE, VIEW_PORTFOLIO)
DEFAULT_VIEW = VIEW_KANBAN

VIEW_STORAGE_KEY = 'pit_interview_view'


# =============================================================================
# PORTFOLIO
# =============================================================================

class PortfolioList:
    """Paginated list of past appearances."""

    def __init__(self, client, bus: Optional[EventBus] = None, per_page: int = 20):
        self.client = client
        self.bus = bus or EventBus()
        self.filters = PortfolioFilters(per_page=per_page)
        self.items: List[PortfolioItem] = []
        self.total = 0
        self.pages = 0
        self.loading = False
        self.error: Optional[str] = None

    def _fetch_page(self, page: int) -> PortfolioPage:
        params = {'page': page, 'per_page': self.filters.per_page}
        if self.filters.search:
            params['search'] = self.filters.search
        response = self.client.get('portfolio', params=params)
        return PortfolioPage(
            items=[PortfolioItem.from_dict(row) for row in response.get('data') or []],
            total=int(response.get('total') or 0),
            page=int(response.get('page') or page),
            pages=int(response.get('pages') or 0),
        )

    def fetch(self, page: Optional[int] = None) -> bool:
        """Load one page. Keeps the current page on failure."""
        page = page or self.filters.page
        self.loading = True
        self.error = None
        try:
            result = self._fetch_page(page)
        except ApiError as e:
            self.error = e.message
            logger.error(f"Failed to load portfolio page {page}: {e.message}")
            return False
        finally:
            self.loading = False

        self.items = result.items
        self.total = result.total
        self.pages = result.pages
        self.filters.page = result.page
        self.bus.emit(EVENT_PORTFOLIO_LOADED, {'page': result.page, 'count': len(result.items)})
        return True

    def set_search(self, search: str) -> bool:
        self.filters.search = search
        self.filters.page = 1
        return self.fetch()

    def next_page(self) -> bool:
        if self.filters.page >= self.pages:
            return False
        return self.fetch(self.filters.page + 1)

    def prev_page(self) -> bool:
        if self.filters.page <= 1:
            return False
        return self.fetch(self.filters.page - 1)

    def fetch_all(self, progress: bool = False) -> List[PortfolioItem]:
        """
        Page through the whole portfolio (used for export).
        Raises ApiError if any page fails, so a partial export is never
        mistaken for a complete one.
        """
        first = self._fetch_page(1)
        items = list(first.items)
        for page in tqdm(range(2, first.pages + 1), desc="Portfolio pages", disable=not progress):
            items.extend(self._fetch_page(page).items)
        logger.info(f"Fetched {len(items)} portfolio items across {max(first.pages, 1)} pages")
        return items


# =============================================================================
# VIEW CONTROLLER
# =============================================================================

class ViewController:
    """
    Current presentation: kanban, table or portfolio. Any view can follow any
    other. The last choice is saved to client-local storage.
    """

    def __init__(self, storage, portfolio: PortfolioList, bus: Optional[EventBus] = None):
        self.storage = storage
        self.portfolio = portfolio
        self.bus = bus or EventBus()
        self.current = DEFAULT_VIEW

    def restore(self, hint: Optional[str] = None) -> str:
        """
        Pick the starting view: saved choice, then the page-level hint,
        then the default.
        """
        saved = self.storage.get(VIEW_STORAGE_KEY)
        if saved in VIEWS:
            view = saved
        elif hint in VIEWS:
            view = hint
        else:
            if saved:
                logger.warning(f"Ignoring unknown saved view '{saved}'")
            view = DEFAULT_VIEW

        self.current = view
        self._ensure_portfolio_loaded()
        logger.debug(f"Restored view '{view}' (saved={saved!r}, hint={hint!r})")
        return view

    def set_view(self, view: str) -> str:
        if view not in VIEWS:
            raise ValueError(f"Unknown view '{view}'. Choose from: {', '.join(VIEWS)}")

        previous = self.current
        self.current = view
        self.storage.set(VIEW_STORAGE_KEY, view)
        self._ensure_portfolio_loaded()

        if previous != view:
            self.bus.emit(EVENT_VIEW_CHANGED, {'old_view': previous, 'new_view': view})
        return view

    def _ensure_portfolio_loaded(self):
        if self.current == VIEW_PORTFOLIO and not self.portfolio.items:
            self.portfolio.fetch()
