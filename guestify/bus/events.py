"""
Event Bus - Decoupled Module Communication
Store actions emit events, other components listen. The application root owns
the bus instance and hands it to every component it builds.
"""

from typing import Callable, Dict, List, Any
import logging

logger = logging.getLogger(__name__)


class EventBus:
    """
    Simple event bus for decoupled module communication.
    Components emit events, other components register handlers to listen.
    """

    def __init__(self):
        self._handlers: Dict[str, List[Callable]] = {}

    def on(self, event_name: str, handler: Callable):
        """
        Register a handler for an event.

        Args:
            event_name: Name of the event to listen for
            handler: Callable that receives event_data dict
        """
        if event_name not in self._handlers:
            self._handlers[event_name] = []
        self._handlers[event_name].append(handler)
        logger.debug(f"Registered handler for event '{event_name}': {getattr(handler, '__name__', handler)}")

    def emit(self, event_name: str, event_data: Dict[str, Any] = None):
        """
        Emit an event to all registered handlers.

        Args:
            event_name: Name of the event
            event_data: Optional dict of data to pass to handlers
        """
        if event_data is None:
            event_data = {}

        logger.debug(f"Emitting event '{event_name}' with data: {event_data}")

        for handler in self._handlers.get(event_name, []):
            try:
                handler(event_data)
            except Exception as e:
                logger.error(f"Error in handler {getattr(handler, '__name__', handler)} for event '{event_name}': {e}")

    def clear(self):
        """Clear all handlers (useful for testing)."""
        self._handlers.clear()


# =============================================================================
# STANDARD EVENTS
# =============================================================================

# Stage Registry
EVENT_STAGES_LOADED = 'stages_loaded'

# Appearance Store
EVENT_APPEARANCES_LOADED = 'appearances_loaded'
EVENT_APPEARANCES_LOAD_FAILED = 'appearances_load_failed'
EVENT_STATUS_CHANGED = 'status_changed'
EVENT_STATUS_ROLLED_BACK = 'status_rolled_back'
EVENT_BULK_UPDATED = 'bulk_updated'
EVENT_BULK_UPDATE_FAILED = 'bulk_update_failed'
EVENT_SELECTION_CHANGED = 'selection_changed'

# Tag Index
EVENT_TAGS_LOADED = 'tags_loaded'

# View Controller / Portfolio
EVENT_VIEW_CHANGED = 'view_changed'
EVENT_PORTFOLIO_LOADED = 'portfolio_loaded'
