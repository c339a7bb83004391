"""
Guestify Tracker Configuration
Loads settings from environment variables with sensible defaults.
"""

import logging
import os
from pathlib import Path
from dotenv import load_dotenv

_logger = logging.getLogger(__name__)

# Load .env file
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(env_path)


class Config:
    """Application configuration."""

    # REST base URL, must be set in .env; e.g. https://example.com/wp-json/guestify/v1/
    REST_URL = os.getenv('GUESTIFY_REST_URL')
    if not REST_URL:
        _logger.critical("GUESTIFY_REST_URL is not set — cannot start. Copy .env.example to .env and configure it.")
        raise ValueError("GUESTIFY_REST_URL environment variable is not set. Copy .env.example to .env and configure it.")

    # Anti-forgery token sent with every request
    NONCE = os.getenv('GUESTIFY_NONCE', '')

    # Current user, and the user whose data an admin is viewing
    USER_ID = int(os.getenv('GUESTIFY_USER_ID', '0'))
    FILTER_USER_ID = int(os.getenv('GUESTIFY_FILTER_USER_ID', '0'))

    # Paging (server caps per_page at 100)
    PER_PAGE = int(os.getenv('GUESTIFY_PER_PAGE', '100'))
    PORTFOLIO_PER_PAGE = int(os.getenv('PORTFOLIO_PER_PAGE', '20'))

    # HTTP timeouts in seconds: connect, read
    HTTP_CONNECT_TIMEOUT = float(os.getenv('HTTP_CONNECT_TIMEOUT', '10'))
    HTTP_READ_TIMEOUT = float(os.getenv('HTTP_READ_TIMEOUT', '30'))

    # Client-local state (persisted view mode)
    STATE_FILE = Path(os.getenv(
        'GUESTIFY_STATE_FILE',
        str(Path(__file__).parent.parent / 'data' / 'guestify_state.json'),
    ))

    # Page-level default view hint
    INITIAL_VIEW = os.getenv('GUESTIFY_INITIAL_VIEW', '')

    # Card / row click-through target
    DETAIL_URL = os.getenv('GUESTIFY_DETAIL_URL', '/app/interview/detail/?id=')


# Singleton instance
config = Config()
