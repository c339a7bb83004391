"""
REST Client - the remote authority for stages, appearances, tags and portfolio.
Wraps requests.Session so every call carries the anti-forgery header and the
configured timeouts. Any object exposing get/post/patch with the same
signatures can stand in for it (tests use a recording stub).
"""

import logging
from typing import Any, Dict, Optional, Tuple

import requests

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = 'API request failed'


class ApiError(RuntimeError):
    """A remote call failed: non-2xx status, transport error, or unreadable body."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


class ApiClient:
    """Thin JSON client for the guestify REST namespace."""

    def __init__(
        self,
        rest_url: str,
        nonce: str = '',
        timeout: Tuple[float, float] = (10, 30),
        session: Optional[requests.Session] = None,
    ):
        # Endpoints are joined onto the base, so keep exactly one trailing slash
        self.rest_url = rest_url.rstrip('/') + '/'
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            'Content-Type': 'application/json',
            'X-WP-Nonce': nonce,
        })

    def request(self, method: str, endpoint: str, params: Optional[Dict[str, Any]] = None,
                data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Make an API request and return the parsed JSON body.
        Raises ApiError on any failure.
        """
        url = self.rest_url + endpoint.lstrip('/')
        logger.debug(f"{method} {url} params={params}")

        try:
            response = self.session.request(
                method, url, params=params, json=data, timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"{method} {endpoint} transport error: {e}")
            raise ApiError(f"{DEFAULT_ERROR_MESSAGE}: {e}") from e

        if not response.ok:
            message = DEFAULT_ERROR_MESSAGE
            try:
                body = response.json()
            except ValueError:
                body = None  # body wasn't JSON, keep the default message
            if isinstance(body, dict):
                message = body.get('message') or message
            logger.error(f"{method} {endpoint} failed with {response.status_code}: {message}")
            raise ApiError(message, status=response.status_code)

        try:
            body = response.json()
        except ValueError as e:
            logger.error(f"{method} {endpoint} returned a non-JSON body")
            raise ApiError(f"Unexpected response format: {e}", status=response.status_code) from e

        # Every resource answers with a JSON object
        if not isinstance(body, dict):
            logger.error(f"{method} {endpoint} returned {type(body).__name__}, expected an object")
            raise ApiError("Unexpected response format: expected a JSON object", status=response.status_code)
        return body

    def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self.request('GET', endpoint, params=params)

    def post(self, endpoint: str, data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self.request('POST', endpoint, data=data or {})

    def patch(self, endpoint: str, data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self.request('PATCH', endpoint, data=data or {})


def create_client() -> ApiClient:
    """Build a client from the loaded configuration."""
    from guestify.config import config

    return ApiClient(
        config.REST_URL,
        nonce=config.NONCE,
        timeout=(config.HTTP_CONNECT_TIMEOUT, config.HTTP_READ_TIMEOUT),
    )
