"""
Base venue class for swap quoting services.
"""
import abc
import logging
from typing import Any, Dict, Optional

import requests

from aggregator.types import NormalizedQuote, QuoteRequest

from ..exceptions import MalformedUpstreamResponse, VenueError, VenueTimeoutError

logger = logging.getLogger(__name__)


class SwapVenue(abc.ABC):
    """
    Abstract base class for all swap venues.

    A venue has one capability: turn a QuoteRequest into a NormalizedQuote,
    or raise a VenueError describing why it could not. Transport and parse
    errors are translated here so subclasses only deal with the venue's
    payload.
    """

    DEFAULT_TIMEOUT = 10
    DEFAULT_USER_AGENT = "SwapScout/1.0"

    # Used by 0x/OpenOcean style APIs for the chain's native token.
    NATIVE_TOKEN = "0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE"

    def __init__(self, name: str, base_url: str, timeout: Optional[float] = None):
        self.name = name
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout or self.DEFAULT_TIMEOUT
        self.session = requests.Session()
        self.session.headers.update(
            {
                "Accept": "application/json",
                "User-Agent": self.DEFAULT_USER_AGENT,
            }
        )

    @abc.abstractmethod
    def get_quote(self, request: QuoteRequest) -> NormalizedQuote:
        """Quote ``request``; raise VenueError (or a subclass) on failure."""
        raise NotImplementedError

    def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None, **kwargs) -> Any:
        return self._request_json("GET", path, params=params, **kwargs)

    def _post_json(self, path: str, payload: Dict[str, Any], **kwargs) -> Any:
        return self._request_json("POST", path, json=payload, **kwargs)

    def _request_json(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        logger.debug(f"{self.name}: {method} {url}")
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.Timeout as exc:
            raise VenueTimeoutError(
                f"{self.name} did not respond within {self.timeout} seconds", venue=self.name
            ) from exc
        except requests.RequestException as exc:
            raise VenueError(f"Connection error: {exc}", venue=self.name) from exc

        if response.status_code >= 400:
            body = self._json_or_none(response)
            raise VenueError(
                self._error_message(response.status_code, body),
                venue=self.name,
                details={"status_code": response.status_code, "body": body},
            )

        try:
            return response.json()
        except ValueError as exc:
            raise MalformedUpstreamResponse(
                f"{self.name} returned a non-JSON response", venue=self.name
            ) from exc

    @staticmethod
    def _json_or_none(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return None

    @staticmethod
    def _error_message(status_code: int, body: Any) -> str:
        """Best-effort extraction of the venue's own error message."""
        if isinstance(body, dict):
            for key in ("message", "errorMessage", "error", "reason"):
                if isinstance(body.get(key), str) and body[key]:
                    return body[key]
        return f"HTTP {status_code}"

    def _native_or(self, token: str, wrapped_native: Optional[str]) -> str:
        """Map the wrapped native token onto the venue's native-token sentinel."""
        if wrapped_native and token.lower() == wrapped_native.lower():
            return self.NATIVE_TOKEN
        return token

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name}>"
