"""Venue-specific exceptions module."""
from typing import Any, Dict, Optional


class VenueError(Exception):
    """Base class for all venue-related errors.

    Raised by an adapter when the venue answered but could not quote
    (no liquidity, invalid pair, rate limited, HTTP error, ...).
    """

    error_type = "venue_error"

    def __init__(
        self,
        message: str,
        venue: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.venue = venue
        self.details = details or {}
        super().__init__(message)


class VenueTimeoutError(VenueError):
    """Raised when the venue did not answer within the allowed time."""

    error_type = "timeout"


class MalformedUpstreamResponse(VenueError):
    """Raised when a venue response cannot be mapped onto a normalized quote."""

    error_type = "malformed_response"
