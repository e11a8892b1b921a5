"""Exceptions for the aggregator module"""

from typing import Any, Dict, Optional


class AggregatorError(Exception):
    """Base exception for all aggregator-related errors."""

    def __init__(
        self,
        message: str = "An error occurred in the aggregator",
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class InvalidQuoteRequestError(AggregatorError):
    """The quote request is missing a required field or carries an invalid value."""

    def __init__(
        self,
        message: str = "Invalid quote request",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
