"""
Data structures shared by the aggregator engine and the venue adapters.

All amounts are plain Python ints in the token's base unit. They are rendered
as decimal strings by ``to_dict`` so JSON clients never lose precision.
"""
from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional, Tuple, Union

from .exceptions import InvalidQuoteRequestError

BPS_DENOMINATOR = 10000
DEFAULT_SLIPPAGE_BPS = 50

# Failure.error_type values
TIMEOUT = "timeout"
VENUE_ERROR = "venue_error"
MALFORMED_RESPONSE = "malformed_response"
EXCEPTION = "exception"


@dataclass(frozen=True)
class QuoteRequest:
    """Input to the engine. Immutable once constructed."""

    token_in: str
    token_out: str
    amount: int
    slippage_tolerance_bps: int = DEFAULT_SLIPPAGE_BPS
    user_address: Optional[str] = None

    def __post_init__(self):
        errors = {}
        if not isinstance(self.token_in, str) or not self.token_in.strip():
            errors["token_in"] = "This field is required."
        if not isinstance(self.token_out, str) or not self.token_out.strip():
            errors["token_out"] = "This field is required."
        if isinstance(self.amount, bool) or not isinstance(self.amount, int):
            errors["amount"] = "Amount must be an integer in base units."
        elif self.amount < 0:
            errors["amount"] = "Amount must not be negative."
        slippage = self.slippage_tolerance_bps
        if isinstance(slippage, bool) or not isinstance(slippage, int):
            errors["slippage_tolerance_bps"] = "Slippage must be an integer number of basis points."
        elif not 0 <= slippage <= BPS_DENOMINATOR:
            errors["slippage_tolerance_bps"] = "Slippage must be between 0 and 10000 bps."
        if errors:
            raise InvalidQuoteRequestError(
                "Missing or invalid quote request parameters", details=errors
            )

    @classmethod
    def from_percent(
        cls,
        token_in: str,
        token_out: str,
        amount: int,
        slippage_percent: Union[str, int, float, Decimal] = "0.5",
        user_address: Optional[str] = None,
    ) -> "QuoteRequest":
        """Build a request from a slippage expressed in percent (0.5 == 50 bps)."""
        try:
            bps = Decimal(str(slippage_percent)) * 100
        except InvalidOperation as exc:
            raise InvalidQuoteRequestError(
                "Invalid slippage", details={"slippage": f"Not a number: {slippage_percent!r}"}
            ) from exc
        if not bps.is_finite() or bps != bps.to_integral_value():
            raise InvalidQuoteRequestError(
                "Invalid slippage",
                details={"slippage": "Slippage must be a whole number of basis points."},
            )
        return cls(
            token_in=token_in,
            token_out=token_out,
            amount=amount,
            slippage_tolerance_bps=int(bps),
            user_address=user_address or None,
        )

    def cache_key(self) -> Tuple[str, str, int]:
        return (self.token_in.lower(), self.token_out.lower(), self.amount)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "token_in": self.token_in,
            "token_out": self.token_out,
            "amount": str(self.amount),
            "slippage_tolerance_bps": self.slippage_tolerance_bps,
            "user_address": self.user_address,
        }


@dataclass(frozen=True)
class ExecutionPayload:
    """Directly executable transaction data supplied by a venue."""

    to: str
    data: str
    value: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"to": self.to, "data": self.data, "value": str(self.value)}


@dataclass(frozen=True)
class NormalizedQuote:
    """The common shape every venue adapter maps its response onto."""

    output_amount: int
    min_output_amount: int
    route: Any = None
    estimated_gas: Optional[int] = None
    execution_payload: Optional[ExecutionPayload] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "output_amount": str(self.output_amount),
            "min_output_amount": str(self.min_output_amount),
            "route": self.route,
            "estimated_gas": None if self.estimated_gas is None else str(self.estimated_gas),
            "execution_payload": (
                self.execution_payload.to_dict() if self.execution_payload else None
            ),
        }


@dataclass(frozen=True)
class Success:
    quote: NormalizedQuote

    def to_dict(self) -> Dict[str, Any]:
        return {"success": True, "quote": self.quote.to_dict(), "error": None}


@dataclass(frozen=True)
class Failure:
    reason: str
    error_type: str = VENUE_ERROR

    @property
    def is_timeout(self) -> bool:
        return self.error_type == TIMEOUT

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": False,
            "quote": None,
            "error": self.reason,
            "error_type": self.error_type,
        }


Outcome = Union[Success, Failure]


@dataclass(frozen=True)
class AdapterResult:
    """Outcome of one venue for one request."""

    venue_name: str
    outcome: Outcome
    elapsed_ms: int = 0

    @property
    def success(self) -> bool:
        return isinstance(self.outcome, Success)

    @property
    def quote(self) -> Optional[NormalizedQuote]:
        return self.outcome.quote if isinstance(self.outcome, Success) else None

    @property
    def output_amount(self) -> Optional[int]:
        quote = self.quote
        return quote.output_amount if quote is not None else None

    def with_quote(self, quote: NormalizedQuote) -> "AdapterResult":
        return replace(self, outcome=Success(quote))

    def to_dict(self) -> Dict[str, Any]:
        data = {"aggregator": self.venue_name, "response_time_ms": self.elapsed_ms}
        data.update(self.outcome.to_dict())
        return data


@dataclass(frozen=True)
class BestQuoteSelection:
    chosen: AdapterResult
    savings_percent: int = 0
    compared_against: int = 1

    def to_dict(self) -> Dict[str, Any]:
        data = self.chosen.to_dict()
        data.update(
            {
                "is_best": True,
                "savings_percent": self.savings_percent,
                "compared_against": self.compared_against,
            }
        )
        return data


@dataclass(frozen=True)
class QuoteResponse:
    """What the engine hands back to the API layer."""

    best_quote: Optional[BestQuoteSelection]
    all_quotes: Tuple[AdapterResult, ...]
    timestamp: str
    cache_hit: bool = False
    request: Optional[QuoteRequest] = field(default=None, compare=False)

    @property
    def successful_quotes(self) -> Tuple[AdapterResult, ...]:
        return tuple(r for r in self.all_quotes if r.success)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "best_quote": self.best_quote.to_dict() if self.best_quote else None,
            "all_quotes": [r.to_dict() for r in self.all_quotes],
            "timestamp": self.timestamp,
            "cache_hit": self.cache_hit,
            "request": self.request.to_dict() if self.request else None,
        }
