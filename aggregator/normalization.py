"""
Normalization helpers every venue adapter uses to build a NormalizedQuote.

Amount handling is integer-only: base-unit token quantities routinely exceed
the range a float can represent exactly.
"""
import logging
from typing import Any, Optional

from venues.exceptions import MalformedUpstreamResponse

from .types import BPS_DENOMINATOR, ExecutionPayload, NormalizedQuote, QuoteRequest

logger = logging.getLogger(__name__)

# uint256 has at most 78 decimal digits
MAX_AMOUNT_DIGITS = 78


def parse_amount(value: Any, field: str = "amount") -> int:
    """
    Parse a base-unit amount from a venue response.

    Accepts ints and strings of at most 78 decimal digits. Anything else,
    including floats, is rejected as a malformed response.
    """
    if value is None:
        raise MalformedUpstreamResponse(f"Missing {field} in venue response")
    if isinstance(value, bool):
        raise MalformedUpstreamResponse(f"Invalid {field}: {value!r}")
    if isinstance(value, int):
        amount = value
    elif isinstance(value, str):
        text = value.strip()
        if not text.isdigit() or not text.isascii():
            raise MalformedUpstreamResponse(f"Invalid {field}: {value!r}")
        if len(text) > MAX_AMOUNT_DIGITS:
            raise MalformedUpstreamResponse(
                f"Invalid {field}: more than {MAX_AMOUNT_DIGITS} digits"
            )
        amount = int(text)
    else:
        raise MalformedUpstreamResponse(
            f"Invalid {field}: expected an integer, got {type(value).__name__}"
        )
    if amount < 0:
        raise MalformedUpstreamResponse(f"Invalid {field}: {value!r} is negative")
    return amount


def derive_min_output(output_amount: int, slippage_bps: int) -> int:
    """output - floor(output * slippage_bps / 10000)"""
    return output_amount - (output_amount * slippage_bps) // BPS_DENOMINATOR


def _parse_gas(value: Any) -> Optional[int]:
    # display-only, so a venue sending something odd just loses the estimate
    if value is None or value == "":
        return None
    try:
        return parse_amount(value, "estimated_gas")
    except MalformedUpstreamResponse:
        logger.debug(f"Ignoring unparseable gas estimate: {value!r}")
        return None


def normalize_quote(
    request: QuoteRequest,
    output_amount: Any,
    min_output_amount: Any = None,
    route: Any = None,
    estimated_gas: Any = None,
    execution_payload: Optional[ExecutionPayload] = None,
) -> NormalizedQuote:
    """
    Build a NormalizedQuote from the raw fields of a venue response.

    Args:
        request: The request the venue quoted for. Its slippage is used when
            the venue does not supply a minimum output itself.
        output_amount: Quoted output in base units (int or digit string).
        min_output_amount: Venue-supplied minimum output, if any.
        route: Opaque route description, passed through untouched.
        estimated_gas: Gas estimate, if any.
        execution_payload: Transaction data, if the venue produced it.

    Raises:
        MalformedUpstreamResponse: when the output amount is missing or not a
            non-negative integer, or the venue minimum exceeds the output.
    """
    output = parse_amount(output_amount, "output_amount")
    if min_output_amount is None or min_output_amount == "":
        minimum = derive_min_output(output, request.slippage_tolerance_bps)
    else:
        minimum = parse_amount(min_output_amount, "min_output_amount")
        if minimum > output:
            raise MalformedUpstreamResponse(
                f"Minimum output {minimum} exceeds quoted output {output}"
            )
    return NormalizedQuote(
        output_amount=output,
        min_output_amount=minimum,
        route=route,
        estimated_gas=_parse_gas(estimated_gas),
        execution_payload=execution_payload,
    )


def rebase_quote(quote: NormalizedQuote, slippage_bps: int) -> NormalizedQuote:
    """
    Re-derive a quote for a different slippage tolerance or user.

    The minimum output is recomputed from the output amount and the
    execution payload is dropped, since venue call data encodes the
    original taker and slippage.
    """
    return NormalizedQuote(
        output_amount=quote.output_amount,
        min_output_amount=derive_min_output(quote.output_amount, slippage_bps),
        route=quote.route,
        estimated_gas=quote.estimated_gas,
        execution_payload=None,
    )
