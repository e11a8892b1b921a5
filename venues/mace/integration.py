"""
Mace integration (native Monad aggregator).

The exchange-amount endpoint returns recent exchange-rate statistics for a
pair rather than a firm quote, so the output amount is estimated from the
average rate. No wallet is needed and no call data is produced.

Docs: https://api.mace.ag/swaps/rapidoc
"""
import decimal
import logging
from decimal import Decimal
from typing import Optional

from aggregator.normalization import normalize_quote
from aggregator.types import NormalizedQuote, QuoteRequest

from ..base.venue import SwapVenue
from ..exceptions import MalformedUpstreamResponse, VenueError

logger = logging.getLogger(__name__)


class MaceVenue(SwapVenue):
    BASE_URL = "https://api.mace.ag/swaps"
    RATE_WINDOW_SECONDS = 60
    ESTIMATED_GAS = 150000

    def __init__(
        self,
        timeout: Optional[float] = None,
        input_decimals: int = 18,
        output_decimals: int = 6,
        base_url: str = BASE_URL,
    ):
        super().__init__(name="Mace", base_url=base_url, timeout=timeout)
        self.input_decimals = input_decimals
        self.output_decimals = output_decimals

    def get_quote(self, request: QuoteRequest) -> NormalizedQuote:
        data = self._post_json(
            "/exchange-amount",
            {
                "inToken": request.token_in,
                "outToken": request.token_out,
                "lastNSeconds": self.RATE_WINDOW_SECONDS,
            },
        )

        if not isinstance(data, dict) or not data.get("average"):
            raise VenueError("No exchange rate found", venue=self.name)

        average = self._to_decimal(data["average"], "average")
        if average == 0:
            raise VenueError("No exchange rate found", venue=self.name)
        output = self.calculate_output(request.amount, average)

        route = {
            "type": data.get("routeType"),
            "source": "Mace Exchange Rate",
            "intermediaries": data.get("equivilantTokens") or [],
            "price_impact": self._price_impact(data.get("sumRatio"), average),
        }

        return normalize_quote(
            request,
            output_amount=output,
            route=route,
            estimated_gas=self.ESTIMATED_GAS,
        )

    def calculate_output(self, amount: int, rate: Decimal) -> int:
        """Scale ``amount`` by ``rate`` across the two tokens' decimals, rounding down."""
        with decimal.localcontext() as ctx:
            ctx.prec = 100
            scale = Decimal(10) ** (self.output_decimals - self.input_decimals)
            output = Decimal(amount) * rate * scale
            return int(output.to_integral_value(rounding=decimal.ROUND_FLOOR))

    def _to_decimal(self, value, field: str) -> Decimal:
        try:
            result = Decimal(str(value))
        except decimal.InvalidOperation as exc:
            raise MalformedUpstreamResponse(
                f"Invalid {field}: {value!r}", venue=self.name
            ) from exc
        if not result.is_finite() or result < 0:
            raise MalformedUpstreamResponse(f"Invalid {field}: {value!r}", venue=self.name)
        return result

    @staticmethod
    def _price_impact(sum_ratio, average: Decimal) -> str:
        if not sum_ratio:
            return "0"
        try:
            impact = (1 - Decimal(str(sum_ratio)) / average) * 100
        except decimal.InvalidOperation:
            return "0"
        return str(impact.quantize(Decimal("0.01")))
