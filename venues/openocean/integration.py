"""
OpenOcean integration.

OpenOcean's v3 quote endpoint takes the input amount in whole tokens rather
than base units, so the request amount is scaled down by the input token's
decimals before it is sent.

Docs: https://apis.openocean.finance
"""
import logging
from typing import Optional

from aggregator.normalization import normalize_quote, parse_amount
from aggregator.types import ExecutionPayload, NormalizedQuote, QuoteRequest

from ..base.venue import SwapVenue
from ..exceptions import VenueError

logger = logging.getLogger(__name__)


class OpenOceanVenue(SwapVenue):
    BASE_URL = "https://open-api.openocean.finance/v3"
    CHAIN = "143"  # Monad mainnet
    WRAPPED_NATIVE = "0x3bd359C1119dA7Da1D913D1C4D2B7c461115433A"
    GAS_PRICE_GWEI = "5"
    ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

    def __init__(
        self,
        timeout: Optional[float] = None,
        chain: str = CHAIN,
        input_decimals: int = 18,
        base_url: str = BASE_URL,
    ):
        super().__init__(name="OpenOcean", base_url=base_url, timeout=timeout)
        self.chain = chain
        self.input_decimals = input_decimals

    def get_quote(self, request: QuoteRequest) -> NormalizedQuote:
        human_amount = request.amount // 10 ** self.input_decimals
        params = {
            "inTokenAddress": self._native_or(request.token_in, self.WRAPPED_NATIVE),
            "outTokenAddress": self._native_or(request.token_out, self.WRAPPED_NATIVE),
            "amount": str(human_amount),
            "gasPrice": self.GAS_PRICE_GWEI,
            # OpenOcean takes slippage in percent
            "slippage": f"{request.slippage_tolerance_bps / 100:g}",
            "account": request.user_address or self.ZERO_ADDRESS,
        }

        try:
            body = self._get_json(f"/{self.chain}/quote", params=params)
        except VenueError as e:
            if e.details.get("status_code") == 400:
                raise VenueError("Invalid token pair or amount", venue=self.name) from e
            raise

        if not isinstance(body, dict) or body.get("code") != 200:
            message = body.get("message") if isinstance(body, dict) else None
            raise VenueError(message or "OpenOcean API error", venue=self.name)

        data = body.get("data") or {}
        payload = None
        if data.get("to") and data.get("data"):
            payload = ExecutionPayload(
                to=data["to"],
                data=data["data"],
                value=parse_amount(data.get("value") or 0, "value"),
            )

        return normalize_quote(
            request,
            output_amount=data.get("outAmount"),
            min_output_amount=data.get("minOutAmount"),
            route=data.get("path"),
            estimated_gas=data.get("estimatedGas"),
            execution_payload=payload,
        )
