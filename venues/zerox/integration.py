"""
0x Protocol integration.

Uses the Swap API v2 permit2 quote endpoint, which returns a firm quote with
transaction data ready to execute. An API key is required by 0x and is read
from ``ZEROX_API_KEY``.

Docs: https://0x.org/docs
"""
import logging
import os
from typing import Any, Dict, List, Optional

from aggregator.normalization import normalize_quote, parse_amount
from aggregator.types import ExecutionPayload, NormalizedQuote, QuoteRequest

from ..base.venue import SwapVenue
from ..exceptions import VenueError

logger = logging.getLogger(__name__)


class ZeroXVenue(SwapVenue):
    BASE_URL = "https://api.0x.org"
    QUOTE_ENDPOINT = "/swap/permit2/quote"
    CHAIN_ID = 143  # Monad mainnet
    WRAPPED_NATIVE = "0x3bd359C1119dA7Da1D913D1C4D2B7c461115433A"

    # 0x refuses to quote without a taker; used for anonymous price checks.
    DEFAULT_TAKER = "0x70a9f34f9b34c64957b9c401a97bfed35b95049e"

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        chain_id: int = CHAIN_ID,
        base_url: str = BASE_URL,
    ):
        super().__init__(name="0x", base_url=base_url, timeout=timeout)
        self.chain_id = chain_id
        self.api_key = api_key or os.environ.get("ZEROX_API_KEY", "")
        self.session.headers.update({"0x-api-key": self.api_key, "0x-version": "v2"})

    def get_quote(self, request: QuoteRequest) -> NormalizedQuote:
        params = {
            "chainId": self.chain_id,
            "sellToken": self._native_or(request.token_in, self.WRAPPED_NATIVE),
            "buyToken": self._native_or(request.token_out, self.WRAPPED_NATIVE),
            "sellAmount": str(request.amount),
            "taker": request.user_address or self.DEFAULT_TAKER,
            "slippageBps": request.slippage_tolerance_bps,
        }

        try:
            data = self._get_json(self.QUOTE_ENDPOINT, params=params)
        except VenueError as e:
            body = e.details.get("body")
            if isinstance(body, dict) and body.get("name") == "INPUT_INVALID":
                raise VenueError("Invalid token pair or amount", venue=self.name) from e
            raise

        if not isinstance(data, dict) or not data.get("buyAmount"):
            raise VenueError("No quote available from 0x", venue=self.name)

        transaction = data.get("transaction") or {}
        payload = None
        if transaction.get("to") and transaction.get("data"):
            payload = ExecutionPayload(
                to=transaction["to"],
                data=transaction["data"],
                value=parse_amount(transaction.get("value") or 0, "value"),
            )

        return normalize_quote(
            request,
            output_amount=data["buyAmount"],
            min_output_amount=data.get("minBuyAmount"),
            route=self._parse_route(data.get("route")),
            estimated_gas=transaction.get("gas"),
            execution_payload=payload,
        )

    @staticmethod
    def _parse_route(route: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
        fills = (route or {}).get("fills") or []
        return [
            {
                "dex": fill.get("source"),
                "from": fill.get("from"),
                "to": fill.get("to"),
                "proportion": f"{int(fill.get('proportionBps') or 0) / 100}%",
            }
            for fill in fills
        ]
