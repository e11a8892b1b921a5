"""
KyberSwap Aggregator integration.

Quoting is a two-step flow: ``GET /routes`` finds the route, and when the
caller supplied a wallet address ``POST /route/build`` turns it into call
data. The route summary's ``amountOutUsd`` is a USD value, not an amount, so
the minimum output is always derived from the requested slippage.

Docs: https://docs.kyberswap.com/kyberswap-solutions/kyberswap-aggregator
"""
import logging
from typing import Optional

from aggregator.normalization import normalize_quote
from aggregator.types import ExecutionPayload, NormalizedQuote, QuoteRequest

from ..base.venue import SwapVenue
from ..exceptions import VenueError

logger = logging.getLogger(__name__)


class KyberSwapVenue(SwapVenue):
    BASE_URL = "https://aggregator-api.kyberswap.com"
    CHAIN = "monad"

    def __init__(
        self,
        timeout: Optional[float] = None,
        chain: str = CHAIN,
        base_url: str = BASE_URL,
    ):
        super().__init__(name="KyberSwap", base_url=base_url, timeout=timeout)
        self.chain = chain

    def get_quote(self, request: QuoteRequest) -> NormalizedQuote:
        try:
            body = self._get_json(
                f"/{self.chain}/api/v1/routes",
                params={
                    "tokenIn": request.token_in,
                    "tokenOut": request.token_out,
                    "amountIn": str(request.amount),
                },
            )
        except VenueError as e:
            if e.details.get("status_code") == 400:
                raise VenueError("Invalid token pair or amount", venue=self.name) from e
            raise

        data = (body.get("data") or {}) if isinstance(body, dict) else {}
        route_summary = data.get("routeSummary")
        if not route_summary:
            raise VenueError("No route found", venue=self.name)
        router_address = data.get("routerAddress")

        payload = None
        if request.user_address:
            payload = self._build_route(request, route_summary, router_address)

        return normalize_quote(
            request,
            output_amount=route_summary.get("amountOut"),
            route=route_summary.get("route"),
            estimated_gas=route_summary.get("gas"),
            execution_payload=payload,
        )

    def _build_route(
        self, request: QuoteRequest, route_summary: dict, router_address: Optional[str]
    ) -> Optional[ExecutionPayload]:
        body = self._post_json(
            f"/{self.chain}/api/v1/route/build",
            {
                "routeSummary": route_summary,
                "sender": request.user_address,
                "recipient": request.user_address,
                "slippageTolerance": request.slippage_tolerance_bps,
            },
        )
        data = (body.get("data") or {}) if isinstance(body, dict) else {}
        calldata = data.get("data")
        to = data.get("routerAddress") or router_address
        if not calldata or not to:
            logger.warning(f"{self.name}: route build returned no call data")
            return None
        return ExecutionPayload(to=to, data=calldata, value=0)
