"""
Views for the quotes API.

This module exposes the aggregation engine over HTTP: the quote endpoint,
the list of registered venues and a health check.

Version: 1.0
"""
import logging

from drf_spectacular.utils import (
    OpenApiExample,
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
    extend_schema_view,
)
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from aggregator.aggregator import get_aggregator
from aggregator.exceptions import InvalidQuoteRequestError

from .serializers import QuoteQuerySerializer

logger = logging.getLogger(__name__)


@extend_schema_view(
    get=extend_schema(
        summary="Get swap quotes from all venues",
        description=(
            "Queries every registered venue concurrently for a swap quote and returns "
            "the per-venue results together with the best quote. Identical requests "
            "within a few seconds are served from a short-lived cache."
        ),
        parameters=[
            OpenApiParameter(
                name="token_in",
                type=str,
                location=OpenApiParameter.QUERY,
                description="Address of the token to sell",
                required=True,
            ),
            OpenApiParameter(
                name="token_out",
                type=str,
                location=OpenApiParameter.QUERY,
                description="Address of the token to buy",
                required=True,
            ),
            OpenApiParameter(
                name="amount",
                type=str,
                location=OpenApiParameter.QUERY,
                description="Amount to sell in base units (wei)",
                required=True,
                examples=[OpenApiExample("One token with 18 decimals", value="1000000000000000000")],
            ),
            OpenApiParameter(
                name="slippage",
                type=float,
                location=OpenApiParameter.QUERY,
                description="Slippage tolerance in percent",
                required=False,
                default=0.5,
            ),
            OpenApiParameter(
                name="user_address",
                type=str,
                location=OpenApiParameter.QUERY,
                description="Wallet address; enables executable transaction data where supported",
                required=False,
            ),
            OpenApiParameter(
                name="force_refresh",
                type=bool,
                location=OpenApiParameter.QUERY,
                description="Bypass the result cache",
                required=False,
                default=False,
            ),
        ],
        responses={
            200: OpenApiResponse(
                description="Quotes retrieved (best_quote is null when no venue could quote)",
                examples=[
                    OpenApiExample(
                        "Successful Response",
                        value={
                            "success": True,
                            "best_quote": {
                                "aggregator": "KyberSwap",
                                "response_time_ms": 412,
                                "success": True,
                                "quote": {
                                    "output_amount": "1520000",
                                    "min_output_amount": "1512400",
                                    "route": [],
                                    "estimated_gas": "180000",
                                    "execution_payload": None,
                                },
                                "error": None,
                                "is_best": True,
                                "savings_percent": 2,
                                "compared_against": 3,
                            },
                            "all_quotes": [],
                            "timestamp": "2026-01-01T12:00:00+00:00",
                            "cache_hit": False,
                        },
                    )
                ],
            ),
            400: OpenApiResponse(description="Missing or invalid parameters"),
            500: OpenApiResponse(description="Server error"),
        },
        tags=["Quotes"],
    )
)
class QuoteAPIView(APIView):
    """
    API endpoint to fetch swap quotes from every registered venue.

    Always returns the full per-venue breakdown, so "no venue has liquidity"
    (every venue failed, best_quote is null) is distinguishable from a
    service failure (HTTP 500).

    This is a public endpoint - no authentication required.
    """

    permission_classes = [AllowAny]

    def get(self, request):
        serializer = QuoteQuerySerializer(data=request.query_params)
        if not serializer.is_valid():
            return Response(
                {
                    "error": "Missing or invalid parameters. Please provide token_in, token_out and amount.",
                    "details": serializer.errors,
                },
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            quote_request = serializer.to_quote_request()
        except InvalidQuoteRequestError as e:
            return Response(
                {"error": e.message, "details": e.details},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            force_refresh = serializer.validated_data["force_refresh"]
            if force_refresh:
                logger.info("Force refresh requested, bypassing quote cache")
            quote_response = get_aggregator().get_quotes(
                quote_request, use_cache=not force_refresh
            )
        except Exception as e:
            logger.exception(f"Error in QuoteAPIView: {str(e)}")
            return Response(
                {"error": "Failed to fetch quotes", "message": str(e)},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        data = {"success": True}
        data.update(quote_response.to_dict())
        return Response(data)


@extend_schema(
    summary="List registered venues",
    responses={200: OpenApiResponse(description="Registered venues in priority order")},
    tags=["Quotes"],
)
class AggregatorListView(APIView):
    """Registered venues, in registration (priority) order."""

    permission_classes = [AllowAny]

    def get(self, request):
        names = get_aggregator().registry.names()
        return Response(
            {
                "aggregators": [
                    {"name": name, "status": "active", "priority": priority}
                    for priority, name in enumerate(names, start=1)
                ]
            }
        )


@extend_schema(exclude=True)
class HealthView(APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        return Response({"status": "ok", "service": "swap-scout"})
