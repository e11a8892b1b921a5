from decimal import Decimal

from django.conf import settings
from rest_framework import serializers

from aggregator.normalization import MAX_AMOUNT_DIGITS
from aggregator.types import BPS_DENOMINATOR, DEFAULT_SLIPPAGE_BPS, QuoteRequest


def default_slippage_percent() -> Decimal:
    """Configured default slippage, in percent."""
    bps = getattr(settings, "QUOTE_DEFAULT_SLIPPAGE_BPS", DEFAULT_SLIPPAGE_BPS)
    return Decimal(bps) * 100 / BPS_DENOMINATOR


class QuoteQuerySerializer(serializers.Serializer):
    """Validates the query string of the quote endpoint."""

    token_in = serializers.CharField(max_length=128, trim_whitespace=True)
    token_out = serializers.CharField(max_length=128, trim_whitespace=True)
    amount = serializers.RegexField(
        r"^\d+$",
        max_length=MAX_AMOUNT_DIGITS,
        error_messages={"invalid": "Amount must be a whole number of base units."},
    )
    slippage = serializers.DecimalField(
        max_digits=4,
        decimal_places=2,
        min_value=Decimal("0"),
        max_value=Decimal("50"),
        required=False,
        help_text="Slippage tolerance in percent (0.5 == 50 bps)",
    )
    user_address = serializers.CharField(
        max_length=128, required=False, allow_blank=True, allow_null=True, default=None
    )
    force_refresh = serializers.BooleanField(default=False)

    def validate_amount(self, value):
        return int(value)

    def to_quote_request(self) -> QuoteRequest:
        data = self.validated_data
        slippage = data.get("slippage")
        return QuoteRequest.from_percent(
            token_in=data["token_in"],
            token_out=data["token_out"],
            amount=data["amount"],
            slippage_percent=default_slippage_percent() if slippage is None else slippage,
            user_address=data.get("user_address") or None,
        )
