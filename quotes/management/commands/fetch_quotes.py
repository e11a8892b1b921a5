"""
Management command to fetch swap quotes from every registered venue.

Prints one row per venue followed by the best quote, or the full
response as JSON with ``--format json``.
"""
import json
import logging

from django.core.management.base import BaseCommand, CommandError
from tabulate import tabulate

from aggregator.aggregator import get_aggregator
from aggregator.exceptions import InvalidQuoteRequestError
from aggregator.normalization import MAX_AMOUNT_DIGITS
from aggregator.types import QuoteRequest
from quotes.serializers import default_slippage_percent

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Fetch swap quotes from all registered venues and show the best one"

    def add_arguments(self, parser):
        parser.add_argument("token_in", help="Address of the token to sell")
        parser.add_argument("token_out", help="Address of the token to buy")
        parser.add_argument("amount", help="Amount to sell in base units")
        parser.add_argument(
            "--slippage",
            help="Slippage tolerance in percent (default: QUOTE_DEFAULT_SLIPPAGE_BPS)"
        )
        parser.add_argument(
            "--user-address",
            help="Wallet address, enables transaction data where supported"
        )
        parser.add_argument(
            "--no-cache", action="store_true",
            help="Bypass the quote cache"
        )
        parser.add_argument(
            "--format", choices=["table", "json"], default="table",
            help="Output format"
        )

    def handle(self, *args, **options):
        amount = options["amount"].strip()
        if not amount.isdigit() or not amount.isascii() or len(amount) > MAX_AMOUNT_DIGITS:
            raise CommandError(f"Amount must be a whole number of base units, got {amount!r}")

        try:
            request = QuoteRequest.from_percent(
                token_in=options["token_in"],
                token_out=options["token_out"],
                amount=int(amount),
                slippage_percent=options["slippage"] or default_slippage_percent(),
                user_address=options.get("user_address"),
            )
        except InvalidQuoteRequestError as e:
            raise CommandError(f"{e.message}: {e.details}") from e

        response = get_aggregator().get_quotes(request, use_cache=not options["no_cache"])

        if options["format"] == "json":
            self.stdout.write(json.dumps(response.to_dict(), indent=2))
            return

        self._output_table(response)

    def _output_table(self, response):
        """Output per-venue results as a formatted table"""
        best_name = response.best_quote.chosen.venue_name if response.best_quote else None

        headers = ["Venue", "Status", "Output", "Min output", "Time (ms)", "Error"]
        rows = []
        for result in response.all_quotes:
            quote = result.quote
            rows.append([
                ("* " if result.venue_name == best_name else "") + result.venue_name,
                "OK" if result.success else result.outcome.error_type,
                quote.output_amount if quote else "",
                quote.min_output_amount if quote else "",
                result.elapsed_ms,
                "" if result.success else result.outcome.reason,
            ])

        self.stdout.write(tabulate(rows, headers, tablefmt="pretty", disable_numparse=True))
        self.stdout.write(
            f"{len(response.successful_quotes)} of {len(response.all_quotes)} venues returned quotes"
        )

        if response.best_quote is None:
            self.stdout.write(self.style.WARNING("No venue could quote this pair and amount."))
            return

        best = response.best_quote
        self.stdout.write(self.style.SUCCESS(
            f"Best quote: {best.chosen.venue_name} -> {best.chosen.output_amount} "
            f"({best.savings_percent}% better than the worst of {best.compared_against})"
        ))
