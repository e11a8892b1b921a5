"""
Tests for QuoteRequest validation and result rendering.
"""
import unittest
from decimal import Decimal

from aggregator.exceptions import InvalidQuoteRequestError
from aggregator.types import (
    TIMEOUT,
    AdapterResult,
    BestQuoteSelection,
    ExecutionPayload,
    Failure,
    NormalizedQuote,
    QuoteRequest,
    Success,
)

WMON = "0x3bd359C1119dA7Da1D913D1C4D2B7c461115433A"
USDC = "0x754704Bc059F8C67012fEd69BC8A327a5aafb603"


class TestQuoteRequest(unittest.TestCase):
    def test_defaults(self):
        request = QuoteRequest(token_in=WMON, token_out=USDC, amount=10**18)
        self.assertEqual(request.slippage_tolerance_bps, 50)
        self.assertIsNone(request.user_address)

    def test_is_immutable(self):
        request = QuoteRequest(token_in=WMON, token_out=USDC, amount=1)
        with self.assertRaises(Exception):
            request.amount = 2

    def test_missing_fields_are_rejected(self):
        with self.assertRaises(InvalidQuoteRequestError) as ctx:
            QuoteRequest(token_in="", token_out=None, amount=1)
        self.assertIn("token_in", ctx.exception.details)
        self.assertIn("token_out", ctx.exception.details)

    def test_invalid_amounts_are_rejected(self):
        for amount in (-1, 1.5, "100", True, None):
            with self.subTest(amount=amount):
                with self.assertRaises(InvalidQuoteRequestError):
                    QuoteRequest(token_in=WMON, token_out=USDC, amount=amount)

    def test_invalid_slippage_is_rejected(self):
        for bps in (-1, 10001, 0.5):
            with self.subTest(bps=bps):
                with self.assertRaises(InvalidQuoteRequestError):
                    QuoteRequest(token_in=WMON, token_out=USDC, amount=1, slippage_tolerance_bps=bps)

    def test_from_percent_converts_exactly(self):
        self.assertEqual(QuoteRequest.from_percent(WMON, USDC, 1, "0.5").slippage_tolerance_bps, 50)
        self.assertEqual(QuoteRequest.from_percent(WMON, USDC, 1, Decimal("1.25")).slippage_tolerance_bps, 125)
        self.assertEqual(QuoteRequest.from_percent(WMON, USDC, 1, 0.1).slippage_tolerance_bps, 10)
        self.assertEqual(QuoteRequest.from_percent(WMON, USDC, 1, 3).slippage_tolerance_bps, 300)

    def test_from_percent_rejects_sub_bps_and_garbage(self):
        for value in ("0.005", "abc", "Infinity", "NaN"):
            with self.subTest(value=value):
                with self.assertRaises(InvalidQuoteRequestError):
                    QuoteRequest.from_percent(WMON, USDC, 1, value)

    def test_from_percent_blank_user_address_becomes_none(self):
        request = QuoteRequest.from_percent(WMON, USDC, 1, "0.5", user_address="")
        self.assertIsNone(request.user_address)

    def test_cache_key_ignores_slippage_user_and_address_case(self):
        a = QuoteRequest(token_in=WMON, token_out=USDC, amount=5, slippage_tolerance_bps=50)
        b = QuoteRequest(
            token_in=WMON.lower(), token_out=USDC.upper(), amount=5,
            slippage_tolerance_bps=300, user_address="0xabc",
        )
        c = QuoteRequest(token_in=WMON, token_out=USDC, amount=6)
        self.assertEqual(a.cache_key(), b.cache_key())
        self.assertNotEqual(a.cache_key(), c.cache_key())


class TestRendering(unittest.TestCase):
    def test_amounts_render_as_strings(self):
        quote = NormalizedQuote(
            output_amount=2**200,
            min_output_amount=2**199,
            estimated_gas=21000,
            execution_payload=ExecutionPayload(to="0xrouter", data="0x", value=10**18),
        )
        result = AdapterResult(venue_name="0x", outcome=Success(quote), elapsed_ms=12)
        data = result.to_dict()
        self.assertEqual(data["aggregator"], "0x")
        self.assertTrue(data["success"])
        self.assertEqual(data["quote"]["output_amount"], str(2**200))
        self.assertEqual(data["quote"]["estimated_gas"], "21000")
        self.assertEqual(data["quote"]["execution_payload"]["value"], str(10**18))
        self.assertEqual(data["response_time_ms"], 12)

    def test_failure_rendering(self):
        result = AdapterResult(
            venue_name="Mace", outcome=Failure("Timed out after 8 seconds", TIMEOUT), elapsed_ms=8000
        )
        data = result.to_dict()
        self.assertFalse(data["success"])
        self.assertIsNone(data["quote"])
        self.assertEqual(data["error_type"], "timeout")
        self.assertTrue(result.outcome.is_timeout)
        self.assertIsNone(result.output_amount)

    def test_best_quote_rendering(self):
        chosen = AdapterResult(
            venue_name="KyberSwap",
            outcome=Success(NormalizedQuote(output_amount=150, min_output_amount=149)),
        )
        data = BestQuoteSelection(chosen=chosen, savings_percent=50, compared_against=2).to_dict()
        self.assertTrue(data["is_best"])
        self.assertEqual(data["savings_percent"], 50)
        self.assertEqual(data["compared_against"], 2)
        self.assertEqual(data["quote"]["output_amount"], "150")


if __name__ == "__main__":
    unittest.main()
