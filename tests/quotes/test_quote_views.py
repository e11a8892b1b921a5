"""
Tests for the quote, aggregator list and health endpoints.

The engine is real; its venues are in-memory fakes patched in through
``get_aggregator``.
"""
import unittest
from unittest import mock

from django.test import Client, override_settings

from aggregator.aggregator import Aggregator
from aggregator.registry import VenueRegistry
from fakes import FakeVenue
from venues.exceptions import VenueError

WMON = "0x3bd359C1119dA7Da1D913D1C4D2B7c461115433A"
USDC = "0x754704Bc059F8C67012fEd69BC8A327a5aafb603"
QUOTE_URL = "/api/quote"


class QuoteViewTestCase(unittest.TestCase):
    def setUp(self):
        self.client = Client()
        self.venues = [
            FakeVenue("OpenOcean", output=100),
            FakeVenue("KyberSwap", output=150),
            FakeVenue("0x", error=VenueError("No quote available from 0x")),
        ]
        self.aggregator = Aggregator(VenueRegistry(self.venues), timeout=1)
        patcher = mock.patch("quotes.views.get_aggregator", return_value=self.aggregator)
        self.get_aggregator = patcher.start()
        self.addCleanup(patcher.stop)

    def params(self, **overrides):
        params = {"token_in": WMON, "token_out": USDC, "amount": str(10**18)}
        params.update(overrides)
        return {k: v for k, v in params.items() if v is not None}


class TestQuoteAPIView(QuoteViewTestCase):
    def test_successful_quote(self):
        response = self.client.get(QUOTE_URL, self.params())

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertTrue(data["success"])
        self.assertFalse(data["cache_hit"])
        self.assertIn("timestamp", data)
        self.assertEqual([q["aggregator"] for q in data["all_quotes"]], ["OpenOcean", "KyberSwap", "0x"])
        best = data["best_quote"]
        self.assertEqual(best["aggregator"], "KyberSwap")
        self.assertEqual(best["quote"]["output_amount"], "150")
        self.assertEqual(best["savings_percent"], 50)
        self.assertEqual(best["compared_against"], 2)
        self.assertTrue(best["is_best"])
        failed = data["all_quotes"][2]
        self.assertFalse(failed["success"])
        self.assertEqual(failed["error"], "No quote available from 0x")
        self.assertEqual(failed["error_type"], "venue_error")
        self.assertEqual(data["request"]["slippage_tolerance_bps"], 50)

    def test_large_amounts_survive_as_strings(self):
        amount = str(2**255)
        response = self.client.get(QUOTE_URL, self.params(amount=amount))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["request"]["amount"], amount)

    def test_slippage_percent_becomes_bps(self):
        response = self.client.get(QUOTE_URL, self.params(slippage="1.25"))
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["request"]["slippage_tolerance_bps"], 125)
        self.assertEqual(data["best_quote"]["quote"]["min_output_amount"], str(150 - 150 * 125 // 10000))

    @override_settings(QUOTE_DEFAULT_SLIPPAGE_BPS=100)
    def test_omitted_slippage_uses_the_configured_default(self):
        response = self.client.get(QUOTE_URL, self.params())
        self.assertEqual(response.json()["request"]["slippage_tolerance_bps"], 100)

    def test_missing_parameters(self):
        for missing in ("token_in", "token_out", "amount"):
            with self.subTest(missing=missing):
                response = self.client.get(QUOTE_URL, self.params(**{missing: None}))
                self.assertEqual(response.status_code, 400)
                data = response.json()
                self.assertIn("error", data)
                self.assertIn(missing, data["details"])

    def test_invalid_amount(self):
        for amount in ("1.5", "-3", "1e18", "abc"):
            with self.subTest(amount=amount):
                response = self.client.get(QUOTE_URL, self.params(amount=amount))
                self.assertEqual(response.status_code, 400)

    def test_invalid_slippage(self):
        for slippage in ("-1", "51", "0.005", "lots"):
            with self.subTest(slippage=slippage):
                response = self.client.get(QUOTE_URL, self.params(slippage=slippage))
                self.assertEqual(response.status_code, 400)
                self.assertIn("slippage", response.json()["details"])

    def test_validation_happens_before_any_venue_is_called(self):
        self.client.get(QUOTE_URL, self.params(amount="bad"))
        self.get_aggregator.assert_not_called()
        self.assertTrue(all(venue.calls == 0 for venue in self.venues))

    def test_no_venue_can_quote(self):
        self.aggregator.registry = VenueRegistry([FakeVenue("Mace", error=VenueError("No exchange rate found"))])
        response = self.client.get(QUOTE_URL, self.params())
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertIsNone(data["best_quote"])
        self.assertEqual(len(data["all_quotes"]), 1)

    def test_second_request_is_a_cache_hit(self):
        self.client.get(QUOTE_URL, self.params())
        response = self.client.get(QUOTE_URL, self.params())
        self.assertTrue(response.json()["cache_hit"])
        self.assertEqual(self.venues[0].calls, 1)

    def test_force_refresh_bypasses_the_cache(self):
        self.client.get(QUOTE_URL, self.params())
        response = self.client.get(QUOTE_URL, self.params(force_refresh="true"))
        self.assertFalse(response.json()["cache_hit"])
        self.assertEqual(self.venues[0].calls, 2)

    def test_unexpected_error_is_a_500(self):
        with mock.patch.object(self.aggregator, "get_quotes", side_effect=RuntimeError("engine down")):
            response = self.client.get(QUOTE_URL, self.params())
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["error"], "Failed to fetch quotes")


class TestAggregatorListView(QuoteViewTestCase):
    def test_lists_venues_in_priority_order(self):
        response = self.client.get("/api/aggregators")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json()["aggregators"],
            [
                {"name": "OpenOcean", "status": "active", "priority": 1},
                {"name": "KyberSwap", "status": "active", "priority": 2},
                {"name": "0x", "status": "active", "priority": 3},
            ],
        )


class TestHealthView(unittest.TestCase):
    def test_health(self):
        response = Client().get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "ok", "service": "swap-scout"})


if __name__ == "__main__":
    unittest.main()
