"""
Tests for the custom middleware stack.
"""
import unittest

from django.http import HttpResponse
from django.test import RequestFactory, override_settings

from swap_scout.middleware import (
    RequestIDMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)


def ok_view(request):
    return HttpResponse("ok")


class TestSecurityHeadersMiddleware(unittest.TestCase):
    def setUp(self):
        self.factory = RequestFactory()
        self.middleware = SecurityHeadersMiddleware(ok_view)

    @override_settings(DEBUG=False)
    def test_strict_headers_on_api(self):
        response = self.middleware(self.factory.get("/api/quote"))
        self.assertEqual(response["X-Content-Type-Options"], "nosniff")
        self.assertEqual(response["X-Frame-Options"], "DENY")
        self.assertEqual(response["Content-Security-Policy"], "default-src 'self'")
        self.assertNotIn("Strict-Transport-Security", response)

    @override_settings(DEBUG=False)
    def test_docs_get_a_relaxed_policy(self):
        response = self.middleware(self.factory.get("/api/docs/"))
        self.assertIn("https:", response["Content-Security-Policy"])

    @override_settings(DEBUG=False)
    def test_hsts_only_over_https(self):
        response = self.middleware(self.factory.get("/api/quote", secure=True))
        self.assertIn("max-age", response["Strict-Transport-Security"])


class TestRequestIDMiddleware(unittest.TestCase):
    def setUp(self):
        self.factory = RequestFactory()
        self.middleware = RequestIDMiddleware(ok_view)

    def test_generates_an_id(self):
        request = self.factory.get("/api/quote")
        response = self.middleware(request)
        self.assertTrue(response["X-Request-ID"])
        self.assertEqual(response["X-Request-ID"], request.request_id)

    def test_reuses_incoming_id(self):
        response = self.middleware(self.factory.get("/api/quote", HTTP_X_REQUEST_ID="abc-123"))
        self.assertEqual(response["X-Request-ID"], "abc-123")


class TestRequestLoggingMiddleware(unittest.TestCase):
    def setUp(self):
        self.factory = RequestFactory()

    def test_api_requests_are_logged(self):
        middleware = RequestLoggingMiddleware(ok_view)
        with self.assertLogs("swap_scout.middleware", level="INFO") as logs:
            middleware(self.factory.get("/api/quote", HTTP_X_FORWARDED_FOR="10.0.0.1, 10.0.0.2"))
        self.assertIn("10.0.0.1", logs.output[0])
        self.assertTrue(logs.output[0].startswith("INFO"))

    def test_client_errors_log_a_warning(self):
        middleware = RequestLoggingMiddleware(lambda request: HttpResponse(status=400))
        with self.assertLogs("swap_scout.middleware", level="INFO") as logs:
            middleware(self.factory.get("/api/quote"))
        self.assertTrue(logs.output[0].startswith("WARNING"))

    def test_non_api_requests_are_not_logged(self):
        middleware = RequestLoggingMiddleware(ok_view)
        with self.assertRaises(AssertionError):
            with self.assertLogs("swap_scout.middleware", level="INFO"):
                middleware(self.factory.get("/health"))


if __name__ == "__main__":
    unittest.main()
