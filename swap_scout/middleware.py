"""
Custom middleware components for the SwapScout application.

This module defines middleware classes for:
- Security headers
- Request ID generation and tracking
- Logging
"""
import logging
import time
import uuid

from django.conf import settings

logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware:
    """
    Middleware to add security headers to all responses.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        response = self.get_response(request)

        response['X-Content-Type-Options'] = 'nosniff'
        response['X-Frame-Options'] = 'DENY'
        response['Referrer-Policy'] = 'strict-origin-when-cross-origin'
        response['Permissions-Policy'] = 'geolocation=(), camera=(), microphone=()'

        # Swagger UI and ReDoc load their assets from a CDN
        if settings.DEBUG or request.path.startswith(('/api/docs/', '/api/redoc/')):
            response['Content-Security-Policy'] = "default-src 'self' 'unsafe-inline' https:; img-src 'self' data: https:"
        else:
            response['Content-Security-Policy'] = "default-src 'self'"

        if request.is_secure():
            response['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'

        return response


class RequestIDMiddleware:
    """
    Middleware to attach a unique request ID to each request.

    An incoming X-Request-ID header is reused so a caller can trace a
    request across services; otherwise a new UUID is generated.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request_id = request.META.get('HTTP_X_REQUEST_ID') or str(uuid.uuid4())
        request.request_id = request_id

        response = self.get_response(request)

        response['X-Request-ID'] = request_id
        return response


class RequestLoggingMiddleware:
    """
    Middleware to log API requests.

    Logs include method, path, status code, response time, client IP and
    request ID. 5xx responses log at ERROR, 4xx at WARNING, the rest at INFO.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        start_time = time.time()

        response = self.get_response(request)

        # Only log API requests
        if request.path.startswith('/api/'):
            log_data = {
                'method': request.method,
                'path': request.path,
                'status_code': response.status_code,
                'response_time': f"{time.time() - start_time:.4f}s",
                'client_ip': self._get_client_ip(request),
                'user_agent': request.META.get('HTTP_USER_AGENT', 'Unknown'),
                'request_id': getattr(request, 'request_id', 'N/A'),
            }

            if response.status_code >= 500:
                logger.error(f"API Request: {log_data}")
            elif response.status_code >= 400:
                logger.warning(f"API Request: {log_data}")
            else:
                logger.info(f"API Request: {log_data}")

        return response

    def _get_client_ip(self, request):
        """Extract client IP from request"""
        x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
        if x_forwarded_for:
            ip = x_forwarded_for.split(',')[0]
        else:
            ip = request.META.get('REMOTE_ADDR')
        return ip
