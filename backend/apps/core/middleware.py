"""
Custom middleware: request logging and the store client key check.
"""

import secrets
import time
import uuid

import structlog
from django.conf import settings
from django.http import JsonResponse

logger = structlog.get_logger("request")

# Paths that never need the client key (ops endpoints and Django admin)
UNGUARDED_PREFIXES = ("/health/", "/metrics", "/admin/", "/static/")


class RequestLoggingMiddleware:
    """
    Log every HTTP request with:
    - Request ID (also returned as X-Request-ID)
    - HTTP method and path
    - Response status code and category
    - Request duration in ms
    - Client IP (supports X-Forwarded-For)
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request_id = str(uuid.uuid4())[:8]
        request.request_id = request_id

        start_time = time.time()

        x_forwarded_for = request.META.get("HTTP_X_FORWARDED_FOR")
        if x_forwarded_for:
            client_ip = x_forwarded_for.split(",")[0].strip()
        else:
            client_ip = request.META.get("REMOTE_ADDR", "unknown")

        response = self.get_response(request)

        duration_ms = round((time.time() - start_time) * 1000, 2)

        status_code = response.status_code
        if status_code >= 500:
            log_func = logger.error
            status_category = "server_error"
        elif status_code >= 400:
            log_func = logger.warning
            status_category = "client_error"
        elif status_code >= 300:
            log_func = logger.info
            status_category = "redirect"
        else:
            log_func = logger.info
            status_category = "success"

        path = request.path
        if path in ["/health/", "/metrics", "/metrics/"]:
            return response

        log_func(
            "http_request",
            request_id=request_id,
            method=request.method,
            path=path,
            status_code=status_code,
            status_category=status_category,
            duration_ms=duration_ms,
            client_ip=client_ip,
            user_agent=request.META.get("HTTP_USER_AGENT", "")[:100],
        )

        response["X-Request-ID"] = request_id

        return response


class StoreKeyMiddleware:
    """
    Require the public client key on every API request.

    Browsers send it in the ``apikey`` header alongside the bearer token.
    The key identifies the client application, not the user.
    """

    def __init__(self, get_response):
        self.get_response = get_response
        self.expected_key = settings.STORE_ANON_KEY
        self.header = "HTTP_" + settings.STORE_ANON_KEY_HEADER.upper().replace("-", "_")

    def __call__(self, request):
        if request.method == "OPTIONS" or request.path.startswith(UNGUARDED_PREFIXES):
            return self.get_response(request)

        supplied = request.META.get(self.header, "")
        if not supplied or not secrets.compare_digest(supplied, self.expected_key):
            logger.warning(
                "client_key_rejected",
                path=request.path,
                method=request.method,
                key_present=bool(supplied),
            )
            return JsonResponse(
                {
                    "type": "error",
                    "code": "INVALID_CLIENT_KEY",
                    "message": "Missing or invalid client key",
                    "detail": [],
                },
                status=401,
            )

        return self.get_response(request)
