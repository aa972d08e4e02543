"""
DRF exception handler.

Registered as ``REST_FRAMEWORK["EXCEPTION_HANDLER"]``. Views never catch
service errors; they all end up here and leave as one JSON shape.
"""

import structlog
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from .exceptions import BaseAppException

logger = structlog.get_logger(__name__)

DRF_CODES = {
    status.HTTP_400_BAD_REQUEST: "VALIDATION_FAILED",
    status.HTTP_401_UNAUTHORIZED: "NOT_AUTHENTICATED",
    status.HTTP_403_FORBIDDEN: "NOT_AUTHORIZED",
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
}


def unified_exception_handler(exc, context):
    """
    Single exception handler for the API.

    1. Our own ``BaseAppException`` -> its own ``to_dict`` and status.
    2. DRF exceptions (serializer validation, auth, 404) -> same shape.
    3. Anything else -> generic 500, logged with request context.
    """
    request = context.get("request")
    view = context.get("view")

    log_context = {
        "path": request.path if request else "unknown",
        "method": request.method if request else "unknown",
        "view": view.__class__.__name__ if view else "unknown",
    }

    if isinstance(exc, BaseAppException):
        log = logger.warning if exc.http_status < 500 else logger.error
        log("app_exception", code=exc.code, **log_context)
        return Response(exc.to_dict(), status=exc.http_status)

    response = drf_exception_handler(exc, context)

    if response is not None:
        logger.warning(
            "api_exception", exception=exc.__class__.__name__, **log_context
        )

        detail = []
        fields = {}
        if isinstance(response.data, dict):
            for field, messages in response.data.items():
                if not isinstance(messages, list):
                    messages = [messages]
                messages = [str(m) for m in messages]
                detail.extend(f"{field}: {m}" for m in messages)
                if field != "detail":
                    fields[field] = messages
        elif isinstance(response.data, list):
            detail = [str(m) for m in response.data]
        else:
            detail = [str(response.data)]

        if fields:
            message = "Input validation failed"
        else:
            message = detail[0] if detail else "Request failed"

        body = {
            "type": "error",
            "code": DRF_CODES.get(response.status_code, "ERROR"),
            "message": message,
            "detail": detail,
        }
        if fields:
            body["fields"] = fields
        response.data = body
        return response

    logger.exception("unexpected_error", **log_context)
    return Response(
        {
            "type": "error",
            "code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred",
            "detail": [],
        },
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
