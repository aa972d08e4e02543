"""
Application error kinds.

Services raise one of the ``BaseAppException`` subclasses below; views never
catch them. ``exception_handler.unified_exception_handler`` turns them (and DRF's own
exceptions) into one JSON shape:

    {
        "type": "error",
        "code": "ALREADY_DECIDED",
        "message": "Short human readable description",
        "detail": ["specific detail 1", "specific detail 2"]
    }

Stack traces and store internals are never exposed to clients.
"""

import functools

import structlog
from django.db import DatabaseError
from rest_framework import status

logger = structlog.get_logger(__name__)


class BaseAppException(Exception):
    """Base class of every domain error."""

    type = "error"
    code = "UNKNOWN_ERROR"
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "An unexpected error occurred"

    def __init__(self, message=None, detail=None, code=None):
        if message:
            self.message = message
        if code:
            self.code = code

        # detail is always a list so clients can iterate it
        if detail is None:
            self.detail = []
        elif isinstance(detail, str):
            self.detail = [detail]
        else:
            self.detail = list(detail)

        super().__init__(self.message)

    def to_dict(self):
        return {
            "type": self.type,
            "code": self.code,
            "message": self.message,
            "detail": self.detail,
        }


# ============================================================
# Session / credential errors
# ============================================================
class InvalidCredentials(BaseAppException):
    code = "INVALID_CREDENTIALS"
    http_status = status.HTTP_401_UNAUTHORIZED
    message = "Invalid email or password"


class EmailInUse(BaseAppException):
    code = "EMAIL_IN_USE"
    http_status = status.HTTP_409_CONFLICT
    message = "An account with this email already exists"


class WeakCredential(BaseAppException):
    code = "WEAK_CREDENTIAL"
    http_status = status.HTTP_400_BAD_REQUEST
    message = "Password does not meet the strength requirements"


# ============================================================
# Lookup / authorization errors
# ============================================================
class NotFound(BaseAppException):
    code = "NOT_FOUND"
    http_status = status.HTTP_404_NOT_FOUND
    message = "Record not found"


class NotAuthorized(BaseAppException):
    code = "NOT_AUTHORIZED"
    http_status = status.HTTP_403_FORBIDDEN
    message = "You are not allowed to perform this action"


# ============================================================
# Workflow errors
# ============================================================
class AlreadyDecided(BaseAppException):
    """A donor registration left the pending state already."""

    code = "ALREADY_DECIDED"
    http_status = status.HTTP_409_CONFLICT
    message = "This registration has already been decided"


class InvalidTransition(BaseAppException):
    """A blood request cannot move from its current status to the asked one."""

    code = "INVALID_TRANSITION"
    http_status = status.HTTP_409_CONFLICT
    message = "This status change is not allowed"


class InvalidQuantity(BaseAppException):
    code = "INVALID_QUANTITY"
    http_status = status.HTTP_400_BAD_REQUEST
    message = "Invalid quantity"


class ValidationFailed(BaseAppException):
    """
    Field-level validation failure.

    ``fields`` maps each offending field to its list of messages so the
    caller can show them next to the matching inputs.
    """

    code = "VALIDATION_FAILED"
    http_status = status.HTTP_400_BAD_REQUEST
    message = "Input validation failed"

    def __init__(self, fields=None, message=None):
        self.fields = {name: list(msgs) for name, msgs in (fields or {}).items()}
        detail = [
            f"{name}: {msg}" for name, msgs in self.fields.items() for msg in msgs
        ]
        super().__init__(message=message, detail=detail)

    @classmethod
    def from_serializer_errors(cls, errors):
        """Build from a DRF ``serializer.errors`` mapping."""
        fields = {}
        for name, messages in errors.items():
            if not isinstance(messages, (list, tuple)):
                messages = [messages]
            fields[name] = [str(m) for m in messages]
        return cls(fields=fields)

    def to_dict(self):
        data = super().to_dict()
        data["fields"] = self.fields
        return data


class StoreUnavailable(BaseAppException):
    code = "STORE_UNAVAILABLE"
    http_status = status.HTTP_503_SERVICE_UNAVAILABLE
    message = "The service is temporarily unavailable, please try again"


def store_operation(name):
    """
    Mark a function as an operation boundary against the store.

    Database failures are logged and surfaced as ``StoreUnavailable``. There
    is no retry.
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except DatabaseError as e:
                logger.error(
                    "store_operation_failed",
                    operation=name,
                    error_type=type(e).__name__,
                )
                raise StoreUnavailable() from e

        return wrapper

    return decorator
