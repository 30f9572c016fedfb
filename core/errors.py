"""Error taxonomy shared by every API endpoint.

Errors are classified by origin (identity, database or anything else) and
rendered as ``{"code", "message", "detail"}``. Identity and database codes
resolve to user-facing messages through fixed lookup tables; unknown errors
only expose their raw message when ``DEBUG`` is on.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from django.conf import settings
from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError, IntegrityError, OperationalError
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import set_rollback

logger = logging.getLogger(__name__)

GENERIC_MESSAGE = "An unexpected error occurred. Please try again."

AUTH_ERROR_MESSAGES = {
    "auth/user-not-found": "No account found with this email address.",
    "auth/wrong-password": "Incorrect password. Please try again.",
    "auth/email-already-in-use": "An account with this email already exists.",
    "auth/weak-password": "Password should be at least 6 characters long.",
    "auth/invalid-email": "Please enter a valid email address.",
    "auth/user-disabled": "This account has been disabled.",
    "auth/too-many-requests": "Too many failed attempts. Please try again later.",
    "auth/invalid-token": "Your session has expired. Please sign in again.",
}

DB_ERROR_MESSAGES = {
    "db/permission-denied": "You don't have permission to access this resource.",
    "db/not-found": "The requested resource was not found.",
    "db/already-exists": "This resource already exists.",
    "db/resource-exhausted": "Too many requests. Please try again later.",
    "db/failed-precondition": "The operation failed due to a conflict.",
    "db/aborted": "The operation was aborted. Please try again.",
    "db/internal": "An internal error occurred. Please try again.",
    "db/unavailable": "The service is temporarily unavailable. Please try again.",
    "db/unauthenticated": "You must be signed in to perform this action.",
    "db/deadline-exceeded": "The operation timed out. Please try again.",
    "db/invalid-argument": "Invalid data provided. Please check your input.",
}

ERROR_MESSAGES = {**AUTH_ERROR_MESSAGES, **DB_ERROR_MESSAGES}

ERROR_STATUS = {
    "auth/user-not-found": status.HTTP_401_UNAUTHORIZED,
    "auth/wrong-password": status.HTTP_401_UNAUTHORIZED,
    "auth/email-already-in-use": status.HTTP_400_BAD_REQUEST,
    "auth/weak-password": status.HTTP_400_BAD_REQUEST,
    "auth/invalid-email": status.HTTP_400_BAD_REQUEST,
    "auth/user-disabled": status.HTTP_403_FORBIDDEN,
    "auth/too-many-requests": status.HTTP_429_TOO_MANY_REQUESTS,
    "auth/invalid-token": status.HTTP_401_UNAUTHORIZED,
    "db/permission-denied": status.HTTP_403_FORBIDDEN,
    "db/not-found": status.HTTP_404_NOT_FOUND,
    "db/already-exists": status.HTTP_409_CONFLICT,
    "db/resource-exhausted": status.HTTP_429_TOO_MANY_REQUESTS,
    "db/failed-precondition": status.HTTP_409_CONFLICT,
    "db/aborted": status.HTTP_409_CONFLICT,
    "db/internal": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "db/unavailable": status.HTTP_503_SERVICE_UNAVAILABLE,
    "db/unauthenticated": status.HTTP_401_UNAUTHORIZED,
    "db/deadline-exceeded": status.HTTP_504_GATEWAY_TIMEOUT,
    "db/invalid-argument": status.HTTP_400_BAD_REQUEST,
}


@dataclass
class AppError:
    """A classified error as shown to the user."""

    code: str
    message: str
    detail: Any = None
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def as_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "detail": self.detail}


class QuizAppError(Exception):
    """Application error raised by the service layer."""

    def __init__(self, code: str, message: Optional[str] = None, detail: Any = None):
        self.code = code
        self.message = message or error_message(code)
        self.detail = detail
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return ERROR_STATUS.get(self.code, status.HTTP_400_BAD_REQUEST)


def error_message(code: str) -> str:
    """Return the user-facing message for a known error code."""
    return ERROR_MESSAGES.get(code, GENERIC_MESSAGE)


def _from_code(code: str, detail: Any = None, message: Optional[str] = None) -> AppError:
    return AppError(
        code=code,
        message=message or error_message(code),
        detail=detail,
        status_code=ERROR_STATUS.get(code, status.HTTP_500_INTERNAL_SERVER_ERROR),
    )


def _debug_detail(exc: Exception) -> Optional[dict]:
    if settings.DEBUG:
        return {"original_message": str(exc), "type": type(exc).__name__}
    return None


def classify_exception(exc: Exception) -> AppError:
    """Map any exception onto the stable error taxonomy."""
    if isinstance(exc, QuizAppError):
        return AppError(exc.code, exc.message, exc.detail, exc.status_code)

    if isinstance(exc, exceptions.ValidationError):
        return _from_code("db/invalid-argument", detail=exc.detail)
    if isinstance(exc, DjangoValidationError):
        detail = exc.message_dict if hasattr(exc, "error_dict") else exc.messages
        return _from_code("db/invalid-argument", detail=detail)

    if isinstance(exc, (Http404, exceptions.NotFound)):
        return _from_code("db/not-found")
    if isinstance(exc, exceptions.PermissionDenied):
        custom = str(exc.detail) if str(exc.detail) != str(exc.default_detail) else None
        return _from_code("db/permission-denied", message=custom)
    if isinstance(exc, DjangoPermissionDenied):
        return _from_code("db/permission-denied")
    if isinstance(exc, exceptions.NotAuthenticated):
        return _from_code("db/unauthenticated")
    if isinstance(exc, exceptions.AuthenticationFailed):
        return _from_code("auth/invalid-token", detail=_debug_detail(exc))
    if isinstance(exc, exceptions.Throttled):
        return _from_code("auth/too-many-requests", detail={"wait": exc.wait})
    if isinstance(exc, exceptions.APIException):
        return AppError(
            code=f"request/{exc.default_code}",
            message=str(exc.detail),
            status_code=exc.status_code,
        )

    if isinstance(exc, IntegrityError):
        return _from_code("db/already-exists", detail=_debug_detail(exc))
    if isinstance(exc, OperationalError):
        return _from_code("db/unavailable", detail=_debug_detail(exc))
    if isinstance(exc, DatabaseError):
        return _from_code("db/internal", detail=_debug_detail(exc))

    return AppError(
        code="unknown-error",
        message=str(exc) if settings.DEBUG and str(exc) else GENERIC_MESSAGE,
        detail=_debug_detail(exc),
    )


def log_error(exc: Exception, context: str = "unknown") -> AppError:
    """Classify and log an error, returning the classified form."""
    app_error = classify_exception(exc)
    if app_error.status_code >= 500:
        logger.error("[%s] %s: %s", context, app_error.code, exc, exc_info=exc)
    else:
        logger.info("[%s] %s: %s", context, app_error.code, app_error.message)
    return app_error


def exception_handler(exc, context):
    """DRF exception handler rendering every failure in the error taxonomy."""
    view = context.get("view")
    label = type(view).__name__ if view is not None else "api"
    app_error = log_error(exc, label)

    set_rollback()
    response = Response(app_error.as_dict(), status=app_error.status_code)
    if isinstance(exc, exceptions.APIException):
        auth_header = getattr(exc, "auth_header", None)
        if auth_header:
            response["WWW-Authenticate"] = auth_header
        wait = getattr(exc, "wait", None)
        if wait:
            response["Retry-After"] = str(int(wait))
    return response


def fetch_or_empty(fetch: Callable[[], Any], label: str, warnings: List[str]) -> list:
    """Run one data source, degrading to an empty list when it fails.

    Only listing sources go through here; a failure is logged and reported
    back to the caller as a warning instead of failing the whole response.
    """
    try:
        return list(fetch())
    except Exception as exc:
        log_error(exc, label)
        warnings.append(f"Some data could not be loaded ({label}). Please try again later.")
        return []
