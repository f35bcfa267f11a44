"""
Custom exceptions for the application.

Application exceptions carry the API error ``code`` and HTTP ``status_code``
used by the handlers in ``flashcards.main``. Gateway exceptions carry a
``GatewayErrorCode`` that callers branch on; their messages are for logs only.
"""
from enum import Enum
from typing import Any, Optional


class FlashcardsException(Exception):
    """Base exception for all application exceptions."""
    code = "internal_error"
    status_code = 500


class ValidationError(FlashcardsException):
    """Raised when validation fails."""
    code = "invalid_request"
    status_code = 400


class AuthenticationError(FlashcardsException):
    """Raised when authentication fails or is missing."""
    code = "unauthorized"
    status_code = 401


class NotFoundError(FlashcardsException):
    """Raised when a requested resource is not found."""
    code = "not_found"
    status_code = 404


class ConflictError(FlashcardsException):
    """Raised when there's a conflict (e.g., duplicate entry)."""
    code = "conflict"
    status_code = 409


class InternalError(FlashcardsException):
    """Raised when a dependency such as the database fails."""
    code = "internal_error"
    status_code = 500


class GatewayErrorCode(str, Enum):
    """Closed set of failure codes reported by the LLM gateway client."""
    CONFIG_ERROR = "CONFIG_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    AUTH_ERROR = "AUTH_ERROR"
    RATE_LIMITED = "RATE_LIMITED"
    TIMEOUT = "TIMEOUT"
    NETWORK_ERROR = "NETWORK_ERROR"
    BAD_RESPONSE = "BAD_RESPONSE"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    UNKNOWN = "UNKNOWN"


class GatewayError(FlashcardsException):
    """Base exception for LLM gateway failures."""
    gateway_code = GatewayErrorCode.UNKNOWN

    def __init__(self, message: str, status: Optional[int] = None, details: Any = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.details = details

    @property
    def code(self) -> str:  # type: ignore[override]
        return self.gateway_code.value


class GatewayConfigError(GatewayError):
    gateway_code = GatewayErrorCode.CONFIG_ERROR


class GatewayValidationError(GatewayError):
    gateway_code = GatewayErrorCode.VALIDATION_ERROR


class GatewayAuthError(GatewayError):
    gateway_code = GatewayErrorCode.AUTH_ERROR


class RateLimitedError(GatewayError):
    gateway_code = GatewayErrorCode.RATE_LIMITED


class GatewayTimeoutError(GatewayError):
    gateway_code = GatewayErrorCode.TIMEOUT


class GatewayNetworkError(GatewayError):
    gateway_code = GatewayErrorCode.NETWORK_ERROR


class BadResponseError(GatewayError):
    gateway_code = GatewayErrorCode.BAD_RESPONSE


class UpstreamError(GatewayError):
    gateway_code = GatewayErrorCode.UPSTREAM_ERROR


class GatewayUnknownError(GatewayError):
    gateway_code = GatewayErrorCode.UNKNOWN


class ApiRequestError(FlashcardsException):
    """Raised by the REST client when the API answers with an error body or cannot be reached."""

    def __init__(self, code: str, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code
