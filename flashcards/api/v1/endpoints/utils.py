"""
Utility functions for endpoint error responses.
"""
from typing import Tuple

from fastapi import status
from fastapi.responses import JSONResponse

from flashcards.core.exceptions import GatewayError, GatewayErrorCode
from flashcards.schemas.common import ErrorDetail, ErrorResponse


def error_response(status_code: int, code: str, message: str) -> JSONResponse:
    body = ErrorResponse(error=ErrorDetail(code=code, message=message))
    return JSONResponse(status_code=status_code, content=body.model_dump())


def map_gateway_error(error: GatewayError) -> Tuple[int, str, str]:
    """
    Translate a gateway failure into (HTTP status, API code, canned message).

    Upstream messages and bodies are never passed through.
    """
    code = error.gateway_code
    if code == GatewayErrorCode.RATE_LIMITED:
        return (
            status.HTTP_429_TOO_MANY_REQUESTS,
            "service_unavailable",
            "AI service is currently rate limited. Please try again later.",
        )
    if code in (
        GatewayErrorCode.TIMEOUT,
        GatewayErrorCode.NETWORK_ERROR,
        GatewayErrorCode.UPSTREAM_ERROR,
        GatewayErrorCode.BAD_RESPONSE,
    ):
        return status.HTTP_502_BAD_GATEWAY, "upstream_error", "AI service provider error"
    if code in (GatewayErrorCode.AUTH_ERROR, GatewayErrorCode.CONFIG_ERROR):
        return status.HTTP_500_INTERNAL_SERVER_ERROR, "internal_error", "AI service configuration error"
    return status.HTTP_500_INTERNAL_SERVER_ERROR, "internal_error", "Internal server error during generation"


def gateway_error_response(error: GatewayError) -> JSONResponse:
    return error_response(*map_gateway_error(error))
