"""
Shared endpoint dependencies.
"""
from typing import Optional, Union

from fastapi import Depends, Header
from sqlmodel import Session

from flashcards.core.config import settings
from flashcards.core.database import get_session
from flashcards.core.exceptions import AuthenticationError
from flashcards.models import User
from flashcards.services.gateway_client import OpenRouterClient
from flashcards.services.mock_gateway import MockGatewayClient


async def get_current_user(
    x_user_id: Optional[str] = Header(None),
    session: Session = Depends(get_session)
) -> User:
    """Resolve the caller from the X-User-Id header."""
    if not x_user_id or not x_user_id.strip().isdigit():
        raise AuthenticationError("Authentication required")
    user = session.get(User, int(x_user_id))
    if not user:
        raise AuthenticationError("Authentication required")
    return user


def get_gateway() -> Union[OpenRouterClient, MockGatewayClient]:
    """
    Build a gateway client for one request.

    Raises:
        GatewayConfigError: API key, URL, model or parameters are invalid
    """
    if settings.openrouter_mock_enabled:
        return MockGatewayClient()
    return OpenRouterClient(
        api_key=settings.openrouter_api_key,
        model=settings.openrouter_model,
        params={
            "temperature": settings.openrouter_temperature,
            "max_tokens": settings.openrouter_max_tokens,
        },
        api_url=settings.openrouter_api_url,
        timeout_seconds=settings.openrouter_timeout_seconds,
    )


def get_gateway_secrets() -> tuple:
    """Values to mask out of anything persisted or logged."""
    return (settings.openrouter_api_key,) if settings.openrouter_api_key else ()
