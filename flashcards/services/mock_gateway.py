"""
Deterministic stand-in for the chat-completion gateway.

Enabled with OPENROUTER_MOCK_ENABLED so the generation flow can run without
network access or an API key. Honours the same ``send`` contract as
``OpenRouterClient``.
"""
import asyncio
import json
from typing import Any, Dict, Optional

from flashcards.core.exceptions import GatewayTimeoutError, GatewayValidationError
from flashcards.schemas.gateway import ChatResult, ResponseFormat

MOCK_MODEL = "mock/flashcards"


class MockGatewayClient:
    def __init__(self, model: str = MOCK_MODEL, latency_seconds: float = 0.0):
        self.model = model
        self.latency_seconds = latency_seconds
        self.system_message: Optional[str] = None
        self.response_format: Optional[ResponseFormat] = None

    def configure(self, model: Optional[str] = None, params: Optional[Dict[str, Any]] = None) -> None:
        if model is not None:
            if not model.strip():
                raise GatewayValidationError("Model name must be a non-empty string")
            self.model = model

    def set_system_message(self, system_message: Optional[str]) -> None:
        self.system_message = system_message

    def set_response_format(self, response_format: Optional[ResponseFormat]) -> None:
        self.response_format = response_format

    async def _wait(self, cancel_event: Optional[asyncio.Event]) -> None:
        if cancel_event is None:
            await asyncio.sleep(self.latency_seconds)
            return
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=self.latency_seconds)
        except asyncio.TimeoutError:
            return
        raise GatewayTimeoutError("Request cancelled")

    async def send(self, user_message: str, cancel_event: Optional[asyncio.Event] = None) -> ChatResult:
        if not user_message or not user_message.strip():
            raise GatewayValidationError("User message cannot be empty")
        if cancel_event is not None and cancel_event.is_set():
            raise GatewayTimeoutError("Request cancelled")
        if self.latency_seconds:
            await self._wait(cancel_event)

        # One card per paragraph, capped at five
        paragraphs = [p.strip() for p in user_message.split("\n\n") if p.strip()][:5]
        payload = {
            "flashcards": [
                {
                    "front": f"What is the key point of passage {index}?",
                    "back": paragraph[:500],
                }
                for index, paragraph in enumerate(paragraphs, start=1)
            ]
        }
        text = json.dumps(payload)
        return ChatResult(raw_text=text, raw_response={"mock": True}, parsed_json=payload)
