"""
Client for an OpenRouter-compatible chat-completion API.

One ``send`` issues exactly one HTTP request under a single timeout budget and
never retries. Every failure is raised as a ``GatewayError`` subclass whose
``code`` is one of ``GatewayErrorCode``.
"""
import asyncio
import contextlib
import json
import uuid
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from flashcards.core.exceptions import (
    BadResponseError,
    GatewayAuthError,
    GatewayConfigError,
    GatewayError,
    GatewayNetworkError,
    GatewayTimeoutError,
    GatewayUnknownError,
    GatewayValidationError,
    RateLimitedError,
    UpstreamError,
)
from flashcards.schemas.gateway import ChatMessage, ChatResult, JsonSchemaSpec, ModelParams, ResponseFormat
from flashcards.utils.log_utils import RedactingLogger

DEFAULT_API_URL = "https://openrouter.ai/api/v1"
DEFAULT_TIMEOUT_SECONDS = 30.0


class OpenRouterClient:
    """
    Chat-completion client.

    Instance state is configuration only (model, params, system message,
    response format). Use one instance per concurrent caller; changing
    configuration while a ``send`` is in flight is not supported.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        params: Optional[Dict[str, Any]] = None,
        api_url: str = DEFAULT_API_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not api_key or not api_key.strip():
            raise GatewayConfigError("Invalid gateway configuration: API key is required")
        if not model or not model.strip():
            raise GatewayConfigError("Invalid gateway configuration: model name is required")
        if not api_url or not api_url.startswith(("http://", "https://")):
            raise GatewayConfigError(f"Invalid gateway configuration: bad API URL {api_url!r}")
        if timeout_seconds is None or timeout_seconds <= 0:
            raise GatewayConfigError("Invalid gateway configuration: timeout must be positive")
        try:
            model_params = ModelParams(**(params or {}))
        except PydanticValidationError as e:
            raise GatewayConfigError("Invalid gateway configuration: bad model parameters", details=e.errors()) from e

        self.api_key = api_key
        self.api_url = api_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.system_message: Optional[str] = None
        self.response_format: Optional[ResponseFormat] = None
        self._model = model
        self._model_params = model_params
        self._transport = transport
        self.logger = RedactingLogger(__name__, prefix="[OpenRouter] ")

    @property
    def model(self) -> str:
        return self._model

    @property
    def model_params(self) -> Dict[str, Any]:
        return self._model_params.model_dump(exclude_none=True)

    def configure(self, model: Optional[str] = None, params: Optional[Dict[str, Any]] = None) -> None:
        """
        Change the target model and/or generation parameters.

        Raises:
            GatewayValidationError: empty model name, or a parameter outside
                temperature [0, 2], top_p [0, 1], penalties [-2, 2], max_tokens > 0
        """
        if model is not None:
            if not isinstance(model, str) or not model.strip():
                raise GatewayValidationError("Model name must be a non-empty string")
        if params is not None:
            try:
                new_params = ModelParams(**params)
            except PydanticValidationError as e:
                raise GatewayValidationError("Invalid model parameters", details=e.errors()) from e
            self._model_params = new_params
        if model is not None:
            self._model = model

    def set_system_message(self, system_message: Optional[str]) -> None:
        self.system_message = system_message

    def set_response_format(self, response_format: Optional[ResponseFormat]) -> None:
        """Declare (or clear, with None) the JSON schema responses must follow."""
        if response_format is not None:
            spec = response_format.json_schema
            if not spec.name or not spec.name.strip() or not spec.schema_:
                raise GatewayValidationError("Invalid response format: missing name or schema")
        self.response_format = response_format

    def set_response_schema(self, name: Optional[str], schema: Optional[Dict[str, Any]]) -> None:
        """Shortcut for ``set_response_format`` from a name and a JSON schema body."""
        if name is None and schema is None:
            self.set_response_format(None)
            return
        if not name or not schema:
            raise GatewayValidationError("Invalid response format: missing name or schema")
        self.set_response_format(ResponseFormat(json_schema=JsonSchemaSpec(name=name, schema=schema)))

    async def send(self, user_message: str, cancel_event: Optional[asyncio.Event] = None) -> ChatResult:
        """
        Send one chat completion request.

        Args:
            user_message: Content of the user message (must not be blank)
            cancel_event: Optional event; setting it abandons the request

        Returns:
            ChatResult with the raw text, the raw response and, when a
            response format is declared, the parsed JSON value

        Raises:
            GatewayError: subclass matching the failure (see module docstring)
        """
        if not user_message or not user_message.strip():
            raise GatewayValidationError("User message cannot be empty")

        body = self.build_request_body(self.build_messages(user_message))
        request_id = uuid.uuid4().hex[:8]
        self.logger.debug("Sending chat completion", {
            "request_id": request_id,
            "model": self._model,
            "message_count": len(body["messages"]),
            "json_schema": self.response_format.json_schema.name if self.response_format else None,
        })

        try:
            raw = await self._call_api(body, cancel_event)
            result = self._parse_chat_response(raw)
            result = self._parse_json_if_needed(result)
        except GatewayError as e:
            self.logger.warning("Chat completion failed", {
                "request_id": request_id,
                "code": e.code,
                "status": e.status,
                "message": e.message,
            })
            raise
        except Exception as e:
            self.logger.error("Unexpected gateway failure", {"request_id": request_id, "error": str(e)})
            raise GatewayUnknownError(str(e) or "Unknown error occurred", details=e) from e

        self.logger.info("Chat completion succeeded", {"request_id": request_id, "model": self._model})
        return result

    def build_messages(self, user_message: str) -> List[ChatMessage]:
        messages = []
        if self.system_message:
            messages.append(ChatMessage(role="system", content=self.system_message))
        messages.append(ChatMessage(role="user", content=user_message))
        return messages

    def build_request_body(self, messages: List[ChatMessage]) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "model": self._model,
            "messages": [message.model_dump() for message in messages],
            **self.model_params,
        }
        if self.response_format is not None:
            body["response_format"] = self.response_format.model_dump(by_alias=True)
        return body

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "X-Title": "AI Flashcards",
        }

    async def _post(self, body: Dict[str, Any]) -> httpx.Response:
        # The outer asyncio.wait enforces the budget, so httpx gets no timeout of its own
        async with httpx.AsyncClient(transport=self._transport, timeout=None) as client:
            return await client.post(f"{self.api_url}/chat/completions", json=body, headers=self._headers())

    async def _call_api(self, body: Dict[str, Any], cancel_event: Optional[asyncio.Event]) -> Any:
        request_task = asyncio.ensure_future(self._post(body))
        waiters = {request_task}
        cancel_task = None
        if cancel_event is not None:
            cancel_task = asyncio.ensure_future(cancel_event.wait())
            waiters.add(cancel_task)

        try:
            done, _ = await asyncio.wait(waiters, timeout=self.timeout_seconds, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in waiters:
                if not task.done():
                    task.cancel()

        if request_task not in done:
            # Let the cancelled request unwind before reporting
            with contextlib.suppress(asyncio.CancelledError):
                await request_task
            if cancel_task is not None and cancel_task in done:
                raise GatewayTimeoutError("Request cancelled")
            raise GatewayTimeoutError(f"Request timed out after {self.timeout_seconds}s")

        try:
            response = request_task.result()
        except httpx.TimeoutException as e:
            raise GatewayTimeoutError("Request timed out", details=str(e)) from e
        except httpx.TransportError as e:
            raise GatewayNetworkError("Network request failed", details=str(e)) from e

        if not response.is_success:
            error_body = self._read_error_body(response)
            if response.status_code in (401, 403):
                raise GatewayAuthError("Authentication failed", status=response.status_code, details=error_body)
            if response.status_code == 429:
                raise RateLimitedError("Rate limit exceeded", status=response.status_code, details=error_body)
            raise UpstreamError(
                f"Gateway API error (HTTP {response.status_code})", status=response.status_code, details=error_body
            )

        try:
            return response.json()
        except ValueError as e:
            raise BadResponseError("Response body is not valid JSON", status=response.status_code) from e

    @staticmethod
    def _read_error_body(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return response.text

    def _parse_chat_response(self, raw: Any) -> ChatResult:
        choices = raw.get("choices") if isinstance(raw, dict) else None
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            self.logger.error("Invalid response structure", {"raw": raw})
            raise BadResponseError("Invalid response structure from gateway", details=raw)

        message = choices[0].get("message")
        if not isinstance(message, dict):
            self.logger.error("Invalid response structure", {"raw": raw})
            raise BadResponseError("Invalid response structure from gateway", details=raw)

        content = message.get("content")
        if not isinstance(content, str):
            self.logger.error("Missing content in response", {"raw": raw})
            raise BadResponseError("Missing content in response", details=raw)

        return ChatResult(raw_text=content, raw_response=raw)

    def _parse_json_if_needed(self, result: ChatResult) -> ChatResult:
        if self.response_format is None:
            return result
        try:
            parsed = json.loads(result.raw_text)
        except ValueError as e:
            self.logger.error("Failed to parse JSON response", {"length": len(result.raw_text), "error": str(e)})
            raise BadResponseError("Failed to parse JSON response", details=str(e)) from e
        return result.model_copy(update={"parsed_json": parsed})
