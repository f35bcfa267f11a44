"""
HTTP client for this service's REST API, used by review front-ends.
"""
import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError as PydanticValidationError

from flashcards.core.exceptions import ApiRequestError
from flashcards.schemas.flashcard import CreateFlashcardItem, CreateFlashcardsResponse, FlashcardResponse
from flashcards.schemas.generation import CreateGenerationResponse

logger = logging.getLogger(__name__)

ResponseModel = TypeVar("ResponseModel", bound=BaseModel)

DEFAULT_TIMEOUT_SECONDS = 90.0


def _parse(schema: Type[ResponseModel], data: Any) -> ResponseModel:
    try:
        return schema.model_validate(data)
    except PydanticValidationError as e:
        logger.error(f"Unexpected {schema.__name__} body: {str(e)}")
        raise ApiRequestError("internal_error", "Broken response data") from e


class FlashcardsApiClient:
    """
    Calls ``/generations`` and ``/flashcards`` on behalf of one user.

    Error responses are raised as ``ApiRequestError`` carrying the ``code``
    from the ``{"error": {...}}`` body.
    """

    def __init__(
        self,
        base_url: str,
        user_id: int,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.user_id = user_id
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    async def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Any:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                transport=self._transport,
                timeout=self.timeout_seconds,
                headers={"X-User-Id": str(self.user_id)},
            ) as client:
                response = await client.request(method, path, json=json)
        except httpx.TimeoutException as e:
            logger.error(f"Request {method} {path} timed out: {str(e)}")
            raise ApiRequestError("upstream_error", "Request timed out") from e
        except httpx.TransportError as e:
            logger.error(f"Request {method} {path} failed: {str(e)}")
            raise ApiRequestError("network_error", "Network request failed") from e
        except httpx.HTTPError as e:
            logger.error(f"Request {method} {path} failed: {str(e)}")
            raise ApiRequestError("internal_error", "Broken response data") from e

        try:
            data = response.json()
        except ValueError:
            data = None

        if not response.is_success:
            error = data.get("error") if isinstance(data, dict) else None
            if isinstance(error, dict) and error.get("code"):
                raise ApiRequestError(error["code"], error.get("message") or "", response.status_code)
            raise ApiRequestError("internal_error", f"HTTP {response.status_code}", response.status_code)

        if data is None:
            raise ApiRequestError("internal_error", "Broken response data", response.status_code)
        return data

    async def generate(self, source_text: str) -> CreateGenerationResponse:
        data = await self._request("POST", "/generations", json={"source_text": source_text})
        return _parse(CreateGenerationResponse, data)

    async def create_flashcards(self, items: List[CreateFlashcardItem]) -> List[FlashcardResponse]:
        payload = {"flashcards": [item.model_dump(mode="json") for item in items]}
        data = await self._request("POST", "/flashcards", json=payload)
        return _parse(CreateFlashcardsResponse, data).flashcards
