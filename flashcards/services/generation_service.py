"""
Generation service: turns source text into flashcard proposals via the LLM gateway.
"""
# pyright: reportAttributeAccessIssue=false
# pyright: reportArgumentType=false
import logging
import time
import uuid
from typing import List, Optional, Protocol

from pydantic import BaseModel, ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select, func

from flashcards.core.exceptions import BadResponseError, GatewayError, InternalError, NotFoundError
from flashcards.models import Flashcard, Generation, GenerationErrorLog
from flashcards.schemas.common import PaginationMeta
from flashcards.schemas.flashcard import BACK_MAX_LENGTH, FRONT_MAX_LENGTH, FlashcardResponse
from flashcards.schemas.gateway import ChatResult, JsonSchemaSpec, ResponseFormat
from flashcards.schemas.generation import (
    CreateGenerationResponse,
    FlashcardProposal,
    GenerationDetailResponse,
    GenerationErrorLogResponse,
    GenerationsListQuery,
    GenerationsListResponse,
    GenerationSummary,
)
from flashcards.utils.log_utils import redact_text
from flashcards.utils.text_utils import hash_source_text, truncate

logger = logging.getLogger(__name__)

ERROR_MESSAGE_MAX_LENGTH = 500

FLASHCARD_SYSTEM_MESSAGE = (
    "You are an assistant that creates study flashcards. Read the text supplied by the user and "
    "extract the most important facts, definitions and concepts as question/answer pairs. "
    "Each flashcard has a 'front' (a question or prompt, at most 200 characters) and a 'back' "
    "(the answer, at most 500 characters). Write the flashcards in the language of the source text. "
    "Do not invent facts that are not supported by the text. "
    "Respond only with JSON matching the provided schema."
)

FLASHCARD_RESPONSE_FORMAT = ResponseFormat(
    json_schema=JsonSchemaSpec(
        name="flashcard_proposals",
        schema={
            "type": "object",
            "properties": {
                "flashcards": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "front": {"type": "string", "maxLength": FRONT_MAX_LENGTH},
                            "back": {"type": "string", "maxLength": BACK_MAX_LENGTH},
                        },
                        "required": ["front", "back"],
                        "additionalProperties": False,
                    },
                }
            },
            "required": ["flashcards"],
            "additionalProperties": False,
        },
    )
)


class ChatGateway(Protocol):
    """What the generation service needs from a gateway client."""
    model: str

    def set_system_message(self, system_message: Optional[str]) -> None: ...

    def set_response_format(self, response_format: Optional[ResponseFormat]) -> None: ...

    async def send(self, user_message: str) -> ChatResult: ...


class _ProposalPayloadItem(BaseModel):
    front: str
    back: str


class _ProposalPayload(BaseModel):
    flashcards: List[_ProposalPayloadItem]


class GenerationService:
    """
    Orchestrates one generation request end to end.

    The generation row is written only after the gateway call succeeds; a
    failed call leaves an error-log row instead (best effort).
    """

    def __init__(self, session: Session, gateway: ChatGateway, secrets: tuple = ()):
        self.session = session
        self.gateway = gateway
        # Values masked out of persisted error messages (e.g. the gateway API key)
        self.secrets = secrets

    async def generate_flashcard_proposals(self, source_text: str, user_id: int) -> CreateGenerationResponse:
        """
        Generate proposals for ``source_text`` and record the generation.

        Length limits are enforced by the API schema before this is called.

        Raises:
            GatewayError: the gateway call failed (re-raised unchanged)
            InternalError: the generation row could not be saved
        """
        source_text_hash = hash_source_text(source_text)
        started_at = time.perf_counter()

        self.gateway.set_system_message(FLASHCARD_SYSTEM_MESSAGE)
        self.gateway.set_response_format(FLASHCARD_RESPONSE_FORMAT)

        try:
            result = await self.gateway.send(source_text)
            proposals = self._build_proposals(result)
        except GatewayError as e:
            self._log_gateway_error(user_id, source_text, source_text_hash, e)
            raise

        duration_ms = int(round((time.perf_counter() - started_at) * 1000))

        generation = Generation(
            user_id=user_id,
            model=self.gateway.model,
            generated_count=len(proposals),
            accepted_unedited_count=None,
            accepted_edited_count=None,
            source_text_hash=source_text_hash,
            source_text_length=len(source_text),
            generation_duration=duration_ms,
        )
        try:
            self.session.add(generation)
            self.session.commit()
            self.session.refresh(generation)
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to insert generation record for user {user_id}: {str(e)}")
            raise InternalError("Failed to insert generation record") from e

        logger.info(
            f"Generation {generation.id} for user {user_id}: {len(proposals)} proposals "
            f"from {len(source_text)} characters in {duration_ms} ms"
        )

        return CreateGenerationResponse(
            generation_id=generation.id,
            flashcards_proposals=proposals,
            generated_count=generation.generated_count,
        )

    def _build_proposals(self, result: ChatResult) -> List[FlashcardProposal]:
        try:
            payload = _ProposalPayload.model_validate(result.parsed_json)
        except PydanticValidationError as e:
            raise BadResponseError("Response JSON does not match the flashcard schema", details=str(e)) from e

        proposals = []
        for item in payload.flashcards:
            front, back = item.front.strip(), item.back.strip()
            if not front or not back or len(front) > FRONT_MAX_LENGTH or len(back) > BACK_MAX_LENGTH:
                logger.warning(f"Dropping proposal outside length limits (front={len(front)}, back={len(back)})")
                continue
            proposals.append(FlashcardProposal(temp_id=str(uuid.uuid4()), front=front, back=back))

        if not proposals:
            raise BadResponseError("Gateway returned no usable flashcards")
        return proposals

    def _log_gateway_error(self, user_id: int, source_text: str, source_text_hash: str, error: GatewayError) -> None:
        message = redact_text(error.message or "Upstream AI provider error", self.secrets)
        entry = GenerationErrorLog(
            user_id=user_id,
            model=self.gateway.model,
            source_text_hash=source_text_hash,
            source_text_length=len(source_text),
            error_code=error.code,
            error_message=truncate(message, ERROR_MESSAGE_MAX_LENGTH),
        )
        try:
            self.session.add(entry)
            self.session.commit()
        except SQLAlchemyError as e:
            # Never mask the gateway error with a logging failure
            self.session.rollback()
            logger.error(f"Failed to store generation error log for user {user_id}: {str(e)}")


def list_generations(session: Session, user_id: int, query: GenerationsListQuery) -> GenerationsListResponse:
    """Page through a user's generations."""
    total_items = session.exec(
        select(func.count(Generation.id)).where(Generation.user_id == user_id)
    ).one()

    sort_column = getattr(Generation, query.sort)
    statement = (
        select(Generation)
        .where(Generation.user_id == user_id)
        .order_by(sort_column.asc() if query.order == "asc" else sort_column.desc())
        .offset((query.page - 1) * query.limit)
        .limit(query.limit)
    )
    generations = session.exec(statement).all()

    return GenerationsListResponse(
        items=[GenerationSummary.model_validate(generation) for generation in generations],
        pagination=PaginationMeta.from_counts(query.page, query.limit, total_items),
    )


def get_generation_detail(session: Session, user_id: int, generation_id: int) -> GenerationDetailResponse:
    """
    Return a generation with the flashcards saved from it.

    Raises:
        NotFoundError: unknown id or a generation owned by another user
    """
    generation = session.get(Generation, generation_id)
    if not generation or generation.user_id != user_id:
        raise NotFoundError("Generation not found")

    flashcards = session.exec(
        select(Flashcard)
        .where(Flashcard.generation_id == generation_id, Flashcard.user_id == user_id)
        .order_by(Flashcard.created_at.asc())
    ).all()

    return GenerationDetailResponse(
        generation=GenerationSummary.model_validate(generation),
        flashcards=[FlashcardResponse.model_validate(flashcard) for flashcard in flashcards],
    )


def list_generation_error_logs(session: Session, user_id: int) -> List[GenerationErrorLogResponse]:
    logs = session.exec(
        select(GenerationErrorLog)
        .where(GenerationErrorLog.user_id == user_id)
        .order_by(GenerationErrorLog.created_at.desc())
    ).all()
    return [GenerationErrorLogResponse.model_validate(log) for log in logs]
