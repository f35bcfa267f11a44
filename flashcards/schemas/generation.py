"""
Generation schemas.
"""
from pydantic import BaseModel, Field
from typing import List, Literal, Optional
from datetime import datetime
from flashcards.models.enums import FlashcardSource
from flashcards.schemas.common import PaginationMeta
from flashcards.schemas.flashcard import FlashcardResponse

SOURCE_TEXT_MIN_LENGTH = 1000
SOURCE_TEXT_MAX_LENGTH = 10000


class CreateGenerationRequest(BaseModel):
    """Request schema for POST /generations."""
    source_text: str = Field(
        ...,
        min_length=SOURCE_TEXT_MIN_LENGTH,
        max_length=SOURCE_TEXT_MAX_LENGTH,
        description="Text to extract flashcards from (1000-10000 characters)",
    )


class FlashcardProposal(BaseModel):
    """An AI suggestion that has not been saved as a flashcard."""
    temp_id: str
    front: str
    back: str
    source: FlashcardSource = FlashcardSource.AI_FULL  # Always ai-full until edited


class CreateGenerationResponse(BaseModel):
    generation_id: int
    flashcards_proposals: List[FlashcardProposal]
    generated_count: int


class GenerationSummary(BaseModel):
    id: int
    model: str
    generated_count: int
    accepted_unedited_count: Optional[int] = None
    accepted_edited_count: Optional[int] = None
    source_text_length: int
    generation_duration: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class GenerationsListQuery(BaseModel):
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)
    sort: Literal["created_at", "generation_duration"] = "created_at"
    order: Literal["asc", "desc"] = "desc"


class GenerationsListResponse(BaseModel):
    items: List[GenerationSummary]
    pagination: PaginationMeta


class GenerationDetailResponse(BaseModel):
    generation: GenerationSummary
    flashcards: List[FlashcardResponse]


class GenerationErrorLogResponse(BaseModel):
    id: int
    model: str
    source_text_hash: str
    source_text_length: int
    error_code: str
    error_message: str
    created_at: datetime

    class Config:
        from_attributes = True
