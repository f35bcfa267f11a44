"""
Flashcard schemas.
"""
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Literal, Optional
from datetime import datetime
from flashcards.models.enums import FlashcardSource, AI_SOURCES
from flashcards.schemas.common import PaginationMeta

FRONT_MAX_LENGTH = 200
BACK_MAX_LENGTH = 500


class FlashcardContent(BaseModel):
    """Front/back text of a card, shared by proposal edits and card updates."""
    front: str = Field(..., min_length=1, max_length=FRONT_MAX_LENGTH)
    back: str = Field(..., min_length=1, max_length=BACK_MAX_LENGTH)

    @field_validator("front", "back")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class CreateFlashcardItem(BaseModel):
    """One card of a POST /flashcards batch."""
    front: str = Field(..., min_length=1, max_length=FRONT_MAX_LENGTH)
    back: str = Field(..., min_length=1, max_length=BACK_MAX_LENGTH)
    source: FlashcardSource
    # Required key: a number for AI cards, explicitly null for manual ones
    generation_id: Optional[int] = Field(...)

    @field_validator("front", "back", mode="before")
    @classmethod
    def strip_text(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value

    @model_validator(mode="after")
    def check_generation_pairing(self):
        is_ai = self.source in AI_SOURCES
        if is_ai != (self.generation_id is not None):
            raise ValueError(
                "generation_id is required for AI-generated flashcards and must be null for manual ones."
            )
        return self


class CreateFlashcardsRequest(BaseModel):
    """Request schema for creating flashcards in one batch."""
    flashcards: List[CreateFlashcardItem] = Field(..., min_length=1)


class UpdateFlashcardRequest(BaseModel):
    """Partial update of a card's content."""
    front: Optional[str] = Field(None, min_length=1, max_length=FRONT_MAX_LENGTH)
    back: Optional[str] = Field(None, min_length=1, max_length=BACK_MAX_LENGTH)

    @field_validator("front", "back", mode="before")
    @classmethod
    def strip_text(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value

    @model_validator(mode="after")
    def at_least_one_field(self):
        if self.front is None and self.back is None:
            raise ValueError("At least one of front or back must be provided")
        return self


class FlashcardResponse(BaseModel):
    """Flashcard response schema."""
    id: int
    front: str
    back: str
    source: FlashcardSource
    generation_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CreateFlashcardsResponse(BaseModel):
    flashcards: List[FlashcardResponse]


class FlashcardsListQuery(BaseModel):
    """Query parameters for GET /flashcards."""
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)
    q: Optional[str] = None
    sort: Literal["created_at", "updated_at"] = "created_at"
    order: Literal["asc", "desc"] = "desc"
    source: Optional[FlashcardSource] = None


class FlashcardsListResponse(BaseModel):
    items: List[FlashcardResponse]
    pagination: PaginationMeta
