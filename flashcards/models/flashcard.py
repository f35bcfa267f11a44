"""
Flashcard model.
"""
from sqlmodel import SQLModel, Field
from sqlalchemy import DateTime
from typing import Optional
from datetime import datetime
from flashcards.utils.time_utils import utc_now
from flashcards.models.enums import FlashcardSource


class Flashcard(SQLModel, table=True):
    """Flashcard table - persisted cards owned by a user."""
    __tablename__ = "flashcard"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    front: str = Field(max_length=200)
    back: str = Field(max_length=500)
    # 'ai-full', 'ai-edited' or 'manual' - stored as string, compared against FlashcardSource
    source: str = Field(default=FlashcardSource.MANUAL.value, max_length=16)
    generation_id: Optional[int] = Field(default=None, foreign_key="generation.id", index=True)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
