"""
Generation model.
"""
from sqlmodel import SQLModel, Field
from sqlalchemy import DateTime
from typing import Optional
from datetime import datetime
from flashcards.utils.time_utils import utc_now


class Generation(SQLModel, table=True):
    """Generation table - one row per successful AI extraction call."""
    __tablename__ = "generation"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    model: str  # Gateway model identifier used for the call
    generated_count: int = Field(default=0)
    # Updated as proposals are saved/edited; null until the first save
    accepted_unedited_count: Optional[int] = Field(default=None)
    accepted_edited_count: Optional[int] = Field(default=None)
    source_text_hash: str = Field(index=True)  # MD5, for dedup/analytics only
    source_text_length: int
    generation_duration: int = Field(default=0)  # Milliseconds
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
