"""
Generation error log model.
"""
from sqlmodel import SQLModel, Field
from sqlalchemy import DateTime
from typing import Optional
from datetime import datetime
from flashcards.utils.time_utils import utc_now


class GenerationErrorLog(SQLModel, table=True):
    """Failed gateway calls, keyed by the hash of the submitted source text."""
    __tablename__ = "generation_error_log"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    model: str
    source_text_hash: str = Field(index=True)
    source_text_length: int
    error_code: str
    error_message: str = Field(max_length=500)  # Truncated and redacted
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
