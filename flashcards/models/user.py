"""
User model.
"""
from sqlmodel import SQLModel, Field
from sqlalchemy import DateTime
from typing import Optional
from datetime import datetime
from flashcards.utils.time_utils import utc_now
import hashlib


class User(SQLModel, table=True):
    """User table - stores account credentials."""
    __tablename__ = "user"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(unique=True, index=True)  # Login identifier
    password: str  # Hashed password
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))

    @staticmethod
    def hash_password(password: str) -> str:
        """Simple password hashing using SHA256."""
        return hashlib.sha256(password.encode()).hexdigest()

    def verify_password(self, password: str) -> bool:
        """Verify a password against the stored hash."""
        return self.password == self.hash_password(password)
