"""
Model enums.
"""
from enum import Enum


class FlashcardSource(str, Enum):
    """Origin of a flashcard's content."""
    AI_FULL = "ai-full"
    AI_EDITED = "ai-edited"
    MANUAL = "manual"


AI_SOURCES = (FlashcardSource.AI_FULL, FlashcardSource.AI_EDITED)
