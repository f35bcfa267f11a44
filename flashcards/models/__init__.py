"""
Models package - imports all models so SQLModel registers their tables.
"""
from flashcards.models.enums import FlashcardSource, AI_SOURCES
from flashcards.models.user import User
from flashcards.models.generation import Generation
from flashcards.models.flashcard import Flashcard
from flashcards.models.generation_error_log import GenerationErrorLog

__all__ = [
    'FlashcardSource',
    'AI_SOURCES',
    'User',
    'Generation',
    'Flashcard',
    'GenerationErrorLog',
]
