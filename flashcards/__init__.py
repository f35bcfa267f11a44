"""AI-assisted flashcard generation, review and management."""

__version__ = "1.0.0"
