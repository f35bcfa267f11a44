"""
User-facing messages for review notifications.

Server and gateway messages are never shown to the user; the error code
picks one of these instead.
"""

GENERIC_ERROR_MESSAGE = "Something went wrong on our side. Please try again."

COMMIT_ERROR_MESSAGES = {
    "invalid_request": "Some flashcards could not be saved because they are invalid.",
    "unauthorized": "Your session has expired. Please log in again.",
    "not_found": "The generation for these flashcards no longer exists.",
    "service_unavailable": "The service is busy right now. Please try again later.",
    "upstream_error": "The service is temporarily unavailable. Please try again.",
    "internal_error": "Failed to save flashcards. Please try again.",
}


def commit_success_message(count: int) -> str:
    noun = "flashcard" if count == 1 else "flashcards"
    return f"Saved {count} {noun}"


def commit_error_message(code: str) -> str:
    return COMMIT_ERROR_MESSAGES.get(code, GENERIC_ERROR_MESSAGE)
