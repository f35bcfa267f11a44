"""
Saves reviewed proposals as flashcards.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol

from flashcards.core.exceptions import FlashcardsException, ValidationError
from flashcards.review.messages import commit_error_message, commit_success_message
from flashcards.review.notifications import Notifier, notifier as default_notifier
from flashcards.review.state import ProposalItem, ReviewState
from flashcards.schemas.flashcard import CreateFlashcardItem, FlashcardResponse
from flashcards.services.flashcard_service import FlashcardService

logger = logging.getLogger(__name__)


class FlashcardStore(Protocol):
    async def create_flashcards(self, items: List[CreateFlashcardItem]) -> List[FlashcardResponse]: ...


class ServiceFlashcardStore:
    """In-process store writing through ``FlashcardService`` for one user."""

    def __init__(self, service: FlashcardService, user_id: int):
        self.service = service
        self.user_id = user_id

    async def create_flashcards(self, items: List[CreateFlashcardItem]) -> List[FlashcardResponse]:
        return self.service.create_flashcards(self.user_id, items)


@dataclass
class CommitResult:
    succeeded: bool
    count: int = 0
    error_code: Optional[str] = None


class BatchCommitter:
    """
    Submits a selection of proposals in a single store call.

    On success the submitted items leave the review state; on failure the
    state is left exactly as it was and the user is notified. There is no
    retry.
    """

    def __init__(self, state: ReviewState, store: FlashcardStore, notifier: Optional[Notifier] = None):
        self.state = state
        self.store = store
        self.notifier = notifier or default_notifier

    async def commit_accepted(self) -> CommitResult:
        """Save only the accepted proposals."""
        return await self._commit(self.state.accepted_items)

    async def commit_all(self) -> CommitResult:
        """Save every proposal that was not rejected."""
        return await self._commit(self.state.non_rejected_items)

    def _to_create_items(self, selection: List[ProposalItem]) -> List[CreateFlashcardItem]:
        if not selection:
            raise ValidationError("No flashcards selected to save")
        if self.state.generation_id is None:
            raise ValidationError("Cannot save proposals without a generation id")
        return [
            CreateFlashcardItem(
                front=item.front,
                back=item.back,
                source=item.source,
                generation_id=self.state.generation_id,
            )
            for item in selection
        ]

    async def _commit(self, selection: List[ProposalItem]) -> CommitResult:
        items = self._to_create_items(selection)
        temp_ids = [item.temp_id for item in selection]
        generation_id = self.state.generation_id

        try:
            saved = await self.store.create_flashcards(items)
        except FlashcardsException as e:
            logger.error(
                f"Failed to save {len(items)} flashcards for generation {generation_id}: {e.code} {str(e)}"
            )
            self.notifier.error(commit_error_message(e.code))
            return CommitResult(succeeded=False, error_code=e.code)

        self.state.remove(temp_ids)
        if self.state.non_rejected_count == 0:
            self.state.reset()

        logger.info(f"Saved {len(saved)} flashcards for generation {generation_id}")
        self.notifier.success(commit_success_message(len(saved)))
        return CommitResult(succeeded=True, count=len(saved))
