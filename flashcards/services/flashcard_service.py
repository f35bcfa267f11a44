"""
Flashcard service for business logic related to persisted flashcards.
"""
# pyright: reportAttributeAccessIssue=false
# pyright: reportArgumentType=false
import logging
from collections import Counter
from typing import Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select, func

from flashcards.core.exceptions import InternalError, ValidationError
from flashcards.schemas.common import PaginationMeta
from flashcards.utils.time_utils import utc_now
from flashcards.models import Flashcard, FlashcardSource, Generation
from flashcards.schemas.flashcard import (
    CreateFlashcardItem,
    FlashcardResponse,
    FlashcardsListQuery,
    FlashcardsListResponse,
    UpdateFlashcardRequest,
)

logger = logging.getLogger(__name__)


class FlashcardService:
    """Reads and writes a single user's flashcards."""

    def __init__(self, session: Session):
        self.session = session

    def create_flashcards(self, user_id: int, items: List[CreateFlashcardItem]) -> List[FlashcardResponse]:
        """
        Persist a batch of flashcards in one transaction.

        Either every item is saved or none is. Generation counters are
        updated afterwards as a best-effort step.

        Raises:
            ValidationError: an item references a generation the user does not own
            InternalError: the database write failed
        """
        generation_ids = {item.generation_id for item in items if item.generation_id is not None}
        if generation_ids:
            owned = set(self.session.exec(
                select(Generation.id).where(Generation.id.in_(generation_ids), Generation.user_id == user_id)
            ).all())
            missing = generation_ids - owned
            if missing:
                raise ValidationError(f"Unknown generation_id: {', '.join(str(i) for i in sorted(missing))}")

        flashcards = [
            Flashcard(
                user_id=user_id,
                front=item.front,
                back=item.back,
                source=FlashcardSource(item.source).value,
                generation_id=item.generation_id,
            )
            for item in items
        ]

        try:
            self.session.add_all(flashcards)
            self.session.commit()
            for flashcard in flashcards:
                self.session.refresh(flashcard)
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to create flashcards in database for user {user_id}: {str(e)}")
            raise InternalError("Failed to create flashcards in database") from e

        logger.info(f"Created {len(flashcards)} flashcards for user {user_id}")
        self._record_accepted(user_id, items)

        return [FlashcardResponse.model_validate(flashcard) for flashcard in flashcards]

    def _record_accepted(self, user_id: int, items: List[CreateFlashcardItem]) -> None:
        """Add saved AI cards to their generation's acceptance counters, clamped to generated_count."""
        per_generation: Dict[int, Counter] = {}
        for item in items:
            if item.generation_id is not None:
                per_generation.setdefault(item.generation_id, Counter())[FlashcardSource(item.source)] += 1

        for generation_id, counts in per_generation.items():
            try:
                generation = self.session.get(Generation, generation_id)
                if not generation or generation.user_id != user_id:
                    continue
                generated = generation.generated_count or 0
                unedited = (generation.accepted_unedited_count or 0) + counts[FlashcardSource.AI_FULL]
                edited = (generation.accepted_edited_count or 0) + counts[FlashcardSource.AI_EDITED]
                generation.accepted_unedited_count = max(0, min(generated, unedited))
                generation.accepted_edited_count = max(0, min(generated, edited))
                generation.updated_at = utc_now()
                self.session.add(generation)
                self.session.commit()
            except SQLAlchemyError as e:
                self.session.rollback()
                logger.error(
                    f"Failed to update generation analytics counters: generationId={generation_id}, reason={str(e)}"
                )

    def list_flashcards(self, user_id: int, query: FlashcardsListQuery) -> FlashcardsListResponse:
        """Page through a user's flashcards with optional search and source filter."""
        conditions = [Flashcard.user_id == user_id]
        if query.q:
            pattern = f"%{query.q.strip()}%"
            conditions.append(or_(Flashcard.front.ilike(pattern), Flashcard.back.ilike(pattern)))
        if query.source is not None:
            conditions.append(Flashcard.source == FlashcardSource(query.source).value)

        try:
            total_items = self.session.exec(select(func.count(Flashcard.id)).where(*conditions)).one()
            sort_column = getattr(Flashcard, query.sort)
            statement = (
                select(Flashcard)
                .where(*conditions)
                .order_by(sort_column.asc() if query.order == "asc" else sort_column.desc(), Flashcard.id.desc())
                .offset((query.page - 1) * query.limit)
                .limit(query.limit)
            )
            flashcards = self.session.exec(statement).all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to list flashcards from database for user {user_id}: {str(e)}")
            raise InternalError("Failed to list flashcards from database") from e

        return FlashcardsListResponse(
            items=[FlashcardResponse.model_validate(flashcard) for flashcard in flashcards],
            pagination=PaginationMeta.from_counts(query.page, query.limit, total_items),
        )

    def _get_owned(self, user_id: int, flashcard_id: int) -> Optional[Flashcard]:
        flashcard = self.session.get(Flashcard, flashcard_id)
        if not flashcard or flashcard.user_id != user_id:
            return None
        return flashcard

    def get_flashcard(self, user_id: int, flashcard_id: int) -> Optional[FlashcardResponse]:
        flashcard = self._get_owned(user_id, flashcard_id)
        return FlashcardResponse.model_validate(flashcard) if flashcard else None

    def update_flashcard(
        self, user_id: int, flashcard_id: int, command: UpdateFlashcardRequest
    ) -> Optional[FlashcardResponse]:
        """
        Update front/back of a flashcard.

        Only changed fields are written. A first edit of an ``ai-full`` card
        reclassifies it as ``ai-edited`` and moves one count between the
        generation's counters.

        Returns:
            The updated flashcard, or None if it does not exist for this user
        """
        flashcard = self._get_owned(user_id, flashcard_id)
        if not flashcard:
            return None

        front_changed = command.front is not None and command.front != flashcard.front
        back_changed = command.back is not None and command.back != flashcard.back
        if not front_changed and not back_changed:
            return FlashcardResponse.model_validate(flashcard)

        reclassified = flashcard.source == FlashcardSource.AI_FULL.value
        if front_changed:
            flashcard.front = command.front
        if back_changed:
            flashcard.back = command.back
        if reclassified:
            flashcard.source = FlashcardSource.AI_EDITED.value
        flashcard.updated_at = utc_now()

        try:
            self.session.add(flashcard)
            self.session.commit()
            self.session.refresh(flashcard)
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(
                f"Failed to update flashcard in database for user {user_id}, flashcardId={flashcard_id}: {str(e)}"
            )
            raise InternalError("Failed to update flashcard in database") from e

        if reclassified and flashcard.generation_id is not None:
            self._move_to_edited(user_id, flashcard.generation_id, flashcard_id)

        return FlashcardResponse.model_validate(flashcard)

    def _move_to_edited(self, user_id: int, generation_id: int, flashcard_id: int) -> None:
        try:
            generation = self.session.get(Generation, generation_id)
            if not generation or generation.user_id != user_id:
                logger.error(
                    f"Failed to load generation for analytics update: generationId={generation_id}, "
                    f"flashcardId={flashcard_id}"
                )
                return
            # Clamped because earlier failed updates may have left the counters off
            generated = generation.generated_count or 0
            generation.accepted_unedited_count = max(0, (generation.accepted_unedited_count or 0) - 1)
            generation.accepted_edited_count = min(generated, (generation.accepted_edited_count or 0) + 1)
            generation.updated_at = utc_now()
            self.session.add(generation)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(
                f"Failed to update generation analytics counters: generationId={generation_id}, "
                f"flashcardId={flashcard_id}, reason={str(e)}"
            )

    def delete_flashcard(self, user_id: int, flashcard_id: int) -> bool:
        flashcard = self._get_owned(user_id, flashcard_id)
        if not flashcard:
            return False
        try:
            self.session.delete(flashcard)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(
                f"Failed to delete flashcard from database for user {user_id}, flashcardId={flashcard_id}: {str(e)}"
            )
            raise InternalError("Failed to delete flashcard from database") from e
        logger.info(f"Deleted flashcard {flashcard_id} for user {user_id}")
        return True
