import asyncio
from datetime import datetime, timezone

import pytest
from sqlmodel import select

from flashcards.core.exceptions import InternalError, ValidationError
from flashcards.models import Flashcard, FlashcardSource, Generation
from flashcards.review.committer import BatchCommitter, ServiceFlashcardStore
from flashcards.review.messages import commit_error_message
from flashcards.review.notifications import NotificationType, Notifier
from flashcards.review.state import ReviewState
from flashcards.schemas.flashcard import FlashcardResponse
from flashcards.schemas.generation import FlashcardProposal
from flashcards.services.flashcard_service import FlashcardService
from flashcards.services.generation_service import GenerationService
from flashcards.services.mock_gateway import MockGatewayClient


class FakeStore:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    async def create_flashcards(self, items):
        self.calls.append(items)
        if self.error:
            raise self.error
        now = datetime.now(timezone.utc)
        return [
            FlashcardResponse(
                id=index, front=item.front, back=item.back, source=item.source,
                generation_id=item.generation_id, created_at=now, updated_at=now,
            )
            for index, item in enumerate(items, start=1)
        ]


@pytest.fixture
def received():
    return []


@pytest.fixture
def notifier(received):
    notifier = Notifier()
    notifier.subscribe(received.append)
    return notifier


def mixed_state(generation_id=42):
    """One accepted, one pending and one rejected proposal."""
    state = ReviewState()
    state.load(generation_id, [
        FlashcardProposal(temp_id="accepted", front="A?", back="A"),
        FlashcardProposal(temp_id="pending", front="P?", back="P"),
        FlashcardProposal(temp_id="rejected", front="R?", back="R"),
    ])
    state.accept("accepted")
    state.reject("rejected")
    return state


@pytest.mark.unit
def test_commit_accepted_submits_only_accepted(notifier, received):
    state = mixed_state()
    store = FakeStore()

    result = asyncio.run(BatchCommitter(state, store, notifier).commit_accepted())

    assert result.succeeded is True
    assert result.count == 1
    assert [item.front for item in store.calls[0]] == ["A?"]
    assert store.calls[0][0].generation_id == 42
    assert [item.temp_id for item in state.items] == ["pending", "rejected"]
    assert received[-1].type == NotificationType.SUCCESS


@pytest.mark.unit
def test_commit_all_submits_non_rejected_and_resets(notifier):
    state = mixed_state()
    state.edit("pending", "Edited?", "Edited")
    store = FakeStore()

    result = asyncio.run(BatchCommitter(state, store, notifier).commit_all())

    assert result.count == 2
    submitted = store.calls[0]
    assert [item.front for item in submitted] == ["A?", "Edited?"]
    assert [item.source for item in submitted] == [FlashcardSource.AI_FULL, FlashcardSource.AI_EDITED]
    # Only the rejected item was left, so the review is over
    assert state.is_empty
    assert state.generation_id is None


@pytest.mark.unit
def test_empty_selection_makes_no_store_call(notifier):
    state = mixed_state()
    state.reject("accepted")
    store = FakeStore()

    with pytest.raises(ValidationError):
        asyncio.run(BatchCommitter(state, store, notifier).commit_accepted())

    assert store.calls == []


@pytest.mark.unit
def test_missing_generation_id_is_rejected(notifier):
    state = mixed_state()
    state.generation_id = None
    store = FakeStore()

    with pytest.raises(ValidationError):
        asyncio.run(BatchCommitter(state, store, notifier).commit_all())

    assert store.calls == []


@pytest.mark.unit
def test_failed_commit_leaves_state_untouched(notifier, received):
    state = mixed_state()
    store = FakeStore(error=InternalError("Failed to create flashcards in database"))

    result = asyncio.run(BatchCommitter(state, store, notifier).commit_all())

    assert result.succeeded is False
    assert result.error_code == "internal_error"
    assert len(store.calls) == 1
    assert [(item.temp_id, item.accepted, item.rejected) for item in state.items] == [
        ("accepted", True, False),
        ("pending", False, False),
        ("rejected", False, True),
    ]
    assert received[-1].type == NotificationType.ERROR
    assert received[-1].message == commit_error_message("internal_error")


@pytest.mark.unit
def test_service_store_persists_and_counts(session, user, generation, notifier):
    state = ReviewState()
    state.load(generation.id, [
        FlashcardProposal(temp_id="a", front="Kept?", back="Kept"),
        FlashcardProposal(temp_id="b", front="Changed?", back="Changed"),
        FlashcardProposal(temp_id="c", front="Dropped?", back="Dropped"),
    ])
    state.accept("a")
    state.edit("b", "Rewritten?", "Rewritten")
    state.accept("b")
    state.reject("c")
    store = ServiceFlashcardStore(FlashcardService(session), user.id)

    result = asyncio.run(BatchCommitter(state, store, notifier).commit_accepted())

    assert result.succeeded is True
    assert result.count == 2
    session.refresh(generation)
    assert generation.accepted_unedited_count == 1
    assert generation.accepted_edited_count == 1


@pytest.mark.unit
def test_notifier_without_subscriber_is_silent():
    notifier = Notifier()
    notifier.info("nothing listens")

    received = []
    unsubscribe = notifier.subscribe(received.append)
    notifier.success("saved")
    unsubscribe()
    notifier.error("dropped")

    assert [n.message for n in received] == ["saved"]


@pytest.mark.unit
def test_generate_then_commit_persists_cards(session, user, source_text, notifier, received):
    async def review():
        response = await GenerationService(session, MockGatewayClient()).generate_flashcard_proposals(
            source_text, user.id
        )
        state = ReviewState.from_generation(response)
        for proposal in state.items:
            state.accept(proposal.temp_id)
        store = ServiceFlashcardStore(FlashcardService(session), user.id)
        return response, state, await BatchCommitter(state, store, notifier).commit_accepted()

    response, state, result = asyncio.run(review())

    assert result.succeeded is True
    assert result.count == response.generated_count == 4
    assert state.is_empty
    assert received[-1].type == NotificationType.SUCCESS
    generation = session.get(Generation, response.generation_id)
    assert generation.accepted_unedited_count == 4
    saved = session.exec(select(Flashcard).where(Flashcard.generation_id == generation.id)).all()
    assert len(saved) == 4
    assert all(card.created_at is not None for card in saved)
