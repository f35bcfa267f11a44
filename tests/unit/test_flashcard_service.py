import pytest
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from flashcards.core.exceptions import InternalError, ValidationError
from flashcards.models import Flashcard, FlashcardSource
from flashcards.schemas.flashcard import CreateFlashcardItem, FlashcardsListQuery, UpdateFlashcardRequest
from flashcards.services.flashcard_service import FlashcardService


def item(front, back, source=FlashcardSource.MANUAL, generation_id=None):
    return CreateFlashcardItem(front=front, back=back, source=source, generation_id=generation_id)


@pytest.mark.unit
def test_create_updates_generation_counters(session, user, generation):
    service = FlashcardService(session)
    created = service.create_flashcards(user.id, [
        item("Q1", "A1", FlashcardSource.AI_FULL, generation.id),
        item("Q2", "A2", FlashcardSource.AI_FULL, generation.id),
        item("Q3", "A3", FlashcardSource.AI_EDITED, generation.id),
        item("Manual", "Card"),
    ])

    assert [card.source for card in created] == [
        FlashcardSource.AI_FULL, FlashcardSource.AI_FULL, FlashcardSource.AI_EDITED, FlashcardSource.MANUAL
    ]
    session.refresh(generation)
    assert generation.accepted_unedited_count == 2
    assert generation.accepted_edited_count == 1


@pytest.mark.unit
def test_counters_are_clamped_to_generated_count(session, user, generation):
    service = FlashcardService(session)
    service.create_flashcards(user.id, [item(f"Q{i}", "A", FlashcardSource.AI_FULL, generation.id) for i in range(5)])

    session.refresh(generation)
    assert generation.accepted_unedited_count == generation.generated_count


@pytest.mark.unit
def test_foreign_generation_is_rejected_and_nothing_saved(session, user, other_user, generation):
    service = FlashcardService(session)

    with pytest.raises(ValidationError):
        service.create_flashcards(other_user.id, [
            item("Manual", "Card"),
            item("Q", "A", FlashcardSource.AI_FULL, generation.id),
        ])

    assert session.exec(select(Flashcard)).all() == []


@pytest.mark.unit
def test_database_failure_saves_nothing(session, user, monkeypatch):
    service = FlashcardService(session)

    def failing_commit():
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr(session, "commit", failing_commit)
    with pytest.raises(InternalError):
        service.create_flashcards(user.id, [item("Q", "A"), item("Q2", "A2")])
    monkeypatch.undo()

    assert session.exec(select(Flashcard)).all() == []


@pytest.mark.unit
def test_list_filters_searches_and_paginates(session, user, other_user, generation):
    service = FlashcardService(session)
    service.create_flashcards(user.id, [
        item("Photosynthesis", "Light to energy"),
        item("Mitosis", "Cell division"),
        item("What is ATP?", "Energy carrier", FlashcardSource.AI_FULL, generation.id),
    ])
    service.create_flashcards(other_user.id, [item("Photosynthesis", "Not mine")])

    everything = service.list_flashcards(user.id, FlashcardsListQuery())
    assert everything.pagination.total_items == 3

    search = service.list_flashcards(user.id, FlashcardsListQuery(q="ENERGY"))
    assert sorted(card.front for card in search.items) == ["Photosynthesis", "What is ATP?"]

    ai_only = service.list_flashcards(user.id, FlashcardsListQuery(source=FlashcardSource.AI_FULL))
    assert [card.front for card in ai_only.items] == ["What is ATP?"]

    page = service.list_flashcards(user.id, FlashcardsListQuery(page=2, limit=2))
    assert len(page.items) == 1
    assert page.pagination.total_pages == 2

    empty = service.list_flashcards(user.id, FlashcardsListQuery(q="nothing matches"))
    assert empty.items == []
    assert empty.pagination.total_pages == 0


@pytest.mark.unit
def test_update_reclassifies_and_moves_counter(session, user, generation):
    service = FlashcardService(session)
    card = service.create_flashcards(user.id, [item("Q", "A", FlashcardSource.AI_FULL, generation.id)])[0]

    updated = service.update_flashcard(user.id, card.id, UpdateFlashcardRequest(back="Better answer"))

    assert updated.source == FlashcardSource.AI_EDITED
    assert updated.front == "Q"
    assert updated.back == "Better answer"
    session.refresh(generation)
    assert generation.accepted_unedited_count == 0
    assert generation.accepted_edited_count == 1

    service.update_flashcard(user.id, card.id, UpdateFlashcardRequest(front="Q again"))
    session.refresh(generation)
    assert generation.accepted_unedited_count == 0
    assert generation.accepted_edited_count == 1


@pytest.mark.unit
def test_update_without_changes_keeps_source(session, user, generation):
    service = FlashcardService(session)
    card = service.create_flashcards(user.id, [item("Q", "A", FlashcardSource.AI_FULL, generation.id)])[0]

    unchanged = service.update_flashcard(user.id, card.id, UpdateFlashcardRequest(front="Q"))

    assert unchanged.source == FlashcardSource.AI_FULL


@pytest.mark.unit
def test_manual_card_stays_manual(session, user):
    service = FlashcardService(session)
    card = service.create_flashcards(user.id, [item("Q", "A")])[0]

    updated = service.update_flashcard(user.id, card.id, UpdateFlashcardRequest(front="New Q", back="New A"))

    assert updated.source == FlashcardSource.MANUAL


@pytest.mark.unit
def test_get_update_delete_are_owner_only(session, user, other_user):
    service = FlashcardService(session)
    card = service.create_flashcards(user.id, [item("Q", "A")])[0]

    assert service.get_flashcard(other_user.id, card.id) is None
    assert service.update_flashcard(other_user.id, card.id, UpdateFlashcardRequest(front="x")) is None
    assert service.delete_flashcard(other_user.id, card.id) is False

    assert service.get_flashcard(user.id, card.id).front == "Q"
    assert service.delete_flashcard(user.id, card.id) is True
    assert service.get_flashcard(user.id, card.id) is None


@pytest.mark.unit
@pytest.mark.parametrize("source, generation_id", [
    (FlashcardSource.AI_FULL, None),
    (FlashcardSource.AI_EDITED, None),
    (FlashcardSource.MANUAL, 1),
])
def test_item_rejects_mismatched_generation_id(source, generation_id):
    with pytest.raises(PydanticValidationError, match="generation_id is required"):
        item("Q", "A", source, generation_id)
