import asyncio

import pytest
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from flashcards.core.exceptions import BadResponseError, InternalError, NotFoundError, RateLimitedError
from flashcards.models import Generation, GenerationErrorLog
from flashcards.schemas.gateway import ChatResult
from flashcards.schemas.generation import GenerationsListQuery
from flashcards.services.generation_service import (
    FLASHCARD_RESPONSE_FORMAT,
    FLASHCARD_SYSTEM_MESSAGE,
    GenerationService,
    get_generation_detail,
    list_generation_error_logs,
    list_generations,
)
from flashcards.utils.text_utils import hash_source_text


class FakeGateway:
    """Records configuration and answers with a fixed payload or error."""

    def __init__(self, payload=None, error=None):
        self.model = "test/model"
        self.payload = payload
        self.error = error
        self.system_message = None
        self.response_format = None
        self.sent = []

    def set_system_message(self, system_message):
        self.system_message = system_message

    def set_response_format(self, response_format):
        self.response_format = response_format

    async def send(self, user_message):
        self.sent.append(user_message)
        if self.error:
            raise self.error
        return ChatResult(raw_text="{}", parsed_json=self.payload)


def cards(count):
    return {"flashcards": [{"front": f"Question {i}?", "back": f"Answer {i}"} for i in range(count)]}


@pytest.mark.unit
def test_generate_returns_proposals_and_stores_generation(session, user, source_text):
    gateway = FakeGateway(payload=cards(3))
    service = GenerationService(session, gateway)

    response = asyncio.run(service.generate_flashcard_proposals(source_text, user.id))

    assert response.generated_count == 3
    assert len(response.flashcards_proposals) == response.generated_count
    assert all(p.source.value == "ai-full" for p in response.flashcards_proposals)
    assert len({p.temp_id for p in response.flashcards_proposals}) == 3
    assert gateway.system_message == FLASHCARD_SYSTEM_MESSAGE
    assert gateway.response_format == FLASHCARD_RESPONSE_FORMAT
    assert gateway.sent == [source_text]

    generation = session.get(Generation, response.generation_id)
    assert generation.user_id == user.id
    assert generation.model == "test/model"
    assert generation.source_text_hash == hash_source_text(source_text)
    assert generation.source_text_length == len(source_text)
    assert generation.accepted_unedited_count is None
    assert generation.accepted_edited_count is None
    assert generation.generation_duration >= 0


@pytest.mark.unit
def test_generate_drops_items_outside_limits(session, user, source_text):
    payload = {"flashcards": [
        {"front": "Valid?", "back": "Yes"},
        {"front": "x" * 201, "back": "too long front"},
        {"front": "Blank back", "back": "   "},
        {"front": "  Trimmed?  ", "back": "b" * 500},
    ]}
    service = GenerationService(session, FakeGateway(payload=payload))

    response = asyncio.run(service.generate_flashcard_proposals(source_text, user.id))

    assert [p.front for p in response.flashcards_proposals] == ["Valid?", "Trimmed?"]
    assert response.generated_count == 2


@pytest.mark.unit
@pytest.mark.parametrize("payload", [None, {"cards": []}, {"flashcards": [{"front": "only front"}]}, cards(0)])
def test_unusable_payload_is_bad_response_and_logged(session, user, source_text, payload):
    service = GenerationService(session, FakeGateway(payload=payload))

    with pytest.raises(BadResponseError):
        asyncio.run(service.generate_flashcard_proposals(source_text, user.id))

    assert session.exec(select(Generation)).all() == []
    logs = session.exec(select(GenerationErrorLog)).all()
    assert len(logs) == 1
    assert logs[0].error_code == "BAD_RESPONSE"


@pytest.mark.unit
def test_gateway_error_is_logged_redacted_and_reraised(session, user, source_text):
    secret = "sk-or-very-secret"
    error = RateLimitedError(f"Rate limit exceeded for key {secret} " + "x" * 600, status=429)
    service = GenerationService(session, FakeGateway(error=error), secrets=(secret,))

    with pytest.raises(RateLimitedError):
        asyncio.run(service.generate_flashcard_proposals(source_text, user.id))

    log = session.exec(select(GenerationErrorLog)).one()
    assert log.user_id == user.id
    assert log.model == "test/model"
    assert log.error_code == "RATE_LIMITED"
    assert log.source_text_hash == hash_source_text(source_text)
    assert log.source_text_length == len(source_text)
    assert secret not in log.error_message
    assert len(log.error_message) <= 500
    assert session.exec(select(Generation)).all() == []


@pytest.mark.unit
def test_error_log_failure_does_not_mask_gateway_error(session, user, source_text, monkeypatch):
    def failing_commit():
        raise SQLAlchemyError("database is gone")

    service = GenerationService(session, FakeGateway(error=RateLimitedError("Rate limit exceeded")))
    monkeypatch.setattr(session, "commit", failing_commit)

    with pytest.raises(RateLimitedError):
        asyncio.run(service.generate_flashcard_proposals(source_text, user.id))


@pytest.mark.unit
def test_list_generations_paginates_and_sorts(session, user, other_user):
    for duration in (30, 10, 20):
        session.add(Generation(
            user_id=user.id, model="m", generated_count=1, source_text_hash="h",
            source_text_length=1000, generation_duration=duration,
        ))
    session.add(Generation(
        user_id=other_user.id, model="m", generated_count=1, source_text_hash="h",
        source_text_length=1000, generation_duration=5,
    ))
    session.commit()

    query = GenerationsListQuery(page=1, limit=2, sort="generation_duration", order="asc")
    result = list_generations(session, user.id, query)

    assert [g.generation_duration for g in result.items] == [10, 20]
    assert result.pagination.total_items == 3
    assert result.pagination.total_pages == 2


@pytest.mark.unit
def test_generation_detail_is_owner_only(session, generation, other_user):
    detail = get_generation_detail(session, generation.user_id, generation.id)
    assert detail.generation.id == generation.id
    assert detail.flashcards == []

    with pytest.raises(NotFoundError):
        get_generation_detail(session, other_user.id, generation.id)
    with pytest.raises(NotFoundError):
        get_generation_detail(session, generation.user_id, 9999)


@pytest.mark.unit
def test_error_logs_are_scoped_to_user(session, user, other_user):
    for owner in (user, other_user):
        session.add(GenerationErrorLog(
            user_id=owner.id, model="m", source_text_hash="h", source_text_length=1000,
            error_code="TIMEOUT", error_message="Request timed out",
        ))
    session.commit()

    logs = list_generation_error_logs(session, user.id)
    assert len(logs) == 1
    assert logs[0].error_code == "TIMEOUT"


@pytest.mark.unit
def test_generation_insert_failure_is_internal_error(session, user, source_text, monkeypatch):
    rollbacks = []
    original_rollback = session.rollback

    def failing_commit():
        raise SQLAlchemyError("disk I/O error")

    def recording_rollback():
        rollbacks.append(True)
        original_rollback()

    gateway = FakeGateway(payload=cards(2))
    service = GenerationService(session, gateway)
    monkeypatch.setattr(session, "commit", failing_commit)
    monkeypatch.setattr(session, "rollback", recording_rollback)

    with pytest.raises(InternalError, match="Failed to insert generation record"):
        asyncio.run(service.generate_flashcard_proposals(source_text, user.id))

    monkeypatch.undo()
    assert gateway.sent == [source_text]
    assert rollbacks == [True]
    assert session.exec(select(Generation)).all() == []
