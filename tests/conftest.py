import os

# Settings are read at import time; point them at an in-memory database first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["OPENROUTER_MOCK_ENABLED"] = "false"
os.environ["ENVIRONMENT"] = "test"

import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel, Session

from flashcards.core.database import engine, get_session
from flashcards.main import app
from flashcards.models import Generation, User
from flashcards.api.v1.endpoints.deps import get_gateway
from flashcards.services.mock_gateway import MockGatewayClient


@pytest.fixture
def session():
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def user(session):
    user = User(email="learner@example.com", password=User.hash_password("secret123"))
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def other_user(session):
    user = User(email="someone@example.com", password=User.hash_password("secret123"))
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def generation(session, user):
    generation = Generation(
        user_id=user.id,
        model="mock/flashcards",
        generated_count=3,
        source_text_hash="0" * 32,
        source_text_length=1200,
        generation_duration=15,
    )
    session.add(generation)
    session.commit()
    session.refresh(generation)
    return generation


@pytest.fixture
def source_text():
    paragraphs = [f"Paragraph {i}. " + "Photosynthesis converts light into chemical energy. " * 6 for i in range(1, 5)]
    text = "\n\n".join(paragraphs)
    assert 1000 <= len(text) <= 10000
    return text


@pytest.fixture
def gateway():
    return MockGatewayClient()


@pytest.fixture
def client(session, gateway):
    def get_session_override():
        yield session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_gateway] = lambda: gateway
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(user):
    return {"X-User-Id": str(user.id)}
