"""
Flashcard CRUD endpoints.
"""
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from flashcards.core.database import get_session
from flashcards.core.exceptions import NotFoundError
from flashcards.models import FlashcardSource, User
from flashcards.schemas.common import MessageResponse
from flashcards.schemas.flashcard import (
    CreateFlashcardsRequest,
    CreateFlashcardsResponse,
    FlashcardResponse,
    FlashcardsListQuery,
    FlashcardsListResponse,
    UpdateFlashcardRequest,
)
from flashcards.services.flashcard_service import FlashcardService
from flashcards.api.v1.endpoints.deps import get_current_user

router = APIRouter(prefix="/flashcards", tags=["flashcards"])


@router.post("", response_model=CreateFlashcardsResponse, status_code=status.HTTP_201_CREATED)
async def create_flashcards(
    request: CreateFlashcardsRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """
    Save a batch of flashcards.

    AI cards must reference one of the caller's generations; manual cards
    must not reference any. Either the whole batch is saved or nothing is.
    """
    flashcards = FlashcardService(session).create_flashcards(current_user.id, request.flashcards)
    return CreateFlashcardsResponse(flashcards=flashcards)


@router.get("", response_model=FlashcardsListResponse)
async def get_flashcards(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    q: Optional[str] = None,
    sort: Literal["created_at", "updated_at"] = "created_at",
    order: Literal["asc", "desc"] = "desc",
    source: Optional[FlashcardSource] = None,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """
    List the caller's flashcards.

    Args:
        page: 1-based page number
        limit: Page size (1-100)
        q: Case-insensitive search in front and back
        sort: Sort column
        order: Sort direction
        source: Optional filter by origin (ai-full, ai-edited, manual)
    """
    query = FlashcardsListQuery(page=page, limit=limit, q=q, sort=sort, order=order, source=source)
    return FlashcardService(session).list_flashcards(current_user.id, query)


@router.get("/{flashcard_id}", response_model=FlashcardResponse)
async def get_flashcard(
    flashcard_id: int,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    flashcard = FlashcardService(session).get_flashcard(current_user.id, flashcard_id)
    if not flashcard:
        raise NotFoundError("Flashcard not found")
    return flashcard


@router.patch("/{flashcard_id}", response_model=FlashcardResponse)
async def update_flashcard(
    flashcard_id: int,
    request: UpdateFlashcardRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    flashcard = FlashcardService(session).update_flashcard(current_user.id, flashcard_id, request)
    if not flashcard:
        raise NotFoundError("Flashcard not found")
    return flashcard


@router.delete("/{flashcard_id}", response_model=MessageResponse)
async def delete_flashcard(
    flashcard_id: int,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    if not FlashcardService(session).delete_flashcard(current_user.id, flashcard_id):
        raise NotFoundError("Flashcard not found")
    return MessageResponse(message="flashcard_deleted")
