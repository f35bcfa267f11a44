from typing import List
from fastapi import APIRouter, Depends
from sqlmodel import Session
from flashcards.core.database import get_session
from flashcards.models import User
from flashcards.schemas.generation import GenerationErrorLogResponse
from flashcards.services.generation_service import list_generation_error_logs
from flashcards.api.v1.endpoints.deps import get_current_user

router = APIRouter(prefix="/generation-error-logs", tags=["generations"])


@router.get("", response_model=List[GenerationErrorLogResponse])
async def get_generation_error_logs(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Failed generation attempts of the caller, newest first."""
    return list_generation_error_logs(session, current_user.id)
