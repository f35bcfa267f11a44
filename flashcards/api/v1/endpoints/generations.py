"""
Generation endpoints: create AI proposals and inspect past generations.
"""
import logging
from typing import Literal

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from flashcards.core.database import get_session
from flashcards.core.exceptions import GatewayError
from flashcards.models import User
from flashcards.schemas.generation import (
    CreateGenerationRequest,
    CreateGenerationResponse,
    GenerationDetailResponse,
    GenerationsListQuery,
    GenerationsListResponse,
)
from flashcards.services.generation_service import GenerationService, get_generation_detail, list_generations
from flashcards.api.v1.endpoints.deps import get_current_user, get_gateway, get_gateway_secrets
from flashcards.api.v1.endpoints.utils import gateway_error_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/generations", tags=["generations"])


@router.post("", response_model=CreateGenerationResponse)
async def create_generation(
    request: CreateGenerationRequest,
    current_user: User = Depends(get_current_user),
    gateway=Depends(get_gateway),
    secrets: tuple = Depends(get_gateway_secrets),
    session: Session = Depends(get_session)
):
    """
    Generate flashcard proposals from source text.

    Proposals are not saved; the client reviews them and saves the chosen
    ones through POST /flashcards.
    """
    service = GenerationService(session, gateway, secrets=secrets)
    try:
        return await service.generate_flashcard_proposals(request.source_text, current_user.id)
    except GatewayError as e:
        logger.warning(f"Generation failed for user {current_user.id}: {e.code}")
        return gateway_error_response(e)


@router.get("", response_model=GenerationsListResponse)
async def get_generations(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort: Literal["created_at", "generation_duration"] = "created_at",
    order: Literal["asc", "desc"] = "desc",
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    query = GenerationsListQuery(page=page, limit=limit, sort=sort, order=order)
    return list_generations(session, current_user.id, query)


@router.get("/{generation_id}", response_model=GenerationDetailResponse)
async def get_generation(
    generation_id: int,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    return get_generation_detail(session, current_user.id, generation_id)
