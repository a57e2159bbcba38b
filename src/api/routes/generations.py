"""
Generation record endpoints (the owner-scoped request store).
"""

import uuid
import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.schemas import (
    GenerationCreateRequest,
    GenerationUpdateRequest,
    GenerationItem,
    GenerationListResponse,
    ErrorResponse,
)
from src.api.deps import get_db, get_current_user_id
from src.core.config import GALLERY_LIMIT
from src.db import repository as repo

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/generations", tags=["Generations"])

_OWNER_ERRORS = {
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}


@router.post(
    "",
    response_model=GenerationItem,
    status_code=201,
    responses={400: {"model": ErrorResponse}},
)
async def create_generation(
    body: GenerationCreateRequest,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> GenerationItem:
    """
    Create a pending generation record for the authenticated user.

    The record is completed or failed by `/generate-image`.
    """
    generation = await repo.create_generation(
        db, user_id=user_id, prompt=body.prompt, style=body.style
    )
    logger.info(f"[{generation.id}] Generation created: style={body.style}")
    return GenerationItem.from_model(generation)


@router.get("", response_model=GenerationListResponse)
async def list_generations(
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    limit: int = Query(GALLERY_LIMIT, ge=1, le=GALLERY_LIMIT),
) -> GenerationListResponse:
    """List the authenticated user's newest generations."""
    generations = await repo.list_generations_for_user(db, user_id, limit=limit)
    return GenerationListResponse(
        generations=[GenerationItem.from_model(g) for g in generations]
    )


@router.get("/{generation_id}", response_model=GenerationItem, responses=_OWNER_ERRORS)
async def get_generation(
    generation_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> GenerationItem:
    generation = await repo.get_generation_for_user(db, generation_id, user_id)
    return GenerationItem.from_model(generation)


@router.patch("/{generation_id}", response_model=GenerationItem, responses=_OWNER_ERRORS)
async def update_generation(
    generation_id: uuid.UUID,
    body: GenerationUpdateRequest,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> GenerationItem:
    """
    Move a pending generation to `completed` or `failed`.

    Updating a generation that is already terminal returns it unchanged.
    """
    generation = await repo.update_generation(
        db, generation_id, user_id, status=body.status, image_url=body.image_url
    )
    return GenerationItem.from_model(generation)


@router.delete("/{generation_id}", responses=_OWNER_ERRORS)
async def delete_generation(
    generation_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Delete a generation in any state."""
    await repo.delete_generation(db, generation_id, user_id)
    logger.info(f"[{generation_id}] Generation deleted")
    return {"message": "Generation deleted"}
