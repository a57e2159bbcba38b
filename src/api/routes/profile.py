"""
Profile endpoint. Profiles are created and maintained by the backend;
this API only reads them.
"""

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.schemas import ProfileResponse, ErrorResponse
from src.api.deps import get_db, get_current_user_id
from src.db import repository as repo

router = APIRouter(tags=["Profile"])


@router.get("/profile", response_model=ProfileResponse, responses={404: {"model": ErrorResponse}})
async def get_profile(
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> ProfileResponse:
    """Get the authenticated user's profile, plan and remaining credits."""
    profile = await repo.get_profile(db, user_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")

    return ProfileResponse(
        id=str(profile.id),
        email=profile.email,
        full_name=profile.full_name,
        avatar_url=profile.avatar_url,
        subscription_plan=profile.subscription_plan,
        generation_credits=profile.generation_credits,
        created_at=profile.created_at,
        updated_at=profile.updated_at,
    )
