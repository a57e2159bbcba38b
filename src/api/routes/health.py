"""
Health check endpoint.
"""

from fastapi import APIRouter

from src.api.schemas import HealthResponse
from src.core.image_generator import ImageConfig
from src.db.engine import is_db_configured

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Check API health and configuration status.
    """
    return HealthResponse(
        status="healthy",
        version="1.0.0",
        gateway_configured=ImageConfig().validate(),
        database_configured=is_db_configured(),
    )
