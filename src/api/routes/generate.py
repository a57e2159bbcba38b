"""
Generate-image endpoint: the server-side orchestrator invocation.
"""

import uuid
import logging

from fastapi import APIRouter, Depends
from starlette.requests import Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.schemas import GenerateImageRequest, GenerateImageResponse, ErrorResponse
from src.api.deps import get_db, get_current_user_id, get_image_client
from src.api.rate_limit import limiter
from src.core.errors import GenerationNotFoundError
from src.core.image_generator import ImageModelClient
from src.services.generation_service import GenerationOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Generation"])


@router.post(
    "/generate-image",
    response_model=GenerateImageResponse,
    responses={
        400: {"model": ErrorResponse},
        402: {"model": ErrorResponse, "description": "AI credits depleted"},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
        500: {"model": ErrorResponse},
    },
)
@limiter.limit("5/minute")
async def generate_image(
    request: Request,
    body: GenerateImageRequest,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    image_client: ImageModelClient = Depends(get_image_client),
) -> GenerateImageResponse:
    """
    Generate the image for a pending generation.

    Enhances the prompt with the style preset, calls the image model and
    writes the terminal status before responding: `completed` with the image
    on success, `failed` otherwise. Calling again for a generation that is
    already terminal does not call the model.
    """
    try:
        generation_id = uuid.UUID(body.generation_id)
    except ValueError:
        raise GenerationNotFoundError()

    orchestrator = GenerationOrchestrator(db, image_client)
    result = await orchestrator.run(
        generation_id=generation_id,
        user_id=user_id,
        prompt=body.prompt,
        style=body.style,
        uploaded_image=body.uploaded_image,
    )
    return GenerateImageResponse(success=True, image_url=result.image_url)
