"""
Configuration endpoints.

Public endpoints that expose non-sensitive application configuration.
"""

from fastapi import APIRouter

from src.api.schemas import StylePresetItem, StylePresetsResponse
from src.core.config import ACCEPTED_UPLOAD_MIME_TYPES, MAX_UPLOAD_BYTES
from src.core.prompts import DEFAULT_STYLE, STYLE_PRESETS

router = APIRouter(prefix="/config", tags=["Configuration"])


@router.get("/styles", response_model=StylePresetsResponse)
async def get_style_presets() -> StylePresetsResponse:
    """
    Get the available style presets in display order.

    The client uses `value` when submitting and `label` for display.
    """
    return StylePresetsResponse(
        styles=[StylePresetItem(value=p.value, label=p.label) for p in STYLE_PRESETS],
        default=DEFAULT_STYLE,
    )


@router.get("/uploads")
async def get_upload_limits() -> dict:
    """Get the accepted upload MIME types and maximum size in bytes."""
    return {
        "accepted_mime_types": list(ACCEPTED_UPLOAD_MIME_TYPES),
        "max_bytes": MAX_UPLOAD_BYTES,
    }
