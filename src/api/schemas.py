"""
Pydantic schemas for API request/response models.
"""

from datetime import datetime
from typing import Optional, Literal, List
from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.core.config import ACCEPTED_UPLOAD_MIME_TYPES, MAX_UPLOAD_BYTES
from src.core.image_generator import parse_image_data_uri

StyleValue = Literal[
    "cinematic", "anime", "realistic", "fantasy",
    "cyberpunk", "watercolor", "oil-painting", "3d-render",
]
GenerationStatusValue = Literal["pending", "completed", "failed"]


def check_upload(mime_type: str, size: int) -> None:
    """Raise ValueError unless the upload type and size are accepted."""
    if mime_type not in ACCEPTED_UPLOAD_MIME_TYPES:
        raise ValueError(
            f"Unsupported image type '{mime_type}'. "
            f"Accepted types: jpeg, jpg, png, webp"
        )
    if size > MAX_UPLOAD_BYTES:
        raise ValueError("Image must be 10MB or smaller")


# =============================================================================
# GENERATIONS
# =============================================================================

class GenerationCreateRequest(BaseModel):
    """Request schema for creating a pending generation."""

    prompt: str = Field(..., max_length=2000, description="Prompt describing the image")
    style: StyleValue = Field("cinematic", description="Style preset")

    @field_validator("prompt")
    @classmethod
    def prompt_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Please enter a prompt")
        return v.strip()


class GenerationUpdateRequest(BaseModel):
    """Client-driven terminal transition of a generation."""

    status: Literal["completed", "failed"]
    image_url: Optional[str] = Field(None, alias="imageUrl")

    model_config = ConfigDict(populate_by_name=True)


class GenerationItem(BaseModel):
    """A single generation as shown in the gallery."""

    id: str
    user_id: str
    prompt: str
    style: str
    image_url: Optional[str] = None
    status: GenerationStatusValue
    created_at: datetime

    @classmethod
    def from_model(cls, generation) -> "GenerationItem":
        return cls(
            id=str(generation.id),
            user_id=str(generation.user_id),
            prompt=generation.prompt,
            style=generation.style,
            image_url=generation.image_url,
            status=generation.status,
            created_at=generation.created_at,
        )


class GenerationListResponse(BaseModel):
    generations: List[GenerationItem]


# =============================================================================
# ORCHESTRATOR INVOCATION
# =============================================================================

class GenerateImageRequest(BaseModel):
    """Body of the generate-image invocation (camelCase on the wire)."""

    generation_id: str = Field(..., alias="generationId")
    prompt: str = Field(..., max_length=2000)
    # Unknown presets are accepted and fall back to the default modifier
    style: str = Field(..., min_length=1)
    uploaded_image: Optional[str] = Field(None, alias="uploadedImage")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "generationId": "9b2f4f8e-2f7a-4a8e-9d0e-8f0e5c1d2a3b",
                    "prompt": "a red bicycle",
                    "style": "anime",
                }
            ]
        },
    )

    @field_validator("prompt")
    @classmethod
    def prompt_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Missing required parameters")
        return v

    @field_validator("uploaded_image")
    @classmethod
    def validate_uploaded_image(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        mime_type, raw = parse_image_data_uri(v)
        check_upload(mime_type, len(raw))
        return v


class GenerateImageResponse(BaseModel):
    success: bool = True
    image_url: str = Field(..., alias="imageUrl")

    model_config = ConfigDict(populate_by_name=True)


# =============================================================================
# PROFILE / CONFIG / HEALTH
# =============================================================================

class ProfileResponse(BaseModel):
    id: str
    email: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    subscription_plan: str
    generation_credits: int
    created_at: datetime
    updated_at: datetime


class StylePresetItem(BaseModel):
    value: str
    label: str


class StylePresetsResponse(BaseModel):
    styles: List[StylePresetItem]
    default: str


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "healthy"
    version: str = "1.0.0"
    gateway_configured: bool
    database_configured: bool = False

