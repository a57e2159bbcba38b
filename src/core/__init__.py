"""
Core modules: configuration, errors, prompts and external service clients.
"""

from src.core.config import SupabaseConfig, ClientConfig
from src.core.errors import (
    AppError,
    ValidationError,
    AuthorizationError,
    GenerationNotFoundError,
    RateLimitError,
    QuotaExhaustedError,
    UpstreamError,
    UnknownError,
)
from src.core.prompts import STYLE_PRESETS, DEFAULT_STYLE, build_enhanced_prompt
from src.core.image_generator import ImageConfig, ImageModelClient, GeneratedImage
from src.core.auth_client import AuthClient, AuthSession, AuthUser, AuthResponse

__all__ = [
    "SupabaseConfig",
    "ClientConfig",
    "AppError",
    "ValidationError",
    "AuthorizationError",
    "GenerationNotFoundError",
    "RateLimitError",
    "QuotaExhaustedError",
    "UpstreamError",
    "UnknownError",
    "STYLE_PRESETS",
    "DEFAULT_STYLE",
    "build_enhanced_prompt",
    "ImageConfig",
    "ImageModelClient",
    "GeneratedImage",
    "AuthClient",
    "AuthSession",
    "AuthUser",
    "AuthResponse",
]
