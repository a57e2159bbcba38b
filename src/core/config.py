"""
Configuration settings for the AI Style Image Generator.
"""

from dataclasses import dataclass, field
from pathlib import Path
import os

# Default model and gateway
DEFAULT_IMAGE_MODEL = "google/gemini-2.5-flash-image-preview"
DEFAULT_GATEWAY_URL = "https://ai.gateway.lovable.dev/v1/chat/completions"

# Gallery shows the newest N generations, no pagination
GALLERY_LIMIT = 20

# Upload constraints (checked client-side and again by the API)
MAX_UPLOAD_BYTES = 10 * 1024 * 1024
ACCEPTED_UPLOAD_MIME_TYPES = ("image/jpeg", "image/jpg", "image/png", "image/webp")

from dotenv import load_dotenv

load_dotenv()


@dataclass
class SupabaseConfig:
    """Configuration for the hosted auth service."""

    url: str = field(default_factory=lambda: os.getenv("SUPABASE_URL", ""))
    anon_key: str = field(default_factory=lambda: os.getenv("SUPABASE_ANON_KEY", ""))

    def validate(self) -> bool:
        return bool(self.url and self.anon_key)

    @property
    def auth_url(self) -> str:
        return f"{self.url.rstrip('/')}/auth/v1"


@dataclass
class ClientConfig:
    """Configuration for the command-line client."""

    api_url: str = field(
        default_factory=lambda: os.getenv("GENERATOR_API_URL", "http://localhost:8000/api/v1")
    )
    session_file: Path = field(
        default_factory=lambda: Path(
            os.getenv(
                "GENERATOR_SESSION_FILE",
                str(Path.home() / ".config" / "ai-style-image-generator" / "session.json"),
            )
        )
    )
    redirect_url: str = field(
        default_factory=lambda: os.getenv("GENERATOR_REDIRECT_URL", "http://localhost:8080/")
    )
    download_dir: Path = field(default_factory=lambda: Path(os.getenv("GENERATOR_DOWNLOAD_DIR", ".")))
