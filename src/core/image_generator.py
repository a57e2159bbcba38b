"""
Image Generator for styled prompts.

This module handles the single chat-completions call to the image
model gateway and turns its response into a data URI.
"""

import os
import re
import base64
import binascii
import httpx
import logging
from dataclasses import dataclass, field
from typing import Optional, Any

from src.core.config import DEFAULT_GATEWAY_URL, DEFAULT_IMAGE_MODEL
from src.core.errors import QuotaExhaustedError, RateLimitError, UpstreamError
from src.core.prompts import build_enhanced_prompt, build_image_messages

logger = logging.getLogger(__name__)


@dataclass
class ImageConfig:
    """Configuration for image generation via the AI gateway."""

    api_key: str = field(default_factory=lambda: os.getenv("AI_GATEWAY_API_KEY", ""))
    base_url: str = field(default_factory=lambda: os.getenv("AI_GATEWAY_URL", DEFAULT_GATEWAY_URL))

    # Model settings - use a model that supports image output
    model: str = field(default_factory=lambda: os.getenv("IMAGE_MODEL", DEFAULT_IMAGE_MODEL))
    timeout: float = 120.0

    def validate(self) -> bool:
        """Check if API key is configured."""
        return bool(self.api_key or os.getenv("AI_GATEWAY_API_KEY", ""))

    def get_api_key(self) -> str:
        """Get the API key."""
        return self.api_key or os.getenv("AI_GATEWAY_API_KEY", "")


@dataclass
class GeneratedImage:
    """Result of image generation."""
    image_url: str
    prompt_used: str
    text: Optional[str] = None


def extract_image_url(data: dict[str, Any]) -> Optional[str]:
    """Return the first image data URI from a chat-completions response."""
    choices = data.get("choices") or []
    if not choices:
        return None
    message = choices[0].get("message") or {}
    images = message.get("images") or []
    if not images:
        return None
    url = (images[0].get("image_url") or {}).get("url")
    return url or None


DATA_URI_RE = re.compile(r"^data:(?P<mime>[\w/+.-]+);base64,(?P<data>.+)$", re.DOTALL)


def parse_image_data_uri(value: str) -> tuple[str, bytes]:
    """Split an image data URI into its MIME type and decoded bytes."""
    match = DATA_URI_RE.match(value)
    if not match:
        raise ValueError("Image must be a base64 data URI")
    try:
        raw = base64.b64decode(match.group("data"), validate=True)
    except (binascii.Error, ValueError):
        raise ValueError("Image is not valid base64")
    return match.group("mime").lower(), raw


class ImageModelClient:
    """Generate images through the gateway's chat completions endpoint.

    One instance may serve several requests; call ``close()`` (or use it as
    an async context manager) when done.
    """

    def __init__(self, config: ImageConfig, client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self.headers = {
            "Authorization": f"Bearer {config.get_api_key()}",
            "Content-Type": "application/json",
        }
        self._client = client or httpx.AsyncClient(timeout=config.timeout)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *_exc):
        await self.close()

    def build_payload(self, enhanced_prompt: str, uploaded_image: Optional[str] = None) -> dict:
        return {
            "model": self.config.model,
            "messages": build_image_messages(enhanced_prompt, uploaded_image),
            "modalities": ["image", "text"],
        }

    async def generate(
        self,
        prompt: str,
        style: str,
        uploaded_image: Optional[str] = None,
    ) -> GeneratedImage:
        """
        Generate one image for a prompt and style preset.

        Raises:
            RateLimitError: gateway answered 429
            QuotaExhaustedError: gateway answered 402
            UpstreamError: any other failure, including a response with no image
        """
        if not self.config.validate():
            raise UpstreamError("AI_GATEWAY_API_KEY is not configured")

        enhanced_prompt = build_enhanced_prompt(prompt, style)
        logger.info(f"Generating image with prompt: {enhanced_prompt}")
        logger.info(f"Has uploaded image: {bool(uploaded_image)}")

        try:
            response = await self._client.post(
                self.config.base_url,
                headers=self.headers,
                json=self.build_payload(enhanced_prompt, uploaded_image),
            )
        except httpx.HTTPError as e:
            logger.error(f"Request exception: {e}", exc_info=True)
            raise UpstreamError(f"Request failed: {e}") from e

        if response.status_code == 429:
            logger.error(f"AI gateway error: 429 - {response.text[:500]}")
            raise RateLimitError()
        if response.status_code == 402:
            logger.error(f"AI gateway error: 402 - {response.text[:500]}")
            raise QuotaExhaustedError()
        if not response.is_success:
            logger.error(f"AI gateway error: {response.status_code} - {response.text[:500]}")
            raise UpstreamError(f"AI gateway error: {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError("AI gateway returned invalid JSON") from e

        image_url = extract_image_url(data)
        if not image_url:
            msg_keys = list(data["choices"][0].get("message", {}).keys()) if data.get("choices") else "N/A"
            logger.warning(f"No image in response. Message keys: {msg_keys}")
            raise UpstreamError("No image generated")

        text = None
        if data.get("choices"):
            text = data["choices"][0].get("message", {}).get("content") or None

        logger.info("Image generated successfully")
        return GeneratedImage(image_url=image_url, prompt_used=enhanced_prompt, text=text)
