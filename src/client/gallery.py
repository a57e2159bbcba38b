"""
Gallery of the signed-in user's generations, plus the refresh signal the
submission flow bumps after a successful generation.
"""

import logging
from pathlib import Path
from typing import Callable, Optional

from src.client.api_client import GeneratorApiClient
from src.core.config import GALLERY_LIMIT
from src.core.errors import AppError, ValidationError
from src.core.image_generator import parse_image_data_uri

logger = logging.getLogger(__name__)


class RefreshSignal:
    """Monotonic counter; every increment notifies subscribers."""

    def __init__(self):
        self.value = 0
        self._listeners: list[Callable[[int], None]] = []

    def increment(self) -> int:
        self.value += 1
        for listener in list(self._listeners):
            listener(self.value)
        return self.value

    def subscribe(self, listener: Callable[[int], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe


def download_filename(prompt: str) -> str:
    """First 30 characters of the prompt, made safe for the filesystem."""
    stem = prompt[:30].replace("/", "_").replace("\\", "_").strip() or "image"
    return f"{stem}.png"


def decode_data_uri(value: str) -> Optional[bytes]:
    """Bytes of a stored data URI, or None for a remote URL."""
    if not value.startswith("data:"):
        return None
    try:
        _, raw = parse_image_data_uri(value)
    except ValueError as e:
        raise ValidationError(f"Stored image is corrupt: {e}") from e
    return raw


class Gallery:
    def __init__(self, api: GeneratorApiClient, signal: Optional[RefreshSignal] = None):
        self.api = api
        self.items: list[dict] = []
        self.loading = False
        self._seen = -1
        self._signal = signal

    @property
    def stale(self) -> bool:
        return self._signal is not None and self._signal.value != self._seen

    async def refresh(self) -> list[dict]:
        """Reload the newest generations, replacing the current list."""
        self.loading = True
        try:
            self.items = await self.api.list_generations(limit=GALLERY_LIMIT)
        except AppError as e:
            logger.error(f"Failed to load generations: {e.message}")
            raise
        finally:
            self.loading = False
        if self._signal is not None:
            self._seen = self._signal.value
        return self.items

    async def sync(self) -> list[dict]:
        """Refresh only if the signal moved since the last load."""
        if self.stale or self._seen < 0:
            return await self.refresh()
        return self.items

    async def delete(self, generation_id: str) -> None:
        await self.api.delete_generation(generation_id)
        self.items = [item for item in self.items if str(item["id"]) != str(generation_id)]
        logger.info(f"Generation deleted: {generation_id}")

    async def download(self, generation: dict, dest_dir: Path) -> Path:
        """Save the generation's image as ``<prompt[:30]>.png`` under dest_dir."""
        image_url = generation.get("imageUrl") or generation.get("image_url")
        if not image_url:
            raise ValidationError("This generation has no image to download")

        content = decode_data_uri(image_url)
        if content is None:
            content = await self.api.fetch_bytes(image_url)

        dest_dir.mkdir(parents=True, exist_ok=True)
        target = dest_dir / download_filename(generation["prompt"])
        target.write_bytes(content)
        logger.info(f"Image downloaded to {target}")
        return target
