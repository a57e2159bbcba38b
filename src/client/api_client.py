"""
Async HTTP client for the generator API.

Error responses are mapped back onto the shared error taxonomy, so callers
handle ``RateLimitError`` etc. the same way on both sides of the wire.
"""

import logging
from typing import Any, Callable, Optional

import httpx

from src.core.config import GALLERY_LIMIT
from src.core.errors import UnknownError, UpstreamError, error_for_status

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Optional[str]]


class GeneratorApiClient:
    def __init__(
        self,
        base_url: str,
        token_provider: TokenProvider,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._token_provider = token_provider
        self._client = client or httpx.AsyncClient(timeout=180.0)

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *_exc):
        await self.close()

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        token = self._token_provider()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = await self._client.request(
                method, f"{self.base_url}{path}", headers=self._headers(), **kwargs
            )
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise UpstreamError(f"Request failed: {e}") from e

        if not response.is_success:
            try:
                message = response.json().get("error")
            except ValueError:
                message = None
            raise error_for_status(
                response.status_code,
                message or f"Request failed with status {response.status_code}",
            )

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"{method} {path} returned a non-JSON body ({response.status_code})")
            raise UnknownError("Invalid response from server") from e

    # ------------------------------------------------------------------
    # Request store
    # ------------------------------------------------------------------

    async def create_generation(self, prompt: str, style: str) -> dict:
        return await self._request(
            "POST", "/generations", json={"prompt": prompt, "style": style}
        )

    async def list_generations(self, limit: int = GALLERY_LIMIT) -> list[dict]:
        data = await self._request("GET", "/generations", params={"limit": limit})
        return data["generations"]

    async def get_generation(self, generation_id: str) -> dict:
        return await self._request("GET", f"/generations/{generation_id}")

    async def update_generation(
        self, generation_id: str, status: str, image_url: Optional[str] = None
    ) -> dict:
        body = {"status": status}
        if image_url is not None:
            body["imageUrl"] = image_url
        return await self._request("PATCH", f"/generations/{generation_id}", json=body)

    async def delete_generation(self, generation_id: str) -> None:
        await self._request("DELETE", f"/generations/{generation_id}")

    # ------------------------------------------------------------------
    # Orchestrator and read-only endpoints
    # ------------------------------------------------------------------

    async def generate_image(
        self,
        generation_id: str,
        prompt: str,
        style: str,
        uploaded_image: Optional[str] = None,
    ) -> dict:
        body = {"generationId": generation_id, "prompt": prompt, "style": style}
        if uploaded_image:
            body["uploadedImage"] = uploaded_image
        return await self._request("POST", "/generate-image", json=body)

    async def get_profile(self) -> dict:
        return await self._request("GET", "/profile")

    async def get_styles(self) -> dict:
        return await self._request("GET", "/config/styles")

    async def fetch_bytes(self, url: str) -> bytes:
        """Download a remote image (used for non data-URI image urls)."""
        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise UpstreamError(f"Download failed: {e}") from e
        return response.content
