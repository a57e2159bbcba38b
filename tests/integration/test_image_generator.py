"""Integration tests for src/core/image_generator.py (mocked HTTP)."""

import json

import httpx
import pytest

from src.core.errors import QuotaExhaustedError, RateLimitError, UpstreamError
from src.core.image_generator import ImageConfig, ImageModelClient, extract_image_url
from tests.helpers import PNG_DATA_URI, gateway_image_response


def _client(handler, api_key="test-key"):
    config = ImageConfig(api_key=api_key, base_url="https://gateway.test/v1/chat/completions")
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ImageModelClient(config, client=http)


class TestRequest:
    async def test_text_to_image_payload(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["auth"] = request.headers["Authorization"]
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json=gateway_image_response())

        async with _client(handler) as client:
            image = await client.generate("a red bicycle", "anime")

        body = captured["body"]
        assert captured["auth"] == "Bearer test-key"
        assert body["model"] == "google/gemini-2.5-flash-image-preview"
        assert body["modalities"] == ["image", "text"]
        assert body["messages"][0]["content"].startswith("a red bicycle. Style: anime art style")
        assert image.image_url == PNG_DATA_URI
        assert image.text == "Here is your image"

    async def test_edit_mode_payload(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json=gateway_image_response())

        async with _client(handler) as client:
            await client.generate("make it glow", "fantasy", PNG_DATA_URI)

        content = captured["body"]["messages"][0]["content"]
        assert content[0]["type"] == "text"
        assert content[1] == {"type": "image_url", "image_url": {"url": PNG_DATA_URI}}


class TestErrors:
    @pytest.mark.parametrize(
        "status, error",
        [(429, RateLimitError), (402, QuotaExhaustedError), (500, UpstreamError), (400, UpstreamError)],
    )
    async def test_status_mapping(self, status, error):
        async with _client(lambda r: httpx.Response(status, text="nope")) as client:
            with pytest.raises(error):
                await client.generate("x", "anime")

    async def test_other_status_message(self):
        async with _client(lambda r: httpx.Response(503, text="down")) as client:
            with pytest.raises(UpstreamError, match="AI gateway error: 503"):
                await client.generate("x", "anime")

    async def test_no_image_in_response(self):
        body = {"choices": [{"message": {"content": "I cannot draw that"}}]}
        async with _client(lambda r: httpx.Response(200, json=body)) as client:
            with pytest.raises(UpstreamError, match="No image generated"):
                await client.generate("x", "anime")

    async def test_invalid_json(self):
        async with _client(lambda r: httpx.Response(200, text="<html>")) as client:
            with pytest.raises(UpstreamError):
                await client.generate("x", "anime")

    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        async with _client(handler) as client:
            with pytest.raises(UpstreamError, match="Request failed"):
                await client.generate("x", "anime")

    async def test_missing_key_never_calls_gateway(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=gateway_image_response())

        async with _client(handler, api_key="") as client:
            with pytest.raises(UpstreamError, match="AI_GATEWAY_API_KEY"):
                await client.generate("x", "anime")
        assert calls == []


class TestExtractImageUrl:
    def test_empty_choices(self):
        assert extract_image_url({"choices": []}) is None

    def test_empty_images(self):
        assert extract_image_url({"choices": [{"message": {"images": []}}]}) is None
