"""Integration tests for the client-side API wrapper (mocked HTTP)."""

import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from src.client.api_client import GeneratorApiClient
from src.client.submission import SubmissionForm
from src.core.auth_client import AuthUser
from src.core.errors import (
    AuthorizationError,
    GenerationNotFoundError,
    QuotaExhaustedError,
    RateLimitError,
    UnknownError,
    UpstreamError,
    ValidationError,
)

BASE = "http://api.test/api/v1"


def _client(handler, token="tok"):
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GeneratorApiClient(BASE, lambda: token, client=http)


class TestRequests:
    async def test_bearer_token_and_body(self):
        captured = {}

        def handler(request):
            captured["auth"] = request.headers.get("Authorization")
            captured["url"] = str(request.url)
            captured["body"] = json.loads(request.content)
            return httpx.Response(201, json={"id": "g1", "status": "pending"})

        async with _client(handler) as api:
            data = await api.create_generation("a cat", "anime")

        assert data["id"] == "g1"
        assert captured["auth"] == "Bearer tok"
        assert captured["url"] == f"{BASE}/generations"
        assert captured["body"] == {"prompt": "a cat", "style": "anime"}

    async def test_no_token_no_header(self):
        captured = {}

        def handler(request):
            captured["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json={"generations": []})

        async with _client(handler, token=None) as api:
            assert await api.list_generations() == []
        assert captured["auth"] is None

    async def test_generate_image_camel_case(self):
        captured = {}

        def handler(request):
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={"success": True, "imageUrl": "data:x"})

        async with _client(handler) as api:
            await api.generate_image("g1", "a cat", "anime", "data:image/png;base64,AA==")

        assert captured["body"] == {
            "generationId": "g1",
            "prompt": "a cat",
            "style": "anime",
            "uploadedImage": "data:image/png;base64,AA==",
        }

    async def test_update_sends_image_url_alias(self):
        captured = {}

        def handler(request):
            captured["method"] = request.method
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={"status": "completed"})

        async with _client(handler) as api:
            await api.update_generation("g1", "completed", "data:x")
        assert captured["method"] == "PATCH"
        assert captured["body"] == {"status": "completed", "imageUrl": "data:x"}


class TestErrorMapping:
    @pytest.mark.parametrize(
        "status, error",
        [
            (400, ValidationError),
            (402, QuotaExhaustedError),
            (403, AuthorizationError),
            (404, GenerationNotFoundError),
            (429, RateLimitError),
            (500, UpstreamError),
        ],
    )
    async def test_maps_status(self, status, error):
        async with _client(lambda r: httpx.Response(status, json={"error": "msg"})) as api:
            with pytest.raises(error, match="msg"):
                await api.generate_image("g1", "p", "anime")

    async def test_non_json_error_body(self):
        async with _client(lambda r: httpx.Response(502, text="Bad Gateway")) as api:
            with pytest.raises(UpstreamError, match="502"):
                await api.get_profile()

    async def test_non_json_success_body(self):
        def handler(request):
            return httpx.Response(
                200, text="<html>maintenance</html>", headers={"Content-Type": "text/html"}
            )

        async with _client(handler) as api:
            with pytest.raises(UnknownError, match="Invalid response"):
                await api.generate_image("g1", "p", "anime")

    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        async with _client(handler) as api:
            with pytest.raises(UpstreamError, match="Request failed"):
                await api.get_styles()


class TestSubmissionOverHttp:
    async def test_html_orchestrator_response(self):
        calls = []

        def handler(request):
            calls.append((request.method, request.url.path))
            if request.url.path.endswith("/generations"):
                return httpx.Response(201, json={"id": "g1", "status": "pending"})
            if request.url.path.endswith("/generate-image"):
                return httpx.Response(200, text="<html>proxy</html>")
            return httpx.Response(200, json={"id": "g1", "status": "failed"})

        session_state = MagicMock()
        session_state.get_user = AsyncMock(return_value=AuthUser(id="u1", email="a@example.com"))

        async with _client(handler) as api:
            outcome = await SubmissionForm(api, session_state).submit("a cat", "anime")

        assert outcome.success is False
        assert outcome.message == "An error occurred. Please try again."
        assert calls[-1] == ("PATCH", "/api/v1/generations/g1")
