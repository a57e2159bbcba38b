"""Tests for the generation orchestrator."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from src.core.errors import (
    AuthorizationError,
    QuotaExhaustedError,
    RateLimitError,
    UnknownError,
    UpstreamError,
    ValidationError,
)
from src.core.image_generator import GeneratedImage
from src.services.generation_service import GenerationOrchestrator
from tests.helpers import GENERATION_ID, PNG_DATA_URI, USER_ID, make_generation


@pytest.fixture
def session():
    return AsyncMock()


@pytest.fixture
def image_client():
    mock = MagicMock()
    mock.generate = AsyncMock(
        return_value=GeneratedImage(image_url=PNG_DATA_URI, prompt_used="enhanced")
    )
    return mock


@pytest.fixture
def repo_mocks():
    with (
        patch(
            "src.services.generation_service.repo.get_generation_for_user",
            new_callable=AsyncMock,
            return_value=make_generation(),
        ) as get_for_user,
        patch(
            "src.services.generation_service.repo.mark_generation_terminal",
            new_callable=AsyncMock,
            return_value=True,
        ) as mark,
        patch(
            "src.services.generation_service.repo.get_generation",
            new_callable=AsyncMock,
        ) as get,
    ):
        yield MagicMock(get_for_user=get_for_user, mark=mark, get=get)


async def _run(session, image_client, **overrides):
    kwargs = dict(
        generation_id=GENERATION_ID, user_id=USER_ID, prompt="a red bicycle", style="anime"
    )
    kwargs.update(overrides)
    return await GenerationOrchestrator(session, image_client).run(**kwargs)


class TestSuccess:
    async def test_completes_pending_generation(self, session, image_client, repo_mocks):
        result = await _run(session, image_client)

        assert result.image_url == PNG_DATA_URI
        assert result.replayed is False
        repo_mocks.mark.assert_awaited_once_with(
            session, GENERATION_ID, status="completed", image_url=PNG_DATA_URI
        )

    async def test_prompt_trimmed_before_model_call(self, session, image_client, repo_mocks):
        await _run(session, image_client, prompt="  a red bicycle  ")
        image_client.generate.assert_awaited_once_with("a red bicycle", "anime", None)


class TestFailures:
    @pytest.mark.parametrize(
        "error", [RateLimitError(), QuotaExhaustedError(), UpstreamError("No image generated")]
    )
    async def test_app_error_marks_failed_and_propagates(
        self, session, image_client, repo_mocks, error
    ):
        image_client.generate.side_effect = error
        with pytest.raises(type(error)):
            await _run(session, image_client)
        repo_mocks.mark.assert_awaited_once_with(session, GENERATION_ID, status="failed")

    async def test_unexpected_error_becomes_unknown(self, session, image_client, repo_mocks):
        image_client.generate.side_effect = RuntimeError("boom")
        with pytest.raises(UnknownError, match="boom"):
            await _run(session, image_client)
        repo_mocks.mark.assert_awaited_once_with(session, GENERATION_ID, status="failed")

    async def test_failure_write_error_does_not_mask_original(
        self, session, image_client, repo_mocks
    ):
        image_client.generate.side_effect = RateLimitError()
        repo_mocks.mark.side_effect = RuntimeError("db down")
        with pytest.raises(RateLimitError):
            await _run(session, image_client)

    async def test_completion_write_error_marks_failed(
        self, session, image_client, repo_mocks
    ):
        repo_mocks.mark.side_effect = [
            OperationalError("UPDATE generations", {}, Exception("connection reset")),
            True,
        ]
        with pytest.raises(UnknownError):
            await _run(session, image_client)

        statuses = [c.kwargs["status"] for c in repo_mocks.mark.await_args_list]
        assert statuses == ["completed", "failed"]
        session.rollback.assert_awaited_once()

    async def test_load_error_becomes_unknown(self, session, image_client, repo_mocks):
        repo_mocks.get_for_user.side_effect = OperationalError(
            "SELECT generations", {}, Exception("connection reset")
        )
        with pytest.raises(UnknownError):
            await _run(session, image_client)
        image_client.generate.assert_not_awaited()
        repo_mocks.mark.assert_not_awaited()

    async def test_empty_prompt(self, session, image_client, repo_mocks):
        with pytest.raises(ValidationError):
            await _run(session, image_client, prompt="   ")
        repo_mocks.get_for_user.assert_not_awaited()

    async def test_ownership_checked_before_model(self, session, image_client, repo_mocks):
        repo_mocks.get_for_user.side_effect = AuthorizationError()
        with pytest.raises(AuthorizationError):
            await _run(session, image_client)
        image_client.generate.assert_not_awaited()
        repo_mocks.mark.assert_not_awaited()


class TestDuplicateInvocations:
    async def test_completed_is_replayed(self, session, image_client, repo_mocks):
        repo_mocks.get_for_user.return_value = make_generation(
            status="completed", image_url=PNG_DATA_URI
        )
        result = await _run(session, image_client)

        assert result.replayed is True
        assert result.image_url == PNG_DATA_URI
        image_client.generate.assert_not_awaited()
        repo_mocks.mark.assert_not_awaited()

    async def test_failed_is_not_retried(self, session, image_client, repo_mocks):
        repo_mocks.get_for_user.return_value = make_generation(status="failed")
        with pytest.raises(UpstreamError, match="already failed"):
            await _run(session, image_client)
        image_client.generate.assert_not_awaited()

    async def test_concurrent_completion_wins(self, session, image_client, repo_mocks):
        repo_mocks.mark.return_value = False
        repo_mocks.get.return_value = make_generation(
            status="completed", image_url="data:image/png;base64,OTHER"
        )
        result = await _run(session, image_client)

        assert result.replayed is True
        assert result.image_url == "data:image/png;base64,OTHER"

    async def test_concurrent_failure_wins(self, session, image_client, repo_mocks):
        repo_mocks.mark.return_value = False
        repo_mocks.get.return_value = make_generation(status="failed")
        with pytest.raises(UpstreamError):
            await _run(session, image_client)
