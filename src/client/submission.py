"""
Generation submission flow.

Creates the pending record, invokes the orchestrator, and on failure marks
the record failed and maps the error onto a user-facing message.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from src.client.api_client import GeneratorApiClient
from src.client.gallery import RefreshSignal
from src.client.session import SessionState
from src.client.uploads import load_upload_as_data_uri
from src.core.errors import (
    AppError,
    QuotaExhaustedError,
    RateLimitError,
    UnknownError,
    ValidationError,
)
from src.core.prompts import DEFAULT_STYLE

logger = logging.getLogger(__name__)

IDLE = "idle"
SUBMITTING = "submitting"

MSG_EMPTY_PROMPT = "Please enter a prompt"
MSG_SIGN_IN = "Please sign in to generate images"
MSG_RATE_LIMITED = "Rate limit exceeded. Please try again in a moment."
MSG_QUOTA = "AI credits depleted. Please add more credits to continue."
MSG_GENERATION_FAILED = "Failed to generate image. Please try again."
MSG_UNEXPECTED = "An error occurred. Please try again."
MSG_SUCCESS = "Image generated successfully!"
MSG_BUSY = "A generation is already in progress"


@dataclass
class SubmissionOutcome:
    success: bool
    message: str
    generation_id: Optional[str] = None
    image_url: Optional[str] = None


def message_for_error(error: AppError) -> str:
    if isinstance(error, RateLimitError):
        return MSG_RATE_LIMITED
    if isinstance(error, QuotaExhaustedError):
        return MSG_QUOTA
    if isinstance(error, UnknownError):
        return MSG_UNEXPECTED
    return MSG_GENERATION_FAILED


class SubmissionForm:
    def __init__(
        self,
        api: GeneratorApiClient,
        session_state: SessionState,
        refresh_signal: Optional[RefreshSignal] = None,
    ):
        self.api = api
        self.session_state = session_state
        self.refresh_signal = refresh_signal
        self.state = IDLE
        self.prompt = ""
        self.style = DEFAULT_STYLE

    async def submit(
        self,
        prompt: Optional[str] = None,
        style: Optional[str] = None,
        upload_path: Optional[Path] = None,
    ) -> SubmissionOutcome:
        if self.state == SUBMITTING:
            return SubmissionOutcome(False, MSG_BUSY)

        if prompt is not None:
            self.prompt = prompt
        if style is not None:
            self.style = style

        text = self.prompt.strip()
        if not text:
            return SubmissionOutcome(False, MSG_EMPTY_PROMPT)

        uploaded_image = None
        if upload_path is not None:
            try:
                uploaded_image = load_upload_as_data_uri(upload_path)
            except ValidationError as e:
                return SubmissionOutcome(False, e.message)

        self.state = SUBMITTING
        try:
            return await self._run(text, uploaded_image)
        finally:
            self.state = IDLE

    async def _run(self, text: str, uploaded_image: Optional[str]) -> SubmissionOutcome:
        user = await self.session_state.get_user()
        if user is None:
            return SubmissionOutcome(False, MSG_SIGN_IN)

        try:
            generation = await self.api.create_generation(text, self.style)
            generation_id = generation["id"]
        except AppError as e:
            logger.error(f"Could not create generation: {e.message}")
            return SubmissionOutcome(False, MSG_UNEXPECTED)
        except (KeyError, TypeError) as e:
            logger.error(f"Unexpected create response: {e!r}")
            return SubmissionOutcome(False, MSG_UNEXPECTED)
        try:
            result = await self.api.generate_image(
                generation_id, text, self.style, uploaded_image
            )
        except AppError as e:
            logger.warning(f"Generation {generation_id} failed: {e.message}")
            await self._mark_failed(generation_id)
            return SubmissionOutcome(False, message_for_error(e), generation_id)
        except Exception as e:
            logger.error(f"Generation {generation_id} failed unexpectedly: {e}", exc_info=True)
            await self._mark_failed(generation_id)
            return SubmissionOutcome(False, MSG_UNEXPECTED, generation_id)

        self.prompt = ""
        if self.refresh_signal is not None:
            self.refresh_signal.increment()
        return SubmissionOutcome(True, MSG_SUCCESS, generation_id, result.get("imageUrl"))

    async def _mark_failed(self, generation_id: str) -> None:
        # The orchestrator already wrote the terminal state; this only covers
        # a request that never reached it.
        try:
            await self.api.update_generation(generation_id, "failed")
        except AppError as e:
            logger.warning(f"Could not mark {generation_id} failed: {e.message}")
