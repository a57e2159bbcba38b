"""
Generation orchestrator.

Takes a pending generation through the image model call and writes its
terminal state. The orchestrator is the only side that writes
``completed``/``failed`` for an invocation, and does so before returning,
so a record is never left pending once a call has finished.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.errors import AppError, UnknownError, UpstreamError, ValidationError
from src.core.image_generator import ImageModelClient
from src.db import repository as repo

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    generation_id: uuid.UUID
    image_url: str
    # True when the record was already completed and the model was not called
    replayed: bool = False


class GenerationOrchestrator:
    def __init__(self, session: AsyncSession, image_client: ImageModelClient):
        self._session = session
        self._image_client = image_client

    async def run(
        self,
        *,
        generation_id: uuid.UUID,
        user_id: uuid.UUID,
        prompt: str,
        style: str,
        uploaded_image: Optional[str] = None,
    ) -> GenerationResult:
        """
        Generate the image for a pending generation and store the outcome.

        Duplicate invocations for a generation that is already terminal do
        not call the model: a completed record is replayed, a failed one
        raises UpstreamError.

        Raises:
            ValidationError: empty prompt
            GenerationNotFoundError / AuthorizationError: bad generation id
            RateLimitError, QuotaExhaustedError, UpstreamError, UnknownError:
                model call or completion write failed; the record has been
                marked failed. A database error while loading the record is
                also raised as UnknownError.
        """
        if not prompt or not prompt.strip():
            raise ValidationError("Prompt cannot be empty")

        log_prefix = f"[{generation_id}]"
        try:
            generation = await repo.get_generation_for_user(self._session, generation_id, user_id)
        except AppError:
            raise
        except Exception as e:
            # Ownership is unverified here, so nothing is written
            logger.error(f"{log_prefix} Could not load generation: {e}", exc_info=True)
            raise UnknownError(str(e)) from e

        if generation.status == "completed":
            logger.info(f"{log_prefix} Already completed, skipping model call")
            return GenerationResult(generation.id, generation.image_url, replayed=True)
        if generation.status == "failed":
            logger.info(f"{log_prefix} Already failed, skipping model call")
            raise UpstreamError("Generation already failed")

        logger.info(f"{log_prefix} Starting generation: style={style}, upload={bool(uploaded_image)}")
        try:
            image = await self._image_client.generate(prompt.strip(), style, uploaded_image)
            transitioned = await repo.mark_generation_terminal(
                self._session, generation_id, status="completed", image_url=image.image_url
            )
        except AppError as e:
            logger.warning(f"{log_prefix} Image generation failed: {e.message}")
            await self._record_failure(generation_id)
            raise
        except Exception as e:
            logger.error(f"{log_prefix} Unexpected error during generation: {e}", exc_info=True)
            await self._record_failure(generation_id)
            raise UnknownError(str(e)) from e

        if not transitioned:
            # A concurrent invocation finished first; its write stands
            try:
                current = await repo.get_generation(self._session, generation_id)
            except Exception as e:
                logger.error(f"{log_prefix} Could not reload generation: {e}", exc_info=True)
                raise UnknownError(str(e)) from e
            logger.warning(f"{log_prefix} Record already terminal ({current.status if current else 'deleted'}), result discarded")
            if current is None or current.status != "completed":
                raise UpstreamError("Generation already failed")
            return GenerationResult(current.id, current.image_url, replayed=True)

        logger.info(f"{log_prefix} Generation completed")
        return GenerationResult(generation_id, image.image_url)

    async def _record_failure(self, generation_id: uuid.UUID) -> None:
        try:
            await self._session.rollback()
            await repo.mark_generation_terminal(self._session, generation_id, status="failed")
        except Exception as err:
            logger.error(f"[{generation_id}] Could not record failure: {err}", exc_info=True)
