"""Shared test constants and factories."""

import uuid
from datetime import datetime, timezone
from unittest.mock import MagicMock

USER_ID = uuid.UUID("00000000-0000-0000-0000-000000000001")
OTHER_USER_ID = uuid.UUID("00000000-0000-0000-0000-000000000002")
GENERATION_ID = uuid.UUID("11111111-1111-1111-1111-111111111111")

# 1x1 PNG
PNG_B64 = "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8/5+hHgAHggJ/PchI7wAAAABJRU5ErkJggg=="
PNG_DATA_URI = f"data:image/png;base64,{PNG_B64}"


def make_generation(
    *,
    generation_id=None,
    user_id=USER_ID,
    prompt="a red bicycle",
    style="anime",
    status="pending",
    image_url=None,
):
    generation = MagicMock()
    generation.id = generation_id or GENERATION_ID
    generation.user_id = user_id
    generation.prompt = prompt
    generation.style = style
    generation.status = status
    generation.image_url = image_url
    generation.is_terminal = status in ("completed", "failed")
    generation.created_at = datetime(2025, 10, 23, 12, 0, 0, tzinfo=timezone.utc)
    return generation


def gateway_image_response(image_url=PNG_DATA_URI, content="Here is your image"):
    """Chat-completions body as returned by the AI gateway."""
    return {
        "choices": [
            {
                "message": {
                    "role": "assistant",
                    "content": content,
                    "images": [{"type": "image_url", "image_url": {"url": image_url}}],
                }
            }
        ]
    }
