"""
Prompts for Image Generation.

This module centralizes the style presets and the prompt text sent
to the image model gateway.
"""

from dataclasses import dataclass
from typing import Dict, List


# =============================================================================
# STYLE PRESETS
# =============================================================================

@dataclass(frozen=True)
class StylePreset:
    """A named modifier appended to the user prompt."""
    value: str
    label: str
    modifier: str


STYLE_PRESETS: List[StylePreset] = [
    StylePreset(
        "cinematic", "🎬 Cinematic",
        "cinematic lighting, dramatic composition, film grain, professional cinematography",
    ),
    StylePreset(
        "anime", "🎌 Anime",
        "anime art style, vibrant colors, detailed illustration, manga inspired",
    ),
    StylePreset(
        "realistic", "📸 Realistic",
        "photorealistic, high detail, professional photography, natural lighting",
    ),
    StylePreset(
        "fantasy", "🧙‍♂️ Fantasy",
        "fantasy art, magical atmosphere, epic composition, vibrant colors",
    ),
    StylePreset(
        "cyberpunk", "🤖 Cyberpunk",
        "cyberpunk style, neon lights, futuristic cityscape, high tech aesthetic",
    ),
    StylePreset(
        "watercolor", "🎨 Watercolor",
        "watercolor painting, soft colors, artistic brushstrokes, flowing",
    ),
    StylePreset(
        "oil-painting", "🖼️ Oil Painting",
        "oil painting style, rich textures, classical art, detailed brushwork",
    ),
    StylePreset(
        "3d-render", "💎 3D Render",
        "3D rendered, volumetric lighting, high quality render, photorealistic materials",
    ),
]

STYLE_MODIFIERS: Dict[str, str] = {p.value: p.modifier for p in STYLE_PRESETS}
STYLE_VALUES = tuple(STYLE_MODIFIERS)
DEFAULT_STYLE = "cinematic"


# =============================================================================
# IMAGE GENERATION PROMPTS
# =============================================================================

QUALITY_SUFFIX = "Ultra high resolution, masterpiece quality."

ENHANCED_PROMPT_TEMPLATE = "{prompt}. Style: {modifier}. {quality}"


def get_style_modifier(style: str) -> str:
    """Return the modifier for a preset, falling back to the default preset."""
    return STYLE_MODIFIERS.get(style, STYLE_MODIFIERS[DEFAULT_STYLE])


def build_enhanced_prompt(prompt: str, style: str) -> str:
    """
    Compose the prompt sent to the image model.

    Args:
        prompt: The user's prompt text
        style: Style preset value; unknown values use the default preset

    Returns:
        Original prompt + style suffix + quality suffix
    """
    return ENHANCED_PROMPT_TEMPLATE.format(
        prompt=prompt,
        modifier=get_style_modifier(style),
        quality=QUALITY_SUFFIX,
    )


def build_image_messages(enhanced_prompt: str, uploaded_image: str | None = None) -> list[dict]:
    """
    Build the single user message for the chat-completions request.

    With an uploaded image the content carries both text and image parts
    (image-conditioned edit mode); otherwise it is the plain prompt string
    (text-to-image mode).
    """
    if uploaded_image:
        content = [
            {"type": "text", "text": enhanced_prompt},
            {"type": "image_url", "image_url": {"url": uploaded_image}},
        ]
    else:
        content = enhanced_prompt
    return [{"role": "user", "content": content}]
