"""
Reference image uploads: validated locally before anything goes on the wire.
"""

import base64
import mimetypes
from pathlib import Path

from src.core.config import ACCEPTED_UPLOAD_MIME_TYPES, MAX_UPLOAD_BYTES
from src.core.errors import ValidationError

# Not every platform mime table knows webp
mimetypes.add_type("image/webp", ".webp")


def guess_mime_type(path: Path) -> str:
    mime_type, _ = mimetypes.guess_type(path.name)
    return mime_type or "application/octet-stream"


def validate_upload(path: Path) -> str:
    """Check type and size of an upload; returns its MIME type."""
    if not path.is_file():
        raise ValidationError(f"File not found: {path}")
    mime_type = guess_mime_type(path)
    if mime_type not in ACCEPTED_UPLOAD_MIME_TYPES:
        raise ValidationError(
            f"Unsupported image type '{mime_type}'. Accepted types: jpeg, jpg, png, webp"
        )
    if path.stat().st_size > MAX_UPLOAD_BYTES:
        raise ValidationError("Image must be 10MB or smaller")
    return mime_type


def load_upload_as_data_uri(path: Path) -> str:
    mime_type = validate_upload(path)
    encoded = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"
