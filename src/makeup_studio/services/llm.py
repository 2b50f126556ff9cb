"""Shared seam for structured-output language model calls."""

import base64
import re
from typing import Protocol

_DATA_URL_PREFIX = re.compile(r"^data:image/[a-z0-9.+-]+;base64,", re.IGNORECASE)


class StructuredModelClient(Protocol):
    """Interface for LLM calls that return JSON matching a schema."""

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        schema: dict[str, object],
        schema_name: str,
        image_data_urls: list[str] | None = None,
        instructions: str | None = None,
        web_search: bool = False,
    ) -> dict[str, object]:
        """Return structured data produced by the model."""


def target_language(language: str) -> str:
    """Return the language name used in prompts."""
    return "Chinese" if language == "zh" else "English"


def to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def decode_image_payload(payload: str) -> bytes:
    """Decode a data URL or bare base64 string into bytes."""
    cleaned = _DATA_URL_PREFIX.sub("", payload.strip())
    return base64.b64decode(cleaned, validate=True)


def detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
