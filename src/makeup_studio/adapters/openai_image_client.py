"""OpenAI Images API client for style transfer."""

import base64
from dataclasses import dataclass

from openai import AsyncOpenAI

from makeup_studio.services.llm import detect_mime_type
from makeup_studio.services.styling import ImageTransformClient


@dataclass
class OpenAIImageClient(ImageTransformClient):
    """Image transform client backed by the OpenAI image edit endpoint."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIImageClient":
        """Create an OpenAI image client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def transform(
        self, *, model: str, source_image: bytes, reference_image: bytes, prompt: str
    ) -> bytes:
        """Edit the source image using the reference image as style guidance."""
        response = await self.client.images.edit(
            model=model,
            image=[
                _as_upload("source", source_image),
                _as_upload("reference", reference_image),
            ],
            prompt=prompt,
        )
        data = response.data or []
        encoded = data[0].b64_json if data else None
        if not encoded:
            raise RuntimeError("OpenAI returned no image")
        return base64.b64decode(encoded)

    async def close(self) -> None:
        """Close the underlying OpenAI HTTP session."""
        await self.client.close()


def _as_upload(name: str, image_bytes: bytes) -> tuple[str, bytes, str]:
    mime_type = detect_mime_type(image_bytes)
    extension = mime_type.split("/", maxsplit=1)[1]
    return f"{name}.{extension}", image_bytes, mime_type
