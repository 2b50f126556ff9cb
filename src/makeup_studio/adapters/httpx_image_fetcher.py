"""Reference image download client."""

from dataclasses import dataclass

import httpx

from makeup_studio.services.styling import ImageFetcher


@dataclass
class HttpxImageFetcher(ImageFetcher):
    """Image fetcher using httpx."""

    http_client: httpx.AsyncClient

    @classmethod
    def create(cls) -> "HttpxImageFetcher":
        """Create an image fetcher with a managed httpx session."""
        return cls(http_client=httpx.AsyncClient(follow_redirects=True))

    async def fetch(self, url: str) -> bytes:
        """Download image bytes, rejecting non-image responses."""
        response = await self.http_client.get(
            url, headers={"Cache-Control": "no-cache"}, timeout=20
        )
        response.raise_for_status()
        content_type = response.headers.get("content-type", "")
        if content_type and not content_type.startswith("image/"):
            raise RuntimeError(f"Unexpected style image type: {content_type}")
        if not response.content:
            raise RuntimeError("Style image is empty")
        return response.content

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
