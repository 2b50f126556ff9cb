"""Makeup plan generation and style transfer."""

import logging
import time
from dataclasses import dataclass
from typing import Protocol
from urllib.parse import urlsplit, urlunsplit

from makeup_studio.domain.analysis import FaceAnalysis
from makeup_studio.domain.plan import BreakdownStep, FaceArea, MakeupPlan
from makeup_studio.domain.styles import StyleEntry
from makeup_studio.services.llm import StructuredModelClient, target_language

logger = logging.getLogger(__name__)

PLAN_STEP_COUNT = 4

PLAN_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "steps": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "area": {"type": "string", "enum": [a.value for a in FaceArea]},
                    "title": {"type": "string"},
                    "instruction": {"type": "string"},
                    "brand": {"type": "string"},
                    "product_name": {"type": "string"},
                    "shade": {"type": "string"},
                    "product_url": {"type": "string"},
                    "color_hex": {"type": "string"},
                },
                "required": [
                    "area",
                    "title",
                    "instruction",
                    "brand",
                    "product_name",
                    "shade",
                    "product_url",
                    "color_hex",
                ],
                "additionalProperties": False,
            },
        }
    },
    "required": ["steps"],
    "additionalProperties": False,
}

TRANSFER_PROMPT = (
    "Digital makeup transfer. Apply the makeup style of the second image to the "
    "face in the first image. Preserve the person's identity, pose and background."
)


class ImageTransformClient(Protocol):
    """Interface for an image-to-image generation model."""

    async def transform(
        self, *, model: str, source_image: bytes, reference_image: bytes, prompt: str
    ) -> bytes:
        """Return the generated image bytes."""


class ImageFetcher(Protocol):
    """Interface for downloading reference images."""

    async def fetch(self, url: str) -> bytes:
        """Download an image and return its bytes."""


@dataclass
class PlanService:
    """Generates the step-by-step breakdown with product suggestions."""

    client: StructuredModelClient
    model: str
    reasoning_effort: str | None
    store: bool
    web_search: bool = True

    async def generate(
        self, style: StyleEntry, analysis: FaceAnalysis, language: str = "en"
    ) -> list[BreakdownStep]:
        """Return the plan steps; an empty list is a valid degraded answer."""
        raw = await self.client.generate(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            prompt=build_plan_prompt(style, analysis, language),
            schema=PLAN_SCHEMA,
            schema_name="makeup_plan",
            web_search=self.web_search,
        )
        steps = MakeupPlan.model_validate(raw).steps
        if steps and len(steps) != PLAN_STEP_COUNT:
            logger.warning(
                "Plan returned unexpected step count", extra={"count": len(steps)}
            )
        return steps


@dataclass
class TransformService:
    """Renders the selected style onto the user's photo."""

    client: ImageTransformClient
    fetcher: ImageFetcher
    model: str

    async def transform(self, source_image: bytes, style: StyleEntry) -> bytes:
        """Fetch the style reference image and return the transformed photo."""
        reference = await self.fetcher.fetch(cache_busted(style.image_url))
        result = await self.client.transform(
            model=self.model,
            source_image=source_image,
            reference_image=reference,
            prompt=TRANSFER_PROMPT,
        )
        if not result:
            raise RuntimeError("No image generated")
        return result


def build_plan_prompt(style: StyleEntry, analysis: FaceAnalysis, language: str) -> str:
    """Return the plan instructions for a style and analysis."""
    return (
        "You are a professional makeup artist and shopping consultant.\n"
        f"Create a {PLAN_STEP_COUNT}-step makeup breakdown for a user with a "
        f"{analysis.face_shape} face and {analysis.skin_tone} skin tone.\n"
        f"RESPOND IN: {target_language(language)}.\n"
        f'Style: "{style.name}". {style.description}\n'
        "Each step targets one area (Face, Brows, Eyes or Lips).\n"
        "PRODUCTS:\n"
        "1. For each step find a real, currently available product.\n"
        "2. Prefer official brand stores or major retailers (Sephora, Ulta, "
        "Cult Beauty, Nordstrom, Tmall, JD).\n"
        "3. Provide a valid URL; if a product page is hard to find, use the brand "
        "store's search results URL. Never invent URLs.\n"
        f"4. The shade must suit {analysis.skin_tone} skin.\n"
        "Provide brand, product name, shade, product URL and a representative hex "
        "color for each step."
    )


def cache_busted(url: str) -> str:
    """Replace the query of a URL with a timestamp to bypass stale caches."""
    parts = urlsplit(url)
    return urlunsplit(parts._replace(query=f"t={int(time.time() * 1000)}"))
