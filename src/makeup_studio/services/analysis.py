"""Face analysis via a vision-capable language model."""

from dataclasses import dataclass

from makeup_studio.domain.analysis import SCORE_COUNT, FaceAnalysis
from makeup_studio.services.llm import (
    StructuredModelClient,
    target_language,
    to_data_url,
)

ANALYSIS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "face_shape": {"type": "string"},
        "skin_tone": {"type": "string"},
        "eye_shape": {"type": "string"},
        "summary": {"type": "string"},
        "scores": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "subject": {"type": "string"},
                    "value": {"type": "number", "minimum": 0, "maximum": 100},
                    "max": {"type": "number"},
                },
                "required": ["subject", "value", "max"],
                "additionalProperties": False,
            },
        },
    },
    "required": ["face_shape", "skin_tone", "eye_shape", "summary", "scores"],
    "additionalProperties": False,
}

SCORE_SUBJECTS = (
    "Skin Texture",
    "Symmetry",
    "Eye Brightness",
    "Lip Color",
    "Contour Definition",
)

# Labels the style catalog is tagged against; localized labels would not match.
FACE_SHAPES = ("Oval", "Round", "Square", "Heart", "Long", "Diamond")
SKIN_TONES = ("Fair", "Light", "Medium", "Tan", "Deep", "Warm", "Cool", "Neutral")
EYE_SHAPES = ("Almond", "Round Eyes", "Monolid", "Hooded")


@dataclass
class AnalysisService:
    """Builds the analysis prompt and validates the model's answer."""

    client: StructuredModelClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def analyze(
        self,
        image_bytes: bytes,
        concerns: list[str],
        goals: list[str],
        language: str = "en",
    ) -> FaceAnalysis:
        """Classify face shape, skin tone and eye shape and score the face."""
        raw = await self.client.generate(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            prompt=build_analysis_prompt(concerns, goals, language),
            schema=ANALYSIS_SCHEMA,
            schema_name="face_analysis",
            image_data_urls=[to_data_url(image_bytes)],
        )
        return FaceAnalysis.model_validate(raw)


def build_analysis_prompt(concerns: list[str], goals: list[str], language: str) -> str:
    """Return the analysis instructions for the user's context."""
    concerns_text = ", ".join(concerns) if concerns else "None"
    goals_text = ", ".join(goals) if goals else "Natural enhancement"
    return (
        "TASK: Perform a professional makeup analysis of this face.\n"
        f"RESPOND IN: {target_language(language)}.\n"
        "CONTEXT:\n"
        f"- Subjective concerns: {concerns_text}.\n"
        f"- Makeup goals: {goals_text}.\n"
        "INSTRUCTIONS:\n"
        "1. Identify the objective face shape, skin tone and eye shape. Use exactly "
        f"one English label each: face_shape from {', '.join(FACE_SHAPES)}; "
        f"skin_tone from {', '.join(SKIN_TONES)}; "
        f"eye_shape from {', '.join(EYE_SHAPES)}.\n"
        "2. Write a supportive 2-3 sentence summary that starts by referencing "
        "their goals.\n"
        f"3. Provide exactly {SCORE_COUNT} scores (0-100, max 100) for "
        f"{', '.join(SCORE_SUBJECTS)}, in that order, with subject labels in "
        f"{target_language(language)}."
    )
