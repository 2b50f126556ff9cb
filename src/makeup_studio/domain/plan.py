"""Models for generated makeup plans."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class FaceArea(StrEnum):
    """Facial area targeted by a breakdown step."""

    FACE = "Face"
    BROWS = "Brows"
    EYES = "Eyes"
    LIPS = "Lips"


class BreakdownStep(BaseModel):
    """One instruction unit of a styling plan with its product suggestion."""

    model_config = ConfigDict(frozen=True)

    area: FaceArea
    title: str
    instruction: str
    brand: str
    product_name: str
    shade: str
    product_url: str
    color_hex: str


class MakeupPlan(BaseModel):
    """Structured output for plan generation."""

    steps: list[BreakdownStep]
