"""Models for face analysis results."""

from pydantic import BaseModel, ConfigDict, Field, model_validator

SCORE_COUNT = 5


class BoundingBox(BaseModel):
    """Axis-aligned rectangle in the normalized 0-1000 coordinate space."""

    model_config = ConfigDict(frozen=True)

    xmin: int = Field(ge=0, le=1000)
    ymin: int = Field(ge=0, le=1000)
    xmax: int = Field(ge=0, le=1000)
    ymax: int = Field(ge=0, le=1000)

    @model_validator(mode="after")
    def _check_order(self) -> "BoundingBox":
        if self.xmin > self.xmax or self.ymin > self.ymax:
            raise ValueError("bounding box min must not exceed max")
        return self


class FaceFeatures(BaseModel):
    """Landmark-derived boxes for the regions used in close-ups."""

    model_config = ConfigDict(frozen=True)

    eyes: BoundingBox
    brows: BoundingBox
    lips: BoundingBox


class ScoreEntry(BaseModel):
    """Single radar-chart score for a facial attribute."""

    model_config = ConfigDict(frozen=True)

    subject: str
    value: float = Field(ge=0, le=100)
    max: float = 100


class FaceAnalysis(BaseModel):
    """Structured output of the face analysis model."""

    model_config = ConfigDict(frozen=True)

    face_shape: str
    skin_tone: str
    eye_shape: str
    summary: str
    scores: list[ScoreEntry] = Field(min_length=SCORE_COUNT, max_length=SCORE_COUNT)
    features: FaceFeatures | None = None

    def with_features(self, features: FaceFeatures | None) -> "FaceAnalysis":
        """Return a copy carrying the given landmark features."""
        if features is None or features == self.features:
            return self
        return self.model_copy(update={"features": features})
