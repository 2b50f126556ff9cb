"""Reduce facial landmark points to region bounding boxes."""

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from makeup_studio.domain.analysis import BoundingBox, FaceFeatures

logger = logging.getLogger(__name__)

# Indices into the 478-point face mesh.
EYE_INDICES = (
    33, 133, 160, 159, 158, 144, 145, 153, 246, 7,
    362, 263, 387, 386, 385, 373, 374, 380, 249,
)  # fmt: skip
BROW_INDICES = (
    70, 63, 105, 66, 107, 55, 65, 52, 53, 46,
    336, 296, 334, 293, 300, 285, 295, 282, 283, 276,
)  # fmt: skip
LIP_INDICES = (
    61, 146, 91, 181, 84, 17, 314, 405, 321, 375, 291, 409, 270, 269, 267, 0, 37,
    39, 40, 185, 78, 95, 88, 178, 87, 14, 317, 402, 318, 324, 308, 415, 310, 311,
    312, 13, 82, 81, 80, 191,
)  # fmt: skip

Point = tuple[float, float]


class LandmarkDetector(Protocol):
    """Interface for a face landmark detector."""

    async def detect(self, image_bytes: bytes) -> list[Point] | None:
        """Return normalized (x, y) points for one face, or None if no face."""


@dataclass
class LandmarkService:
    """Turns raw landmark points into the eyes/brows/lips boxes."""

    detector: LandmarkDetector

    async def locate(self, image_bytes: bytes) -> FaceFeatures | None:
        """Return region boxes, or None when features are unavailable."""
        try:
            points = await self.detector.detect(image_bytes)
        except Exception:
            logger.exception("Landmark detection failed")
            return None
        if not points:
            logger.info("No face landmarks detected")
            return None
        return reduce_landmarks(points)


def reduce_landmarks(points: Sequence[Point]) -> FaceFeatures | None:
    """Build the three region boxes from a full point set."""
    eyes = bounding_box(points, EYE_INDICES)
    brows = bounding_box(points, BROW_INDICES)
    lips = bounding_box(points, LIP_INDICES)
    if eyes is None or brows is None or lips is None:
        return None
    return FaceFeatures(eyes=eyes, brows=brows, lips=lips)


def bounding_box(points: Sequence[Point], indices: Sequence[int]) -> BoundingBox | None:
    """Return the 0-1000 box enclosing the indexed points that are present."""
    selected = [points[index] for index in indices if 0 <= index < len(points)]
    if not selected:
        return None
    xs = [_clamp_unit(x) for x, _ in selected]
    ys = [_clamp_unit(y) for _, y in selected]
    return BoundingBox(
        xmin=math.floor(min(xs) * 1000),
        ymin=math.floor(min(ys) * 1000),
        xmax=math.floor(max(xs) * 1000),
        ymax=math.floor(max(ys) * 1000),
    )


def _clamp_unit(value: float) -> float:
    # Mesh points can fall slightly outside the frame.
    return min(1.0, max(0.0, float(value)))
