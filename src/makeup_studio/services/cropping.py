"""Close-up crops of the result image around detected facial regions.

Landmark boxes are tight around the feature itself, so each area gets its own
padding ratio, applied to the box width and height independently, before the
rectangle is clipped to the image.
"""

import io
import math
from dataclasses import dataclass
from enum import StrEnum

from PIL import Image

from makeup_studio.domain.analysis import BoundingBox, FaceFeatures
from makeup_studio.domain.plan import FaceArea

BOX_SCALE = 1000

PADDING: dict[FaceArea, tuple[float, float]] = {
    FaceArea.LIPS: (0.8, 1.2),
    FaceArea.EYES: (0.4, 0.8),
    FaceArea.BROWS: (0.3, 0.8),
}
DEFAULT_PADDING = (0.5, 0.6)


class CropStatus(StrEnum):
    """How a step's close-up should be shown."""

    FULL = "full"
    PENDING = "pending"
    CROP = "crop"


@dataclass(frozen=True)
class CropRegion:
    """Pixel rectangle, right/bottom exclusive."""

    left: int
    top: int
    right: int
    bottom: int

    @property
    def width(self) -> int:
        return self.right - self.left

    @property
    def height(self) -> int:
        return self.bottom - self.top


@dataclass(frozen=True)
class CropPlan:
    status: CropStatus
    region: CropRegion | None = None


def padding_for(area: FaceArea | str) -> tuple[float, float]:
    """Return the (horizontal, vertical) padding ratios for an area."""
    try:
        return PADDING.get(FaceArea(area), DEFAULT_PADDING)
    except ValueError:
        return DEFAULT_PADDING


def feature_box(
    features: FaceFeatures | None, area: FaceArea | str
) -> BoundingBox | None:
    """Return the landmark box that frames the given area."""
    if features is None:
        return None
    if area == FaceArea.EYES:
        return features.eyes
    if area == FaceArea.BROWS:
        return features.brows
    if area == FaceArea.LIPS:
        return features.lips
    return None


def plan_crop(
    area: FaceArea | str, box: BoundingBox | None, width: int, height: int
) -> CropPlan:
    """Compute the padded, clipped crop rectangle for one step."""
    if area == FaceArea.FACE:
        return CropPlan(status=CropStatus.FULL)
    if box is None:
        return CropPlan(status=CropStatus.PENDING)
    if width <= 0 or height <= 0:
        raise ValueError("image dimensions must be positive")

    scale_x = width / BOX_SCALE
    scale_y = height / BOX_SCALE
    x = box.xmin * scale_x
    y = box.ymin * scale_y
    w = (box.xmax - box.xmin) * scale_x
    h = (box.ymax - box.ymin) * scale_y

    pad_x_ratio, pad_y_ratio = padding_for(area)
    pad_x = w * pad_x_ratio
    pad_y = h * pad_y_ratio

    x = max(0.0, x - pad_x)
    y = max(0.0, y - pad_y)
    w = min(width - x, w + pad_x * 2)
    h = min(height - y, h + pad_y * 2)

    left = min(math.floor(x), width - 1)
    top = min(math.floor(y), height - 1)
    right = min(width, max(left + 1, math.ceil(x + w)))
    bottom = min(height, max(top + 1, math.ceil(y + h)))
    return CropPlan(
        status=CropStatus.CROP,
        region=CropRegion(left=left, top=top, right=right, bottom=bottom),
    )


def render_region(
    image_bytes: bytes, area: FaceArea | str, box: BoundingBox | None
) -> bytes | None:
    """Render a step close-up as PNG; None means the crop is still pending."""
    if area == FaceArea.FACE:
        return image_bytes
    if box is None:
        return None
    with Image.open(io.BytesIO(image_bytes)) as image:
        plan = plan_crop(area, box, image.width, image.height)
        region = plan.region
        cropped = image.convert("RGB").crop(
            (region.left, region.top, region.right, region.bottom)
        )
    buffer = io.BytesIO()
    cropped.save(buffer, format="PNG")
    return buffer.getvalue()
