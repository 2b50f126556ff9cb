"""Exposure gate for captured or uploaded face photos."""

import io
from dataclasses import dataclass

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

MIN_LUMINANCE = 40
MAX_LUMINANCE = 230
MAX_DIMENSION = 1280

TOO_DARK = "too_dark"
TOO_BRIGHT = "too_bright"
UNREADABLE = "unreadable"


@dataclass(frozen=True)
class QualityVerdict:
    """Pass/fail result of the quality gate."""

    passed: bool
    luminance: float | None = None
    reason: str | None = None


@dataclass(frozen=True)
class PreparedPhoto:
    """Gate verdict plus the normalized photo when it was accepted."""

    verdict: QualityVerdict
    image_bytes: bytes | None = None
    width: int = 0
    height: int = 0


def mean_luminance(pixels: np.ndarray) -> float:
    """Return the unweighted mean of (R+G+B)/3 over all pixels."""
    rgb = np.asarray(pixels, dtype=np.float64)[..., :3]
    return float(rgb.mean())


def evaluate_luminance(value: float) -> QualityVerdict:
    """Accept iff MIN_LUMINANCE <= value <= MAX_LUMINANCE."""
    if value < MIN_LUMINANCE:
        return QualityVerdict(passed=False, luminance=value, reason=TOO_DARK)
    if value > MAX_LUMINANCE:
        return QualityVerdict(passed=False, luminance=value, reason=TOO_BRIGHT)
    return QualityVerdict(passed=True, luminance=value)


def check_pixels(pixels: np.ndarray, width: int, height: int) -> QualityVerdict:
    """Evaluate an RGB(A) pixel buffer of the given dimensions."""
    if width <= 0 or height <= 0:
        raise ValueError("image dimensions must be positive")
    array = np.asarray(pixels)
    channels, remainder = divmod(array.size, width * height)
    if remainder or channels not in {3, 4}:
        raise ValueError("pixel buffer does not match an RGB or RGBA image")
    array = array.reshape(height, width, channels)
    return evaluate_luminance(mean_luminance(array))


def prepare_photo(image_bytes: bytes) -> PreparedPhoto:
    """Decode, downscale and gate a photo, returning it re-encoded as JPEG."""
    try:
        with Image.open(io.BytesIO(image_bytes)) as opened:
            image = ImageOps.exif_transpose(opened).convert("RGB")
    except (UnidentifiedImageError, OSError, ValueError):
        return PreparedPhoto(verdict=QualityVerdict(passed=False, reason=UNREADABLE))

    image = _fit_within(image, MAX_DIMENSION)
    verdict = check_pixels(np.asarray(image), image.width, image.height)
    if not verdict.passed:
        return PreparedPhoto(verdict=verdict, width=image.width, height=image.height)

    buffer = io.BytesIO()
    image.save(buffer, format="JPEG", quality=92)
    return PreparedPhoto(
        verdict=verdict,
        image_bytes=buffer.getvalue(),
        width=image.width,
        height=image.height,
    )


def _fit_within(image: Image.Image, max_dimension: int) -> Image.Image:
    """Scale the image down so its long side is at most max_dimension."""
    width, height = image.size
    if width <= max_dimension and height <= max_dimension:
        return image
    scale = max_dimension / max(width, height)
    size = (max(1, round(width * scale)), max(1, round(height * scale)))
    return image.resize(size, Image.Resampling.LANCZOS)
