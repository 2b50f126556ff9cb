"""MediaPipe Tasks face landmark detector."""

import asyncio
import io
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import Any

import httpx
import mediapipe as mp
import numpy as np
from mediapipe.tasks import python as mp_python
from mediapipe.tasks.python import vision as mp_vision
from PIL import Image

from makeup_studio.services.landmarks import LandmarkDetector, Point

logger = logging.getLogger(__name__)

FACE_LANDMARKER_MODEL_URL = (
    "https://storage.googleapis.com/mediapipe-models/face_landmarker/"
    "face_landmarker/float16/1/face_landmarker.task"
)


def load_model_asset(
    path: str | None = None, url: str = FACE_LANDMARKER_MODEL_URL
) -> bytes:
    """Return the landmarker model, downloading it into ``path`` when missing."""
    model_file = Path(path) if path else None
    if model_file is not None and model_file.is_file():
        return model_file.read_bytes()
    logger.info("Downloading face landmarker model", extra={"url": url})
    response = httpx.get(url, timeout=60, follow_redirects=True)
    response.raise_for_status()
    if model_file is not None:
        model_file.parent.mkdir(parents=True, exist_ok=True)
        model_file.write_bytes(response.content)
    return response.content


def face_landmarker_options(model_asset: bytes) -> mp_vision.FaceLandmarkerOptions:
    """Single-face, still-image options for the 478-point landmarker."""
    return mp_vision.FaceLandmarkerOptions(
        base_options=mp_python.BaseOptions(model_asset_buffer=model_asset),
        running_mode=mp_vision.RunningMode.IMAGE,
        num_faces=1,
    )


@dataclass
class TasksFaceLandmarker:
    """Adapts a FaceLandmarker to RGB arrays in and normalized points out."""

    landmarker: Any

    @classmethod
    def create(cls, model_asset: bytes) -> "TasksFaceLandmarker":
        """Build a landmarker from model bytes."""
        options = face_landmarker_options(model_asset)
        return cls(landmarker=mp_vision.FaceLandmarker.create_from_options(options))

    def detect(self, rgb: np.ndarray) -> list[Point] | None:
        image = mp.Image(
            image_format=mp.ImageFormat.SRGB, data=np.ascontiguousarray(rgb)
        )
        result = self.landmarker.detect(image)
        if not result.face_landmarks:
            return None
        return [(point.x, point.y) for point in result.face_landmarks[0]]


def create_face_landmarker(
    model_path: str | None = None, model_url: str = FACE_LANDMARKER_MODEL_URL
) -> TasksFaceLandmarker:
    """Load the model asset and build the landmarker."""
    return TasksFaceLandmarker.create(load_model_asset(model_path, model_url))


@dataclass
class MediaPipeLandmarkDetector(LandmarkDetector):
    """Landmark detector with lazy, one-time model initialization."""

    landmarker_factory: Callable[[], Any] = create_face_landmarker
    _landmarker: Any = field(default=None, init=False, repr=False)
    _initialized: bool = field(default=False, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False)

    @classmethod
    def create(
        cls, model_path: str | None = None, model_url: str = FACE_LANDMARKER_MODEL_URL
    ) -> "MediaPipeLandmarkDetector":
        """Create a detector that loads its model from a path or URL on first use."""
        return cls(
            landmarker_factory=partial(create_face_landmarker, model_path, model_url)
        )

    def initialize(self) -> bool:
        """Load the model on first use; return True when detection is available."""
        with self._lock:
            if not self._initialized:
                try:
                    self._landmarker = self.landmarker_factory()
                except Exception:
                    logger.warning(
                        "Face landmark model unavailable; close-ups disabled",
                        exc_info=True,
                    )
                    self._landmarker = None
                self._initialized = True
            return self._landmarker is not None

    async def detect(self, image_bytes: bytes) -> list[Point] | None:
        """Detect one face and return its normalized landmark points."""
        return await asyncio.to_thread(self._detect_sync, image_bytes)

    def _detect_sync(self, image_bytes: bytes) -> list[Point] | None:
        if not self.initialize():
            return None
        with Image.open(io.BytesIO(image_bytes)) as opened:
            rgb = np.asarray(opened.convert("RGB"))
        with self._lock:
            return self._landmarker.detect(rgb)
