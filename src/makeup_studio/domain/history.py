"""Domain models for saved try-on looks."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class HistoryEntry:
    """A saved try-on result."""

    id: str
    processed_image_url: str
    style_name: str
    created_at: datetime | None
