"""Saved try-on history."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from makeup_studio.domain.history import HistoryEntry
from makeup_studio.services.llm import to_data_url

logger = logging.getLogger(__name__)


class HistorySaveError(RuntimeError):
    """Raised when a look could not be written to history."""


class HistoryRepository(Protocol):
    """Persistence interface for try-on history."""

    def add_entry(self, user_id: UUID, image_url: str, style_name: str) -> None:
        """Store a try-on result."""

    def list_entries(self, user_id: UUID, limit: int) -> list[HistoryEntry]:
        """Return the newest entries for a user."""


@dataclass
class HistoryService:
    """Application service for saving and listing looks."""

    repository: HistoryRepository

    def save(self, user_id: UUID, image_bytes: bytes, style_name: str) -> None:
        """Persist a look; failures surface as HistorySaveError."""
        try:
            self.repository.add_entry(user_id, to_data_url(image_bytes), style_name)
        except Exception as exc:
            logger.exception(
                "Failed to save try-on history", extra={"user_id": str(user_id)}
            )
            raise HistorySaveError("Failed to save look") from exc

    def list_recent(self, user_id: UUID, limit: int = 20) -> list[HistoryEntry]:
        """Return the user's saved looks, newest first."""
        return self.repository.list_entries(user_id, limit)
