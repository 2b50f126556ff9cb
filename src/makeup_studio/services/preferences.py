"""User preferences service."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from makeup_studio.config import parse_language


class PreferencesRepository(Protocol):
    """Persistence interface for user preferences."""

    def get_language(self, user_id: UUID) -> str | None:
        """Return the user's language if set."""

    def set_language(self, user_id: UUID, language: str) -> None:
        """Store the user's language."""


@dataclass
class PreferencesService:
    """Service for per-user preferences."""

    repository: PreferencesRepository
    default_language: str = "en"

    def get_language(self, user_id: UUID) -> str:
        """Return the user language or the default if unset."""
        stored = self.repository.get_language(user_id)
        return parse_language(stored, default=self.default_language)

    def set_language(self, user_id: UUID, language: str) -> str:
        """Persist a normalized language and return it."""
        normalized = parse_language(language, default=self.default_language)
        self.repository.set_language(user_id, normalized)
        return normalized
