"""Domain models for the makeup studio."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class Identity:
    """Represents an authenticated user resolved from the auth provider."""

    id: UUID
    email: str | None = None
