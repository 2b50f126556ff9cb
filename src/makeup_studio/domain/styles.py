"""Domain models for the style catalog."""

from dataclasses import dataclass, field
from enum import StrEnum


@dataclass(frozen=True)
class StyleEntry:
    """Read-only catalog item a user can try on."""

    id: str
    name: str
    image_url: str
    tags: tuple[str, ...] = ()
    description: str = ""


class MatchTier(StrEnum):
    """Confidence level of a style match, shown to the user."""

    STRICT = "strict"
    RELAXED = "relaxed"
    NONE = "none"


@dataclass(frozen=True)
class StyleMatch:
    """Prioritized candidate list with the tier that produced it."""

    tier: MatchTier
    styles: list[StyleEntry] = field(default_factory=list)
    catalog_error: bool = False
