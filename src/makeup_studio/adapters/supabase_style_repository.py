"""Supabase repository for the makeup style catalog."""

from dataclasses import dataclass

from supabase import Client

from makeup_studio.domain.styles import StyleEntry
from makeup_studio.services.catalog import StyleCatalogRepository

PLACEHOLDER_IMAGE_URL = "https://via.placeholder.com/600x800?text=No+Image"

# Columns whose values double as matching tags.
_TAG_COLUMNS = ("faceshape", "color_tone", "eyelid", "style", "environment")


@dataclass
class SupabaseStyleRepository(StyleCatalogRepository):
    """Supabase implementation for the style catalog."""

    client: Client

    def list_styles(self) -> list[StyleEntry]:
        """Return every style row mapped to a catalog entry."""
        response = self.client.table("makeup_styles").select("*").execute()
        return [
            _parse_style(row, index) for index, row in enumerate(response.data or [])
        ]


def _parse_style(row: dict[str, object], index: int) -> StyleEntry:
    tags = tuple(
        value
        for value in (row.get(column) for column in _TAG_COLUMNS)
        if isinstance(value, str) and value
    )
    raw_id = row.get("id")
    return StyleEntry(
        id=str(raw_id) if raw_id is not None else f"style-{index}",
        name=_first_text(row, "style", "name") or "Unnamed Style",
        image_url=_first_text(row, "image_url", "imageUrl", "image")
        or PLACEHOLDER_IMAGE_URL,
        tags=tags,
        description=_first_text(row, "description") or "",
    )


def _first_text(row: dict[str, object], *columns: str) -> str | None:
    for column in columns:
        value = row.get(column)
        if isinstance(value, str) and value:
            return value
    return None
