"""Supabase repository for try-on history."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from makeup_studio.domain.history import HistoryEntry
from makeup_studio.services.history import HistoryRepository


@dataclass
class SupabaseHistoryRepository(HistoryRepository):
    """Supabase implementation for try-on history."""

    client: Client

    def add_entry(self, user_id: UUID, image_url: str, style_name: str) -> None:
        """Insert a history row."""
        response = (
            self.client.table("tryon_history")
            .insert(
                {
                    "user_id": str(user_id),
                    "processed_image_url": image_url,
                    "style_name": style_name,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create history entry")

    def list_entries(self, user_id: UUID, limit: int) -> list[HistoryEntry]:
        """Return the newest history rows for a user."""
        response = (
            self.client.table("tryon_history")
            .select("id, processed_image_url, style_name, created_at")
            .eq("user_id", str(user_id))
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_parse_entry(row) for row in response.data or []]


def _parse_entry(row: dict[str, object]) -> HistoryEntry:
    created_raw = row.get("created_at")
    created_at = (
        datetime.fromisoformat(created_raw)
        if isinstance(created_raw, str) and created_raw
        else None
    )
    return HistoryEntry(
        id=str(row.get("id", "")),
        processed_image_url=str(row.get("processed_image_url") or ""),
        style_name=str(row.get("style_name") or ""),
        created_at=created_at,
    )
