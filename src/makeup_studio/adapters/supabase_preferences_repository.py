"""Supabase repository for user preferences."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from makeup_studio.services.preferences import PreferencesRepository


@dataclass
class SupabasePreferencesRepository(PreferencesRepository):
    """Supabase implementation for user preferences."""

    client: Client

    def get_language(self, user_id: UUID) -> str | None:
        """Return the stored language for a user."""
        response = (
            self.client.table("user_settings")
            .select("language")
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0].get("language")

    def set_language(self, user_id: UUID, language: str) -> None:
        """Create or update the user's language."""
        self.client.table("user_settings").upsert(
            {
                "user_id": str(user_id),
                "language": language,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            },
            on_conflict="user_id",
        ).execute()
