"""Supabase Auth identity provider."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from makeup_studio.domain.models import Identity
from makeup_studio.services.identity import IdentityProvider


@dataclass
class SupabaseIdentityProvider(IdentityProvider):
    """Resolves access tokens with Supabase Auth."""

    client: Client

    def resolve(self, token: str) -> Identity | None:
        """Return the user behind a JWT, or None when it is not valid."""
        response = self.client.auth.get_user(token)
        user = response.user if response else None
        if user is None:
            return None
        return Identity(id=UUID(str(user.id)), email=user.email)
