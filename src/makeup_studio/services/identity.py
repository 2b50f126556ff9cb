"""Resolves bearer tokens to authenticated identities."""

import logging
from dataclasses import dataclass
from typing import Protocol

from makeup_studio.domain.models import Identity

logger = logging.getLogger(__name__)


class IdentityProvider(Protocol):
    """Interface for the authentication backend."""

    def resolve(self, token: str) -> Identity | None:
        """Return the identity for an access token, if valid."""


@dataclass
class IdentityService:
    """Application service for request authentication."""

    provider: IdentityProvider

    def authenticate(self, authorization: str | None) -> Identity | None:
        """Return the identity for an Authorization header value."""
        token = parse_bearer(authorization)
        if token is None:
            return None
        try:
            return self.provider.resolve(token)
        except Exception:
            logger.warning("Token resolution failed", exc_info=True)
            return None


def parse_bearer(authorization: str | None) -> str | None:
    """Extract the token from a `Bearer <token>` header value."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
