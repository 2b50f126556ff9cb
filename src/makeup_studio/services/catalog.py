"""Style catalog access and recommendation."""

import logging
from dataclasses import dataclass
from typing import Protocol

from makeup_studio.domain.analysis import FaceAnalysis
from makeup_studio.domain.styles import MatchTier, StyleEntry, StyleMatch
from makeup_studio.services.cache import Cache
from makeup_studio.services.matching import FALLBACK_STYLES, match_styles

logger = logging.getLogger(__name__)

_CATALOG_KEY = "style_catalog"


class CatalogUnavailableError(RuntimeError):
    """Raised when the style catalog store cannot be read."""


class StyleCatalogRepository(Protocol):
    """Read-only access to the style catalog."""

    def list_styles(self) -> list[StyleEntry]:
        """Return every style in the catalog."""


@dataclass
class StyleCatalogService:
    """Fetches the catalog through a short-lived cache."""

    repository: StyleCatalogRepository
    cache: Cache
    ttl_seconds: int = 300

    def fetch(self) -> list[StyleEntry]:
        """Return the catalog, raising CatalogUnavailableError on store failure."""
        cached = self.cache.get(_CATALOG_KEY)
        if isinstance(cached, list):
            return list(cached)
        try:
            styles = self.repository.list_styles()
        except Exception as exc:
            raise CatalogUnavailableError("Style catalog unavailable") from exc
        if styles:
            self.cache.set(_CATALOG_KEY, list(styles), self.ttl_seconds)
        return list(styles)

    def find(self, style_id: str) -> StyleEntry | None:
        """Return a style by id from the catalog or the built-in set."""
        try:
            styles = self.fetch()
        except CatalogUnavailableError:
            styles = []
        for style in [*styles, *FALLBACK_STYLES]:
            if style.id == style_id:
                return style
        return None


@dataclass
class StyleRecommender:
    """Ranks the catalog for an analysis, never returning an empty list."""

    catalog: StyleCatalogService

    def recommend(self, analysis: FaceAnalysis) -> StyleMatch:
        """Return matched styles; store failures fall back to built-in styles."""
        try:
            styles = self.catalog.fetch()
        except CatalogUnavailableError:
            logger.warning("Style catalog fetch failed; using fallback styles")
            return StyleMatch(
                tier=MatchTier.NONE, styles=list(FALLBACK_STYLES), catalog_error=True
            )
        result = match_styles(analysis, styles)
        logger.info(
            "Matched styles",
            extra={"tier": str(result.tier), "count": len(result.styles)},
        )
        return result
