"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from makeup_studio.adapters.httpx_image_fetcher import HttpxImageFetcher
from makeup_studio.adapters.mediapipe_landmark_detector import (
    MediaPipeLandmarkDetector,
)
from makeup_studio.adapters.openai_image_client import OpenAIImageClient
from makeup_studio.adapters.openai_structured_client import OpenAIStructuredClient
from makeup_studio.adapters.supabase_history_repository import (
    SupabaseHistoryRepository,
)
from makeup_studio.adapters.supabase_identity_provider import SupabaseIdentityProvider
from makeup_studio.adapters.supabase_preferences_repository import (
    SupabasePreferencesRepository,
)
from makeup_studio.adapters.supabase_style_repository import SupabaseStyleRepository
from makeup_studio.config import Settings
from makeup_studio.services.analysis import AnalysisService
from makeup_studio.services.cache import InMemoryCache
from makeup_studio.services.catalog import StyleCatalogService, StyleRecommender
from makeup_studio.services.consultation import ConsultationService
from makeup_studio.services.history import HistoryService
from makeup_studio.services.identity import IdentityService
from makeup_studio.services.landmarks import LandmarkService
from makeup_studio.services.preferences import PreferencesService
from makeup_studio.services.sessions import SessionService
from makeup_studio.services.styling import PlanService, TransformService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    identity_service: IdentityService
    preferences_service: PreferencesService
    history_service: HistoryService
    session_service: SessionService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_key
    )
    structured_client = OpenAIStructuredClient.create(resolved_settings.openai_api_key)
    image_client = OpenAIImageClient.create(resolved_settings.openai_api_key)
    image_fetcher = HttpxImageFetcher.create()
    model_options = {
        "model": resolved_settings.openai_model,
        "reasoning_effort": resolved_settings.openai_reasoning_effort,
        "store": resolved_settings.openai_store,
    }

    catalog_service = StyleCatalogService(
        repository=SupabaseStyleRepository(supabase_client),
        cache=InMemoryCache(),
        ttl_seconds=resolved_settings.style_catalog_ttl_seconds,
    )
    history_service = HistoryService(SupabaseHistoryRepository(supabase_client))
    session_service = SessionService(
        consultation_service=ConsultationService(
            client=structured_client, **model_options
        ),
        analysis_service=AnalysisService(client=structured_client, **model_options),
        landmark_service=LandmarkService(
            MediaPipeLandmarkDetector.create(
                model_path=resolved_settings.face_landmarker_model_path,
                model_url=resolved_settings.face_landmarker_model_url,
            )
        ),
        catalog_service=catalog_service,
        recommender=StyleRecommender(catalog_service),
        plan_service=PlanService(
            client=structured_client,
            web_search=resolved_settings.plan_web_search,
            **model_options,
        ),
        transform_service=TransformService(
            client=image_client,
            fetcher=image_fetcher,
            model=resolved_settings.openai_image_model,
        ),
        history_service=history_service,
        journeys=InMemoryCache(max_entries=resolved_settings.max_journeys),
        journey_ttl_seconds=resolved_settings.journey_ttl_seconds,
    )
    preferences_service = PreferencesService(
        repository=SupabasePreferencesRepository(supabase_client),
        default_language=resolved_settings.default_language,
    )
    identity_service = IdentityService(SupabaseIdentityProvider(supabase_client))

    async def close_resources() -> None:
        await image_fetcher.close()
        await structured_client.close()
        await image_client.close()

    return AppContainer(
        settings=resolved_settings,
        identity_service=identity_service,
        preferences_service=preferences_service,
        history_service=history_service,
        session_service=session_service,
        close_resources=close_resources,
    )
