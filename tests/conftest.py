"""Shared test fixtures."""

import asyncio
import io
from dataclasses import dataclass, field
from uuid import UUID, uuid4

import pytest
from PIL import Image

from makeup_studio.config import Settings
from makeup_studio.containers import AppContainer
from makeup_studio.domain.history import HistoryEntry
from makeup_studio.domain.models import Identity
from makeup_studio.domain.styles import StyleEntry
from makeup_studio.services.analysis import AnalysisService
from makeup_studio.services.cache import InMemoryCache
from makeup_studio.services.catalog import (
    StyleCatalogRepository,
    StyleCatalogService,
    StyleRecommender,
)
from makeup_studio.services.consultation import ConsultationService
from makeup_studio.services.history import HistoryRepository, HistoryService
from makeup_studio.services.identity import IdentityProvider, IdentityService
from makeup_studio.services.landmarks import (
    BROW_INDICES,
    EYE_INDICES,
    LIP_INDICES,
    LandmarkDetector,
    LandmarkService,
    Point,
)
from makeup_studio.services.llm import StructuredModelClient
from makeup_studio.services.preferences import (
    PreferencesRepository,
    PreferencesService,
)
from makeup_studio.services.sessions import SessionService
from makeup_studio.services.styling import (
    ImageFetcher,
    ImageTransformClient,
    PlanService,
    TransformService,
)

TOKEN = "valid-token"
AUTH_HEADERS = {"Authorization": f"Bearer {TOKEN}"}


def make_image(
    color: tuple[int, int, int] = (128, 128, 128),
    size: tuple[int, int] = (64, 64),
    image_format: str = "JPEG",
) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=image_format)
    return buffer.getvalue()


def face_points() -> list[Point]:
    """Return a 478-point mesh with eyes, brows and lips at known positions."""
    points: list[Point] = [(0.5, 0.5)] * 478
    regions = (
        (EYE_INDICES, (0.25, 0.375), (0.75, 0.4375)),
        (BROW_INDICES, (0.25, 0.3125), (0.75, 0.34375)),
        (LIP_INDICES, (0.375, 0.6875), (0.625, 0.75)),
    )
    for indices, low, high in regions:
        for position, index in enumerate(indices):
            points[index] = low if position % 2 == 0 else high
    return points


def analysis_payload(
    face_shape: str = "Round", skin_tone: str = "Fair", eye_shape: str = "Almond"
) -> dict[str, object]:
    return {
        "face_shape": face_shape,
        "skin_tone": skin_tone,
        "eye_shape": eye_shape,
        "summary": "A soft, balanced face.",
        "scores": [
            {"subject": subject, "value": 80, "max": 100}
            for subject in ("Texture", "Symmetry", "Brightness", "Color", "Contour")
        ],
    }


def plan_payload() -> dict[str, object]:
    return {
        "steps": [
            {
                "area": area,
                "title": f"{area} step",
                "instruction": f"Apply {area.lower()} product.",
                "brand": "Brand",
                "product_name": "Product",
                "shade": "Rose",
                "product_url": "https://shop.test/product",
                "color_hex": "#C08080",
            }
            for area in ("Face", "Brows", "Eyes", "Lips")
        ]
    }


def consultation_payload(
    reply: str = "Love it!",
    style: list[str] | None = None,
    environment: str | None = None,
    concerns: list[str] | None = None,
) -> dict[str, object]:
    return {
        "reply_text": reply,
        "extracted_concerns": concerns or [],
        "extracted_style": style or [],
        "extracted_environment": environment,
        "is_ready": bool(style and environment),
    }


CATALOG = [
    StyleEntry(
        id="s1",
        name="Soft Round",
        image_url="https://cdn.test/s1.jpg",
        tags=("圆脸", "Light", "Daily"),
    ),
    StyleEntry(
        id="s2",
        name="Bold Square",
        image_url="https://cdn.test/s2.jpg",
        tags=("方脸", "Deep"),
    ),
    StyleEntry(
        id="s3",
        name="Round Party",
        image_url="https://cdn.test/s3.jpg",
        tags=("Round Face Party", "Tan"),
    ),
]


@dataclass
class FakeStructuredClient(StructuredModelClient):
    """Structured client answering by schema name."""

    payloads: dict[str, object] = field(
        default_factory=lambda: {
            "face_analysis": analysis_payload(),
            "makeup_plan": plan_payload(),
            "consultation_turn": consultation_payload(),
        }
    )
    errors: dict[str, Exception] = field(default_factory=dict)
    gates: dict[str, asyncio.Event] = field(default_factory=dict)
    calls: list[dict[str, object]] = field(default_factory=list)

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        schema: dict[str, object],
        schema_name: str,
        image_data_urls: list[str] | None = None,
        instructions: str | None = None,
        web_search: bool = False,
    ) -> dict[str, object]:
        self.calls.append(
            {
                "schema_name": schema_name,
                "prompt": prompt,
                "instructions": instructions,
                "image_data_urls": image_data_urls,
                "web_search": web_search,
            }
        )
        gate = self.gates.get(schema_name)
        if gate is not None:
            await gate.wait()
        if schema_name in self.errors:
            raise self.errors[schema_name]
        return self.payloads[schema_name]


@dataclass
class FakeImageTransformClient(ImageTransformClient):
    """Image transform client returning a fixed image."""

    result: bytes = field(default_factory=lambda: make_image((180, 120, 120)))
    error: Exception | None = None
    calls: list[dict[str, object]] = field(default_factory=list)

    async def transform(
        self, *, model: str, source_image: bytes, reference_image: bytes, prompt: str
    ) -> bytes:
        self.calls.append(
            {"model": model, "source": source_image, "reference": reference_image}
        )
        if self.error is not None:
            raise self.error
        return self.result


@dataclass
class FakeImageFetcher(ImageFetcher):
    """Image fetcher returning fixed bytes."""

    content: bytes = field(default_factory=lambda: make_image((90, 60, 60)))
    urls: list[str] = field(default_factory=list)

    async def fetch(self, url: str) -> bytes:
        self.urls.append(url)
        return self.content


@dataclass
class FakeLandmarkDetector(LandmarkDetector):
    """Landmark detector returning fixed points."""

    points: list[Point] | None = field(default_factory=face_points)
    error: Exception | None = None

    async def detect(self, image_bytes: bytes) -> list[Point] | None:
        if self.error is not None:
            raise self.error
        return self.points


@dataclass
class InMemoryStyleCatalogRepository(StyleCatalogRepository):
    """In-memory style catalog."""

    styles: list[StyleEntry] = field(default_factory=lambda: list(CATALOG))
    error: Exception | None = None
    reads: int = 0

    def list_styles(self) -> list[StyleEntry]:
        self.reads += 1
        if self.error is not None:
            raise self.error
        return list(self.styles)


@dataclass
class InMemoryHistoryRepository(HistoryRepository):
    """In-memory try-on history."""

    entries: list[tuple[UUID, HistoryEntry]] = field(default_factory=list)
    error: Exception | None = None

    def add_entry(self, user_id: UUID, image_url: str, style_name: str) -> None:
        if self.error is not None:
            raise self.error
        entry = HistoryEntry(
            id=str(uuid4()),
            processed_image_url=image_url,
            style_name=style_name,
            created_at=None,
        )
        self.entries.append((user_id, entry))

    def list_entries(self, user_id: UUID, limit: int) -> list[HistoryEntry]:
        owned = [entry for owner, entry in self.entries if owner == user_id]
        return list(reversed(owned))[:limit]


@dataclass
class InMemoryPreferencesRepository(PreferencesRepository):
    """In-memory preferences."""

    languages: dict[UUID, str] = field(default_factory=dict)

    def get_language(self, user_id: UUID) -> str | None:
        return self.languages.get(user_id)

    def set_language(self, user_id: UUID, language: str) -> None:
        self.languages[user_id] = language


@dataclass
class FakeIdentityProvider(IdentityProvider):
    """Identity provider accepting known tokens."""

    identities: dict[str, Identity] = field(default_factory=dict)

    def resolve(self, token: str) -> Identity | None:
        return self.identities.get(token)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_key="header.payload.signature",
        openai_api_key="openai-key",
        environment="test",
    )


@pytest.fixture
def user_id() -> UUID:
    return uuid4()


@pytest.fixture
def structured_client() -> FakeStructuredClient:
    return FakeStructuredClient()


@pytest.fixture
def image_client() -> FakeImageTransformClient:
    return FakeImageTransformClient()


@pytest.fixture
def image_fetcher() -> FakeImageFetcher:
    return FakeImageFetcher()


@pytest.fixture
def landmark_detector() -> FakeLandmarkDetector:
    return FakeLandmarkDetector()


@pytest.fixture
def style_repository() -> InMemoryStyleCatalogRepository:
    return InMemoryStyleCatalogRepository()


@pytest.fixture
def history_repository() -> InMemoryHistoryRepository:
    return InMemoryHistoryRepository()


@pytest.fixture
def preferences_repository() -> InMemoryPreferencesRepository:
    return InMemoryPreferencesRepository()


@pytest.fixture
def session_service(  # noqa: PLR0913
    settings: Settings,
    structured_client: FakeStructuredClient,
    image_client: FakeImageTransformClient,
    image_fetcher: FakeImageFetcher,
    landmark_detector: FakeLandmarkDetector,
    style_repository: InMemoryStyleCatalogRepository,
    history_repository: InMemoryHistoryRepository,
) -> SessionService:
    model_options = {
        "model": settings.openai_model,
        "reasoning_effort": settings.openai_reasoning_effort,
        "store": settings.openai_store,
    }
    catalog_service = StyleCatalogService(
        repository=style_repository, cache=InMemoryCache()
    )
    return SessionService(
        consultation_service=ConsultationService(
            client=structured_client, **model_options
        ),
        analysis_service=AnalysisService(client=structured_client, **model_options),
        landmark_service=LandmarkService(landmark_detector),
        catalog_service=catalog_service,
        recommender=StyleRecommender(catalog_service),
        plan_service=PlanService(client=structured_client, **model_options),
        transform_service=TransformService(
            client=image_client, fetcher=image_fetcher, model="gpt-image-1"
        ),
        history_service=HistoryService(history_repository),
    )


@pytest.fixture
def container(
    settings: Settings,
    user_id: UUID,
    session_service: SessionService,
    preferences_repository: InMemoryPreferencesRepository,
) -> AppContainer:
    identity_provider = FakeIdentityProvider(
        identities={TOKEN: Identity(id=user_id, email="user@example.com")}
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        identity_service=IdentityService(identity_provider),
        preferences_service=PreferencesService(preferences_repository),
        history_service=session_service.history_service,
        session_service=session_service,
        close_resources=close_resources,
    )
