"""Session state machine for the try-on journey.

Each user owns one Journey. Transition handlers are the only code that mutates
it. Work that spans an await (analysis, generation) records the journey epoch
before suspending and only commits its result if the epoch is unchanged, so a
retake or restart silently discards late results.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from uuid import UUID

from makeup_studio.domain.consultation import ConsultationState
from makeup_studio.domain.sessions import (
    TAB_STAGES,
    Journey,
    Session,
    Stage,
    TransitionResult,
)
from makeup_studio.domain.styles import StyleEntry
from makeup_studio.services.analysis import AnalysisService
from makeup_studio.services.cache import Cache, InMemoryCache
from makeup_studio.services.catalog import StyleCatalogService, StyleRecommender
from makeup_studio.services.consultation import ConsultationService, is_ready
from makeup_studio.services.cropping import feature_box, render_region
from makeup_studio.services.history import HistoryService
from makeup_studio.services.landmarks import LandmarkService
from makeup_studio.services.matching import next_cursor, page
from makeup_studio.services.quality import prepare_photo
from makeup_studio.services.styling import PlanService, TransformService

logger = logging.getLogger(__name__)

ANALYSIS_FAILED = "analysis_failed"
GENERATION_FAILED = "generation_failed"
NOT_READY = "not_ready"
INVALID_STAGE = "invalid_stage"
UNKNOWN_STYLE = "unknown_style"
BUSY = "busy"
STALE = "stale"

DEFAULT_JOURNEY_TTL_SECONDS = 2 * 60 * 60
DEFAULT_MAX_JOURNEYS = 1000

_RETAKE_STAGES = frozenset({Stage.ANALYZING, Stage.STYLE_SELECTION})


@dataclass
class SessionService:
    """State machine driving consultation, capture, styling and review."""

    consultation_service: ConsultationService
    analysis_service: AnalysisService
    landmark_service: LandmarkService
    catalog_service: StyleCatalogService
    recommender: StyleRecommender
    plan_service: PlanService
    transform_service: TransformService
    history_service: HistoryService
    journeys: Cache = field(
        default_factory=lambda: InMemoryCache(max_entries=DEFAULT_MAX_JOURNEYS)
    )
    journey_ttl_seconds: int = DEFAULT_JOURNEY_TTL_SECONDS

    def get_journey(self, user_id: UUID) -> Journey:
        """Return the user's journey, creating an empty one if needed.

        Every access renews the journey's idle expiry.
        """
        key = str(user_id)
        journey = self.journeys.get(key)
        if not isinstance(journey, Journey):
            journey = Journey(user_id=user_id)
        self.journeys.set(key, journey, self.journey_ttl_seconds)
        return journey

    async def send_message(
        self, user_id: UUID, text: str, language: str = "en"
    ) -> TransitionResult:
        """Forward one consultation turn."""
        journey = self.get_journey(user_id)
        if journey.stage != Stage.CONSULTATION:
            return _reject(journey, INVALID_STAGE)
        await self.consultation_service.send(journey.consultation, text, language)
        return _accept(journey)

    def proceed_to_capture(self, user_id: UUID) -> TransitionResult:
        """Move from consultation to capture once enough context is known."""
        journey = self.get_journey(user_id)
        if journey.stage != Stage.CONSULTATION:
            return _reject(journey, INVALID_STAGE)
        if not is_ready(journey.consultation):
            return _reject(journey, NOT_READY)
        journey.stage = Stage.INPUT
        return _accept(journey)

    async def submit_photo(
        self, user_id: UUID, image_bytes: bytes, language: str = "en"
    ) -> TransitionResult:
        """Gate a captured photo, then analyze it and rank styles."""
        journey = self.get_journey(user_id)
        if journey.stage != Stage.INPUT:
            return _reject(journey, INVALID_STAGE)

        prepared = await asyncio.to_thread(prepare_photo, image_bytes)
        if journey.stage != Stage.INPUT:
            return _reject(journey, INVALID_STAGE)
        if not prepared.verdict.passed or prepared.image_bytes is None:
            logger.info(
                "Photo rejected by quality gate",
                extra={"reason": prepared.verdict.reason},
            )
            return _reject(journey, prepared.verdict.reason)

        photo = prepared.image_bytes
        _start_capture(journey, photo)
        epoch = journey.epoch
        consultation = journey.consultation

        try:
            analysis, features = await asyncio.gather(
                self.analysis_service.analyze(
                    photo,
                    list(consultation.concerns),
                    list(consultation.goals),
                    language,
                ),
                self.landmark_service.locate(photo),
            )
        except Exception:
            if journey.epoch != epoch:
                return _reject(journey, STALE)
            logger.exception("Face analysis failed", extra={"user_id": str(user_id)})
            journey.stage = Stage.INPUT
            return _reject(journey, ANALYSIS_FAILED)

        if journey.epoch != epoch:
            logger.info("Discarding stale analysis", extra={"user_id": str(user_id)})
            return _reject(journey, STALE)

        if features is None:
            logger.info("No landmarks detected", extra={"user_id": str(user_id)})
        journey.session.analysis = analysis.with_features(features)
        journey.matches = self.recommender.recommend(journey.session.analysis)
        journey.cursor = 0
        journey.stage = Stage.STYLE_SELECTION
        return _accept(journey)

    def retake(self, user_id: UUID) -> TransitionResult:
        """Return to capture, abandoning any in-flight analysis."""
        journey = self.get_journey(user_id)
        if journey.stage not in _RETAKE_STAGES:
            return _reject(journey, INVALID_STAGE)
        journey.epoch += 1
        journey.generating = False
        journey.stage = Stage.INPUT
        return _accept(journey)

    def show_more(self, user_id: UUID) -> TransitionResult:
        """Advance the style page, wrapping to the start."""
        journey = self.get_journey(user_id)
        if journey.stage != Stage.STYLE_SELECTION or journey.matches is None:
            return _reject(journey, INVALID_STAGE)
        journey.cursor = next_cursor(journey.cursor, len(journey.matches.styles))
        return _accept(journey)

    def current_page(self, user_id: UUID) -> list[StyleEntry]:
        """Return the style cards visible at the current cursor."""
        journey = self.get_journey(user_id)
        if journey.matches is None:
            return []
        return page(journey.matches.styles, journey.cursor)

    async def select_style(
        self, user_id: UUID, style_id: str, language: str = "en"
    ) -> TransitionResult:
        """Generate the plan and the try-on image for a style."""
        journey = self.get_journey(user_id)
        session = journey.session
        if (
            journey.stage != Stage.STYLE_SELECTION
            or session.analysis is None
            or session.raw_photo is None
        ):
            return _reject(journey, INVALID_STAGE)
        if journey.generating:
            return _reject(journey, BUSY)
        style = self._find_style(journey, style_id)
        if style is None:
            return _reject(journey, UNKNOWN_STYLE)

        analysis = session.analysis
        raw_photo = session.raw_photo
        epoch = journey.epoch
        journey.generating = True
        try:
            steps, processed = await asyncio.gather(
                self.plan_service.generate(style, analysis, language),
                self.transform_service.transform(raw_photo, style),
            )
        except Exception:
            if journey.epoch != epoch:
                return _reject(journey, STALE)
            logger.exception(
                "Style generation failed",
                extra={"user_id": str(user_id), "style_id": style.id},
            )
            return _reject(journey, GENERATION_FAILED)
        finally:
            if journey.epoch == epoch:
                journey.generating = False

        if journey.epoch != epoch:
            logger.info("Discarding stale generation", extra={"user_id": str(user_id)})
            return _reject(journey, STALE)

        session.selected_style = style
        session.breakdown = steps
        session.processed_photo = processed
        journey.stage = Stage.TRANSFORMATION
        return _accept(journey)

    def navigate(self, user_id: UUID, stage: Stage | str) -> TransitionResult:
        """Switch between result tabs once a try-on result exists."""
        journey = self.get_journey(user_id)
        try:
            target = Stage(stage)
        except ValueError:
            return _reject(journey, INVALID_STAGE)
        if target not in TAB_STAGES or journey.stage not in TAB_STAGES:
            return _reject(journey, INVALID_STAGE)
        if not journey.session.can_navigate():
            return _reject(journey, NOT_READY)
        if journey.generating and target != journey.stage:
            # Leaving style selection abandons the running generation.
            journey.epoch += 1
            journey.generating = False
        journey.stage = target
        return _accept(journey)

    def restart(self, user_id: UUID) -> TransitionResult:
        """Discard the session and consultation and start over."""
        journey = self.get_journey(user_id)
        journey.epoch += 1
        journey.stage = Stage.CONSULTATION
        journey.session = Session()
        journey.consultation = ConsultationState()
        journey.matches = None
        journey.cursor = 0
        journey.generating = False
        return _accept(journey)

    def save_look(self, user_id: UUID) -> TransitionResult:
        """Write the current result to history; raises HistorySaveError."""
        journey = self.get_journey(user_id)
        session = journey.session
        if session.processed_photo is None or session.selected_style is None:
            return _reject(journey, NOT_READY)
        self.history_service.save(
            user_id, session.processed_photo, session.selected_style.name
        )
        return _accept(journey)

    async def breakdown_image(self, user_id: UUID, index: int) -> bytes | None:
        """Render the close-up for a breakdown step; None means pending."""
        session = self.get_journey(user_id).session
        if session.processed_photo is None or not 0 <= index < len(session.breakdown):
            raise IndexError(f"No breakdown step {index}")
        step = session.breakdown[index]
        features = session.analysis.features if session.analysis else None
        box = feature_box(features, step.area)
        return await asyncio.to_thread(
            render_region, session.processed_photo, step.area, box
        )

    def _find_style(self, journey: Journey, style_id: str) -> StyleEntry | None:
        if journey.matches is not None:
            for style in journey.matches.styles:
                if style.id == style_id:
                    return style
        return self.catalog_service.find(style_id)


def _start_capture(journey: Journey, photo: bytes) -> None:
    """Store an accepted photo and clear results of the previous capture."""
    journey.epoch += 1
    journey.generating = False
    journey.session.raw_photo = photo
    journey.session.analysis = None
    journey.session.selected_style = None
    journey.session.processed_photo = None
    journey.session.breakdown = []
    journey.matches = None
    journey.cursor = 0
    journey.stage = Stage.ANALYZING


def _accept(journey: Journey) -> TransitionResult:
    return TransitionResult(accepted=True, stage=journey.stage)


def _reject(journey: Journey, reason: str | None) -> TransitionResult:
    return TransitionResult(accepted=False, stage=journey.stage, reason=reason)
