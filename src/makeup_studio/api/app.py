"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse, Response

from makeup_studio.api.schemas import (
    ChatMessageView,
    ConsultationView,
    HistoryView,
    JourneyView,
    MessageRequest,
    NavigateRequest,
    PhotoRequest,
    PreferencesRequest,
    PreferencesView,
    StyleCard,
)
from makeup_studio.app_logging import configure_logging
from makeup_studio.containers import AppContainer
from makeup_studio.domain.analysis import FaceAnalysis
from makeup_studio.domain.models import Identity
from makeup_studio.domain.sessions import TransitionResult
from makeup_studio.domain.styles import StyleEntry
from makeup_studio.i18n import notice
from makeup_studio.services.consultation import is_ready
from makeup_studio.services.history import HistorySaveError
from makeup_studio.services.llm import decode_image_payload, detect_mime_type
from makeup_studio.services.matching import highlight_tags
from makeup_studio.services.quality import TOO_BRIGHT, TOO_DARK, UNREADABLE
from makeup_studio.services.sessions import (
    ANALYSIS_FAILED,
    GENERATION_FAILED,
    UNKNOWN_STYLE,
)

_QUALITY_REASONS = frozenset({TOO_DARK, TOO_BRIGHT, UNREADABLE})

_REJECTION_STATUS = {
    TOO_DARK: status.HTTP_422_UNPROCESSABLE_ENTITY,
    TOO_BRIGHT: status.HTTP_422_UNPROCESSABLE_ENTITY,
    UNREADABLE: status.HTTP_422_UNPROCESSABLE_ENTITY,
    GENERATION_FAILED: status.HTTP_502_BAD_GATEWAY,
    UNKNOWN_STYLE: status.HTTP_404_NOT_FOUND,
}


async def require_identity(
    request: Request, authorization: str | None = Header(default=None)
) -> Identity:
    """Resolve the bearer token to an identity or reject the request."""
    container: AppContainer = request.app.state.container
    identity = container.identity_service.authenticate(authorization)
    if identity is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return identity


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/session")
    async def get_session(
        request: Request, identity: Identity = Depends(require_identity)
    ) -> JourneyView:
        """Return the current journey snapshot."""
        state_container: AppContainer = request.app.state.container
        language = state_container.preferences_service.get_language(identity.id)
        return _journey_view(state_container, identity, language)

    @app.post("/session/messages")
    async def send_message(
        payload: MessageRequest,
        request: Request,
        identity: Identity = Depends(require_identity),
    ) -> JourneyView:
        """Send one consultation chat message."""
        state_container: AppContainer = request.app.state.container
        language = state_container.preferences_service.get_language(identity.id)
        result = await state_container.session_service.send_message(
            identity.id, payload.text, language
        )
        return _respond(state_container, identity, language, result)

    @app.post("/session/proceed")
    async def proceed(
        request: Request, identity: Identity = Depends(require_identity)
    ) -> JourneyView:
        """Finish the consultation and move on to capture."""
        state_container: AppContainer = request.app.state.container
        language = state_container.preferences_service.get_language(identity.id)
        result = state_container.session_service.proceed_to_capture(identity.id)
        return _respond(state_container, identity, language, result)

    @app.post("/session/photo")
    async def submit_photo(
        payload: PhotoRequest,
        request: Request,
        identity: Identity = Depends(require_identity),
    ) -> JourneyView:
        """Gate and analyze a captured photo."""
        state_container: AppContainer = request.app.state.container
        language = state_container.preferences_service.get_language(identity.id)
        try:
            image_bytes = decode_image_payload(payload.image)
        except ValueError as exc:
            logger.warning("Invalid photo payload", extra={"user_id": str(identity.id)})
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail={
                    "reason": UNREADABLE,
                    "message": _format_error(
                        state_container, exc, _rejection_message(UNREADABLE, language)
                    ),
                },
            ) from exc
        result = await state_container.session_service.submit_photo(
            identity.id, image_bytes, language
        )
        return _respond(state_container, identity, language, result)

    @app.post("/session/retake")
    async def retake(
        request: Request, identity: Identity = Depends(require_identity)
    ) -> JourneyView:
        """Go back to capture."""
        state_container: AppContainer = request.app.state.container
        language = state_container.preferences_service.get_language(identity.id)
        result = state_container.session_service.retake(identity.id)
        return _respond(state_container, identity, language, result)

    @app.post("/session/styles/more")
    async def show_more(
        request: Request, identity: Identity = Depends(require_identity)
    ) -> JourneyView:
        """Show the next page of styles."""
        state_container: AppContainer = request.app.state.container
        language = state_container.preferences_service.get_language(identity.id)
        result = state_container.session_service.show_more(identity.id)
        return _respond(state_container, identity, language, result)

    @app.post("/session/styles/{style_id}")
    async def select_style(
        style_id: str,
        request: Request,
        identity: Identity = Depends(require_identity),
    ) -> JourneyView:
        """Try on a style."""
        state_container: AppContainer = request.app.state.container
        language = state_container.preferences_service.get_language(identity.id)
        result = await state_container.session_service.select_style(
            identity.id, style_id, language
        )
        return _respond(state_container, identity, language, result)

    @app.post("/session/navigate")
    async def navigate(
        payload: NavigateRequest,
        request: Request,
        identity: Identity = Depends(require_identity),
    ) -> JourneyView:
        """Switch between result tabs."""
        state_container: AppContainer = request.app.state.container
        language = state_container.preferences_service.get_language(identity.id)
        result = state_container.session_service.navigate(identity.id, payload.stage)
        return _respond(state_container, identity, language, result)

    @app.post("/session/restart")
    async def restart(
        request: Request, identity: Identity = Depends(require_identity)
    ) -> JourneyView:
        """Start a new consultation."""
        state_container: AppContainer = request.app.state.container
        language = state_container.preferences_service.get_language(identity.id)
        result = state_container.session_service.restart(identity.id)
        return _respond(state_container, identity, language, result)

    @app.get("/session/photos/{kind}")
    async def session_photo(
        kind: str,
        request: Request,
        identity: Identity = Depends(require_identity),
    ) -> Response:
        """Return the captured or the transformed photo."""
        state_container: AppContainer = request.app.state.container
        session = state_container.session_service.get_journey(identity.id).session
        photos = {"raw": session.raw_photo, "processed": session.processed_photo}
        image = photos.get(kind)
        if image is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return Response(content=image, media_type=detect_mime_type(image))

    @app.get("/session/breakdown/{index}/image", response_model=None)
    async def breakdown_image(
        index: int,
        request: Request,
        identity: Identity = Depends(require_identity),
    ) -> Response:
        """Return the close-up for one breakdown step."""
        state_container: AppContainer = request.app.state.container
        try:
            image = await state_container.session_service.breakdown_image(
                identity.id, index
            )
        except IndexError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND) from exc
        if image is None:
            return JSONResponse(
                status_code=status.HTTP_202_ACCEPTED, content={"status": "pending"}
            )
        return Response(content=image, media_type=detect_mime_type(image))

    @app.post("/session/save")
    async def save_look(
        request: Request, identity: Identity = Depends(require_identity)
    ) -> dict[str, str]:
        """Save the current look to history."""
        state_container: AppContainer = request.app.state.container
        language = state_container.preferences_service.get_language(identity.id)
        try:
            result = state_container.session_service.save_look(identity.id)
        except HistorySaveError as exc:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail={
                    "reason": "save_failed",
                    "message": _format_error(
                        state_container, exc, notice("save_failed", language)
                    ),
                },
            ) from exc
        if not result.accepted:
            _raise_rejection(result, language)
        return {"status": "saved", "message": notice("saved", language)}

    @app.get("/history")
    async def history(
        request: Request,
        limit: int = 20,
        identity: Identity = Depends(require_identity),
    ) -> list[HistoryView]:
        """Return saved looks, newest first."""
        state_container: AppContainer = request.app.state.container
        entries = state_container.history_service.list_recent(identity.id, limit)
        return [
            HistoryView(
                id=entry.id,
                processed_image_url=entry.processed_image_url,
                style_name=entry.style_name,
                created_at=entry.created_at.isoformat() if entry.created_at else None,
            )
            for entry in entries
        ]

    @app.get("/preferences")
    async def get_preferences(
        request: Request, identity: Identity = Depends(require_identity)
    ) -> PreferencesView:
        """Return the user's preferences."""
        state_container: AppContainer = request.app.state.container
        language = state_container.preferences_service.get_language(identity.id)
        return PreferencesView(language=language)

    @app.put("/preferences")
    async def update_preferences(
        payload: PreferencesRequest,
        request: Request,
        identity: Identity = Depends(require_identity),
    ) -> PreferencesView:
        """Update the user's language."""
        state_container: AppContainer = request.app.state.container
        language = state_container.preferences_service.set_language(
            identity.id, payload.language
        )
        return PreferencesView(language=language)

    return app


def _respond(
    state_container: AppContainer,
    identity: Identity,
    language: str,
    result: TransitionResult,
) -> JourneyView:
    """Return the journey view, or raise for a rejected transition."""
    if not result.accepted and result.reason != ANALYSIS_FAILED:
        _raise_rejection(result, language)
    return _journey_view(state_container, identity, language, result)


def _raise_rejection(result: TransitionResult, language: str) -> None:
    reason = result.reason or "invalid_stage"
    raise HTTPException(
        status_code=_REJECTION_STATUS.get(reason, status.HTTP_409_CONFLICT),
        detail={
            "reason": reason,
            "stage": str(result.stage),
            "message": _rejection_message(reason, language),
        },
    )


def _rejection_message(reason: str, language: str) -> str:
    if reason in _QUALITY_REASONS:
        return f"{notice('quality_fail', language)}: {notice(reason, language)}"
    return notice(reason, language)


def _journey_view(
    state_container: AppContainer,
    identity: Identity,
    language: str,
    result: TransitionResult | None = None,
) -> JourneyView:
    service = state_container.session_service
    journey = service.get_journey(identity.id)
    session = journey.session
    consultation = journey.consultation
    analysis = session.analysis
    matches = journey.matches
    reason = result.reason if result else None
    return JourneyView(
        stage=journey.stage,
        accepted=result.accepted if result else True,
        reason=reason,
        notice=_rejection_message(reason, language) if reason else None,
        can_navigate=session.can_navigate(),
        generating=journey.generating,
        has_raw_photo=session.raw_photo is not None,
        has_processed_photo=session.processed_photo is not None,
        consultation=ConsultationView(
            goals=list(consultation.goals),
            environment=consultation.environment,
            concerns=list(consultation.concerns),
            transcript=[
                ChatMessageView(role=message.role, content=message.content)
                for message in consultation.transcript
            ],
            turns=consultation.turns,
            ready=is_ready(consultation),
        ),
        analysis=analysis,
        selected_style=(
            _style_card(session.selected_style, analysis)
            if session.selected_style
            else None
        ),
        breakdown=list(session.breakdown),
        tier=matches.tier if matches else None,
        tier_label=notice(f"tier_{matches.tier}", language) if matches else None,
        catalog_error=matches.catalog_error if matches else False,
        styles=[
            _style_card(style, analysis) for style in service.current_page(identity.id)
        ],
    )


def _style_card(style: StyleEntry, analysis: FaceAnalysis | None) -> StyleCard:
    return StyleCard(
        id=style.id,
        name=style.name,
        image_url=style.image_url,
        tags=list(style.tags),
        description=style.description,
        highlights=highlight_tags(style, analysis) if analysis else [],
    )


def _format_error(state_container: AppContainer, exc: Exception, fallback: str) -> str:
    """Return a user-facing error message with local debug info."""
    if state_container.settings.environment == "local":
        detail = f"{type(exc).__name__}: {exc}".strip()
        if detail:
            return f"{fallback} (debug: {detail})"
    return fallback
