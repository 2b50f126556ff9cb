"""Pydantic models for the HTTP API."""

from typing import Annotated

from pydantic import BaseModel, StringConstraints

from makeup_studio.domain.analysis import FaceAnalysis
from makeup_studio.domain.plan import BreakdownStep
from makeup_studio.domain.sessions import Stage
from makeup_studio.domain.styles import MatchTier

NonEmptyText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class MessageRequest(BaseModel):
    """Consultation chat message."""

    text: NonEmptyText


class PhotoRequest(BaseModel):
    """Captured photo as a data URL or bare base64 string."""

    image: NonEmptyText


class NavigateRequest(BaseModel):
    """Target tab for navigation."""

    stage: str


class PreferencesRequest(BaseModel):
    """Preference update payload."""

    language: NonEmptyText


class ChatMessageView(BaseModel):
    """Transcript entry."""

    role: str
    content: str


class ConsultationView(BaseModel):
    """Tags gathered by the consultation chat."""

    goals: list[str]
    environment: str | None
    concerns: list[str]
    transcript: list[ChatMessageView]
    turns: int
    ready: bool


class StyleCard(BaseModel):
    """Style shown to the user."""

    id: str
    name: str
    image_url: str
    tags: list[str]
    description: str
    highlights: list[str] = []


class JourneyView(BaseModel):
    """Snapshot of the user's journey."""

    stage: Stage
    accepted: bool = True
    reason: str | None = None
    notice: str | None = None
    can_navigate: bool
    generating: bool
    has_raw_photo: bool
    has_processed_photo: bool
    consultation: ConsultationView
    analysis: FaceAnalysis | None
    selected_style: StyleCard | None
    breakdown: list[BreakdownStep]
    tier: MatchTier | None
    tier_label: str | None
    catalog_error: bool
    styles: list[StyleCard]


class HistoryView(BaseModel):
    """Saved look."""

    id: str
    processed_image_url: str
    style_name: str
    created_at: str | None


class PreferencesView(BaseModel):
    """Stored user preferences."""

    language: str
