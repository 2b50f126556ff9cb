"""Domain models for the user journey."""

from dataclasses import dataclass, field
from enum import StrEnum
from uuid import UUID

from makeup_studio.domain.analysis import FaceAnalysis
from makeup_studio.domain.consultation import ConsultationState
from makeup_studio.domain.plan import BreakdownStep
from makeup_studio.domain.styles import StyleEntry, StyleMatch


class Stage(StrEnum):
    """Ordered steps of the user journey."""

    CONSULTATION = "CONSULTATION"
    INPUT = "INPUT"
    ANALYZING = "ANALYZING"
    STYLE_SELECTION = "STYLE_SELECTION"
    TRANSFORMATION = "TRANSFORMATION"
    BREAKDOWN = "BREAKDOWN"
    PROFILE = "PROFILE"


TAB_STAGES = frozenset(
    {Stage.STYLE_SELECTION, Stage.TRANSFORMATION, Stage.BREAKDOWN, Stage.PROFILE}
)


@dataclass
class Session:
    """Mutable state accumulated over one journey."""

    raw_photo: bytes | None = None
    selected_style: StyleEntry | None = None
    processed_photo: bytes | None = None
    analysis: FaceAnalysis | None = None
    breakdown: list[BreakdownStep] = field(default_factory=list)

    def can_navigate(self) -> bool:
        """Return True once a full try-on result is available."""
        return (
            self.raw_photo is not None
            and self.selected_style is not None
            and self.processed_photo is not None
        )


@dataclass
class Journey:
    """Per-user holder for the stage, session and transient UI state."""

    user_id: UUID
    stage: Stage = Stage.CONSULTATION
    session: Session = field(default_factory=Session)
    consultation: ConsultationState = field(default_factory=ConsultationState)
    matches: StyleMatch | None = None
    cursor: int = 0
    epoch: int = 0
    generating: bool = False


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of a stage transition attempt."""

    accepted: bool
    stage: Stage
    reason: str | None = None
