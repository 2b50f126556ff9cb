"""Domain models for the consultation chat."""

from dataclasses import dataclass, field
from typing import Literal

from pydantic import BaseModel


@dataclass(frozen=True)
class ChatMessage:
    """A single transcript entry."""

    role: Literal["user", "assistant"]
    content: str


class ConsultationReply(BaseModel):
    """Structured output of the conversational model for one turn."""

    reply_text: str
    extracted_concerns: list[str]
    extracted_style: list[str]
    extracted_environment: str | None
    is_ready: bool


@dataclass
class ConsultationState:
    """Tags gathered so far plus the transcript."""

    goals: list[str] = field(default_factory=list)
    environment: str | None = None
    concerns: list[str] = field(default_factory=list)
    transcript: list[ChatMessage] = field(default_factory=list)
    turns: int = 0
