"""Consultation chat that gathers style goals before capture."""

import logging
from dataclasses import dataclass

from makeup_studio.domain.consultation import (
    ChatMessage,
    ConsultationReply,
    ConsultationState,
)
from makeup_studio.i18n import notice
from makeup_studio.services.llm import StructuredModelClient, target_language

logger = logging.getLogger(__name__)

# Messages of either role; two full exchanges.
READY_MESSAGE_COUNT = 4

CONSULTATION_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "reply_text": {"type": "string"},
        "extracted_concerns": {"type": "array", "items": {"type": "string"}},
        "extracted_style": {"type": "array", "items": {"type": "string"}},
        "extracted_environment": {"type": ["string", "null"]},
        "is_ready": {"type": "boolean"},
    },
    "required": [
        "reply_text",
        "extracted_concerns",
        "extracted_style",
        "extracted_environment",
        "is_ready",
    ],
    "additionalProperties": False,
}


@dataclass
class ConsultationService:
    """Runs one chat turn and merges the extracted tags into the state."""

    client: StructuredModelClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def send(
        self, state: ConsultationState, text: str, language: str = "en"
    ) -> ChatMessage:
        """Send a user message and return the assistant reply appended to state."""
        history = list(state.transcript)
        state.transcript.append(ChatMessage(role="user", content=text))
        state.turns += 1
        try:
            raw = await self.client.generate(
                model=self.model,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
                prompt=build_chat_context(history, text),
                schema=CONSULTATION_SCHEMA,
                schema_name="consultation_turn",
                instructions=build_instructions(language),
            )
            reply = ConsultationReply.model_validate(raw)
        except Exception:
            logger.exception("Consultation turn failed", extra={"turn": state.turns})
            message = ChatMessage(role="assistant", content=notice("glitch", language))
            state.transcript.append(message)
            return message

        merge_reply(state, reply)
        message = ChatMessage(role="assistant", content=reply.reply_text)
        state.transcript.append(message)
        return message


def merge_reply(state: ConsultationState, reply: ConsultationReply) -> None:
    """Merge extracted tags: goals deduplicated, environment overwritten."""
    for goal in reply.extracted_style:
        if goal and goal not in state.goals:
            state.goals.append(goal)
    if reply.extracted_environment:
        state.environment = reply.extracted_environment
    for concern in reply.extracted_concerns:
        if concern and concern not in state.concerns:
            state.concerns.append(concern)


def is_ready(state: ConsultationState) -> bool:
    """Return True when enough context was gathered to move on to capture."""
    has_tags = bool(state.goals) and state.environment is not None
    return has_tags or len(state.transcript) >= READY_MESSAGE_COUNT


def build_chat_context(history: list[ChatMessage], text: str) -> str:
    """Render the transcript followed by the new user message."""
    if not history:
        return f"User: {text}"
    lines = "\n".join(f"{message.role}: {message.content}" for message in history)
    return f"History:\n{lines}\nUser: {text}"


def build_instructions(language: str) -> str:
    """Return the persona instructions for the consultation model."""
    lang = target_language(language)
    return (
        'You are a supportive, high-energy "Makeup Bestie".\n'
        f"ALWAYS RESPOND IN: {lang}.\n"
        "YOUR MISSION: collect two key pieces of information from the user:\n"
        "1. Makeup style (e.g. Natural, Bold, Vintage, K-Pop).\n"
        "2. Environment or occasion (e.g. Office, Date, Party, Wedding).\n"
        "BEHAVIOR:\n"
        "- If the style is missing, ask about their desired look.\n"
        "- If the environment is missing, ask where they are going.\n"
        "- If both are present, confirm their choice and tell them you are ready "
        "for the face scan.\n"
        "- Keep the conversation helpful and focused.\n"
        f"Write reply_text in {lang}. Extracted tags are concise English words; "
        "extracted_environment is null when unknown."
    )
