"""
Turns the assistant's free-form reply into a message and a mood tag.

The assistant is instructed to answer with `{"message": ..., "mood": ...}`
but nothing enforces it, so every reply is first classified into one of
three shapes and then mapped to a `ParsedReply`:

- StructuredReply: a JSON object with non-empty `message` and `mood`
- RawText: anything else that has visible text
- Unparseable: no reply text at all (optionally the raw listing payload)

The mapping never raises; the worst case is the configured fallback message
with the neutral mood.
"""

import json
import logging
from dataclasses import dataclass
from typing import Optional, Union

import showroom_chat.config.config as configs
from showroom_chat.model.chat.conversation import ParsedReply

logger = logging.getLogger(__name__)

LEADING_MARKERS = "\ufeff\u200b"
MOOD_KEYS = ("mood", "humor")


@dataclass(frozen=True)
class StructuredReply:
    message: str
    mood: str


@dataclass(frozen=True)
class RawText:
    text: str


@dataclass(frozen=True)
class Unparseable:
    payload: Optional[str] = None


AssistantReply = Union[StructuredReply, RawText, Unparseable]


def _strip_code_fence(text: str) -> str:
    if not text.startswith("```"):
        return text
    lines = text.splitlines()
    if lines and lines[0].startswith("```"):
        lines = lines[1:]
    if lines and lines[-1].startswith("```"):
        lines = lines[:-1]
    return "\n".join(lines).strip()


def _decode_structured(text: str) -> Optional[StructuredReply]:
    try:
        decoded = json.loads(_strip_code_fence(text))
    except (json.JSONDecodeError, RecursionError):
        return None
    if not isinstance(decoded, dict):
        return None
    message = decoded.get("message")
    mood = next((decoded[k] for k in MOOD_KEYS if k in decoded), None)
    if isinstance(message, str) and message.strip() and isinstance(mood, str) and mood.strip():
        return StructuredReply(message=message, mood=mood.strip())
    return None


def classify_reply(text: Optional[str], payload: Optional[str] = None) -> AssistantReply:
    if not isinstance(text, str):
        return Unparseable(payload=payload)
    cleaned = text.lstrip(LEADING_MARKERS).strip()
    if not cleaned:
        return Unparseable(payload=payload)
    structured = _decode_structured(cleaned)
    if structured is not None:
        return structured
    return RawText(text=cleaned)


def parse_reply(text: Optional[str], payload: Optional[str] = None) -> ParsedReply:
    """Map the newest assistant text (and the raw listing body) to a ParsedReply."""
    reply = classify_reply(text, payload)

    if isinstance(reply, StructuredReply):
        return ParsedReply(message=reply.message, mood=reply.mood)

    if isinstance(reply, RawText):
        logger.warning("assistant reply is not structured, using it verbatim")
        return ParsedReply(message=reply.text, mood=configs.NEUTRAL_MOOD)

    if isinstance(reply, Unparseable):
        logger.warning("assistant reply text unavailable, falling back")
        if reply.payload and reply.payload.strip():
            return ParsedReply(message=reply.payload, mood=configs.NEUTRAL_MOOD)
        return ParsedReply(message=configs.FALLBACK_REPLY_MESSAGE, mood=configs.NEUTRAL_MOOD)

    raise TypeError(f"unhandled reply shape: {reply!r}")
