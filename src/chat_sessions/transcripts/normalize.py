"""Detect which session schema a document uses and convert it to a Transcript."""

from __future__ import annotations

import json
import logging
import uuid
from enum import Enum
from pathlib import PurePath
from typing import Any

from ..errors import InvalidSchema, MalformedJSON
from . import Transcript, Turn, parse_timestamp
from .conversation import parse_conversation
from .messages import parse_messages

_LOGGER = logging.getLogger(__name__)


class SchemaKind(Enum):
    MESSAGES = "messages"
    CONVERSATION = "conversation.turns"


def detect_schema(document: Any) -> SchemaKind:
    """Decide the document's shape. This is the only place the shape is inspected."""
    if not isinstance(document, dict):
        raise InvalidSchema(f"Session document must be a JSON object, got {type(document).__name__}")

    if isinstance(document.get("messages"), list):
        return SchemaKind.MESSAGES

    conversation = document.get("conversation")
    if isinstance(conversation, dict) and isinstance(conversation.get("turns"), list):
        return SchemaKind.CONVERSATION

    if "messages" in document:
        raise InvalidSchema('Invalid session file format. "messages" is not an array.')
    if "conversation" in document:
        raise InvalidSchema('Invalid session file format. "conversation.turns" array not found.')
    raise InvalidSchema('Invalid session file format. Neither "messages" nor "conversation.turns" found.')


def normalize(document: Any, source: str | None = None) -> Transcript:
    """Convert a parsed session document into the canonical Transcript."""
    kind = detect_schema(document)

    if kind is SchemaKind.MESSAGES:
        turns = parse_messages(document, source)
        session_id = document.get("sessionId")
        started_at = parse_timestamp(document.get("startTime"))
        updated_at = parse_timestamp(document.get("lastUpdated"))
    else:
        turns = parse_conversation(document, source)
        session_id = None
        started_at = updated_at = None

    first, last = _turn_span(turns)
    if started_at is None:
        started_at = first
    if updated_at is None:
        updated_at = last

    if not session_id:
        session_id = PurePath(source).stem if source else str(uuid.uuid4())

    return Transcript(
        id=str(session_id),
        turns=tuple(turns),
        started_at=started_at,
        updated_at=updated_at,
        source=source,
    )


def _turn_span(turns: list[Turn]):
    stamps = [turn.timestamp for turn in turns if turn.timestamp is not None]
    if not stamps:
        return None, None
    return stamps[0], stamps[-1]


def load_transcript(raw: bytes | str, source: str | None = None) -> Transcript:
    """Decode raw session file content and normalize it.

    Raises:
        MalformedJSON: the content is not JSON at all.
        InvalidSchema: the JSON matches neither session shape.
    """
    try:
        text = raw.decode("utf-8") if isinstance(raw, bytes) else raw
        document = json.loads(text)
    except (ValueError, RecursionError) as exc:
        raise MalformedJSON(f"{source or 'Session file'} is not valid JSON: {exc}") from exc

    transcript = normalize(document, source)
    _LOGGER.debug("Loaded %d turn(s) from %s", len(transcript.turns), source)
    return transcript
