"""Read sessions in the nested ``conversation.turns`` schema.

Each turn carries a ``role`` ("user" or "model") and a list of ``parts``,
each with a ``text`` field.
"""

from __future__ import annotations

import logging

from ..errors import InvalidSchema
from . import Turn, parse_timestamp

_LOGGER = logging.getLogger(__name__)


def parse_conversation(document: dict, source: str | None = None) -> list[Turn]:
    """Map every element of ``document["conversation"]["turns"]`` to a Turn, in order."""
    turns: list[Turn] = []
    for index, entry in enumerate(document["conversation"]["turns"]):
        if not isinstance(entry, dict):
            raise InvalidSchema(f"conversation.turns[{index}] is not an object")

        role = str(entry.get("role", ""))
        raw_timestamp = entry.get("timestamp", "")
        timestamp = parse_timestamp(raw_timestamp)
        if timestamp is None:
            _LOGGER.warning("Unparseable timestamp %r in conversation.turns[%d] of %s", raw_timestamp, index, source)

        turns.append(Turn(
            role=role,
            timestamp=timestamp,
            content=_extract_parts(entry.get("parts"), index),
            raw_timestamp=raw_timestamp if isinstance(raw_timestamp, str) else str(raw_timestamp),
            label=role,
        ))
    return turns


def _extract_parts(parts, index: int) -> tuple[str, ...]:
    if parts is None:
        return ("",)
    if not isinstance(parts, list):
        raise InvalidSchema(f"conversation.turns[{index}].parts is not a list")

    fragments = []
    for part in parts:
        if isinstance(part, str):
            fragments.append(part)
        elif isinstance(part, dict):
            text = part.get("text", "")
            fragments.append(text if isinstance(text, str) else str(text))
    return tuple(fragments) or ("",)
