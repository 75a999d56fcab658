"""Canonical transcript model shared by both session schemas."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

# Role labels written by the recorder. Labels read from files pass through as-is.
OPERATOR = "user"
COUNTERPART = "gemini"


@dataclass(frozen=True)
class ToolCall:
    """A recorded tool invocation. ``result`` is stored exactly as read."""

    name: str
    args: Any = None
    result: Any = None


@dataclass(frozen=True)
class Turn:
    """One participant's contribution to a transcript."""

    role: str
    timestamp: datetime | None  # None if the stored value did not parse
    content: tuple[str, ...]
    tool_calls: tuple[ToolCall, ...] = ()
    raw_timestamp: str = ""
    id: str | None = None
    label: str = ""  # header text; each schema decides how its roles are shown


@dataclass(frozen=True)
class Transcript:
    """A complete conversation, independent of the schema it was read from."""

    id: str
    turns: tuple[Turn, ...]
    started_at: datetime | None = None
    updated_at: datetime | None = None
    source: str | None = None  # base name of the file it was loaded from


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO 8601 instant. Naive values are taken as UTC."""
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: datetime) -> str:
    """Serialize an instant the way session files store it (UTC, millisecond Z form)."""
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
