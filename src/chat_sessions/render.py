"""Render a canonical Transcript as display lines."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import tzinfo
from typing import Any, Iterator

from .transcripts import ToolCall, Transcript, Turn

DEFAULT_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
INVALID_DATE = "Invalid Date"
UNRENDERABLE = "<nested too deeply to display>"

_SEPARATOR = "=" * 50
_RULE = "-" * 50
_TOOL_RULE = "  " + "-" * 16


@dataclass(frozen=True)
class Parsed:
    """A tool result that decoded as JSON."""

    value: Any


@dataclass(frozen=True)
class Raw:
    """A tool result shown verbatim."""

    text: str


def decode_result(raw: Any) -> Parsed | Raw:
    """Best-effort decode of a stored tool result. Never raises."""
    if not isinstance(raw, str):
        return Parsed(raw)
    try:
        return Parsed(json.loads(raw))
    except (ValueError, RecursionError):
        return Raw(raw)


def pretty_json(value: Any) -> str:
    """Indented JSON in stored key order."""
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)


def _pretty_or(value: Any, fallback: str | None) -> str | None:
    try:
        return pretty_json(value)
    except (ValueError, RecursionError):
        return fallback


class TranscriptRenderer:
    """Lazy, restartable view of a transcript as display lines.

    Each iteration walks the transcript from the start, so the same renderer
    can be streamed to the console more than once. Timestamps are shown in
    ``tz`` (the local zone when None).
    """

    def __init__(
        self,
        transcript: Transcript,
        tz: tzinfo | None = None,
        timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT,
    ) -> None:
        self.transcript = transcript
        self.tz = tz
        self.timestamp_format = timestamp_format

    def __iter__(self) -> Iterator[str]:
        yield ""
        yield f"--- Session Start: {self.transcript.source or self.transcript.id} ---"
        for turn in self.transcript.turns:
            yield from self._render_turn(turn)
        yield ""
        yield "--- Session End ---"

    def _render_turn(self, turn: Turn) -> Iterator[str]:
        yield ""
        yield _SEPARATOR
        yield f"[{turn.label or turn.role}] - {self.format_timestamp(turn)}"
        yield _RULE
        yield "\n".join(turn.content)

        if turn.tool_calls:
            yield ""
            yield "--- Tool Calls ---"
            for call in turn.tool_calls:
                yield from _render_tool_call(call)

    def format_timestamp(self, turn: Turn) -> str:
        if turn.timestamp is None:
            return INVALID_DATE
        try:
            return turn.timestamp.astimezone(self.tz).strftime(self.timestamp_format)
        except (OverflowError, ValueError, OSError):
            # Parses, but falls outside the range the display zone can represent
            return INVALID_DATE


def _render_tool_call(call: ToolCall) -> Iterator[str]:
    yield f"  Name: {call.name}"
    yield from _labelled_block("Args", _pretty_or(call.args, UNRENDERABLE))

    if call.result is not None and call.result != "":
        decoded = decode_result(call.result)
        pretty = _pretty_or(decoded.value, None) if isinstance(decoded, Parsed) else None
        if pretty is not None:
            yield from _labelled_block("Result", pretty)
        elif isinstance(call.result, str):
            yield f"  Result: {call.result}"
        else:
            yield f"  Result: {UNRENDERABLE}"

    yield _TOOL_RULE


def _labelled_block(label: str, text: str) -> Iterator[str]:
    """First line after the label, continuation lines indented under it."""
    first, *rest = text.split("\n")
    yield f"  {label}: {first}"
    for line in rest:
        yield f"  {line}"


def render_lines(
    transcript: Transcript,
    tz: tzinfo | None = None,
    timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT,
) -> list[str]:
    """Render the whole transcript eagerly."""
    return list(TranscriptRenderer(transcript, tz, timestamp_format))
