"""Read and write sessions in the flat ``messages`` schema.

Shape::

    {
      "sessionId": "...",
      "startTime": "2024-01-01T00:00:00.000Z",
      "lastUpdated": "2024-01-01T00:05:00.000Z",
      "messages": [
        {"id": "...", "timestamp": "...", "type": "user", "content": "hi",
         "toolCalls": [{"name": "...", "args": {...}, "result": "..."}]}
      ]
    }

This is also the shape new recordings are saved in.
"""

from __future__ import annotations

import logging
from typing import Any

from ..errors import InvalidSchema
from . import ToolCall, Transcript, Turn, format_timestamp, parse_timestamp

_LOGGER = logging.getLogger(__name__)


def parse_messages(document: dict, source: str | None = None) -> list[Turn]:
    """Map every element of ``document["messages"]`` to a Turn, in order."""
    turns: list[Turn] = []
    for index, message in enumerate(document["messages"]):
        if not isinstance(message, dict):
            raise InvalidSchema(f"messages[{index}] is not an object")

        role = str(message.get("type", ""))
        raw_timestamp = message.get("timestamp", "")
        timestamp = parse_timestamp(raw_timestamp)
        if timestamp is None:
            _LOGGER.warning("Unparseable timestamp %r in messages[%d] of %s", raw_timestamp, index, source)

        turns.append(Turn(
            role=role,
            timestamp=timestamp,
            content=_extract_content(message.get("content")),
            tool_calls=_extract_tool_calls(message.get("toolCalls"), index),
            raw_timestamp=raw_timestamp if isinstance(raw_timestamp, str) else str(raw_timestamp),
            id=message.get("id"),
            label=role.upper(),
        ))
    return turns


def _extract_content(content: Any) -> tuple[str, ...]:
    """A single string is one fragment; a list of blocks is one fragment per block."""
    if isinstance(content, str):
        return (content,)
    if isinstance(content, list):
        fragments = []
        for block in content:
            if isinstance(block, str):
                fragments.append(block)
            elif isinstance(block, dict) and isinstance(block.get("text"), str):
                fragments.append(block["text"])
        if fragments:
            return tuple(fragments)
    if content is None:
        return ("",)
    return (str(content),)


def _extract_tool_calls(raw: Any, index: int) -> tuple[ToolCall, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise InvalidSchema(f"messages[{index}].toolCalls is not a list")

    calls = []
    for position, call in enumerate(raw):
        if not isinstance(call, dict) or "name" not in call:
            raise InvalidSchema(f"messages[{index}].toolCalls[{position}] has no name")
        calls.append(ToolCall(name=str(call["name"]), args=call.get("args"), result=call.get("result")))
    return tuple(calls)


def dump_messages(transcript: Transcript) -> dict:
    """Serialize a transcript into the ``messages`` schema."""
    messages = []
    for turn in transcript.turns:
        entry: dict[str, Any] = {}
        if turn.id is not None:
            entry["id"] = turn.id
        entry["timestamp"] = format_timestamp(turn.timestamp) if turn.timestamp else turn.raw_timestamp
        entry["type"] = turn.role
        entry["content"] = "\n".join(turn.content)
        if turn.tool_calls:
            entry["toolCalls"] = [_dump_tool_call(call) for call in turn.tool_calls]
        messages.append(entry)

    document: dict[str, Any] = {"sessionId": transcript.id}
    if transcript.started_at is not None:
        document["startTime"] = format_timestamp(transcript.started_at)
    if transcript.updated_at is not None:
        document["lastUpdated"] = format_timestamp(transcript.updated_at)
    document["messages"] = messages
    return document


def _dump_tool_call(call: ToolCall) -> dict:
    data: dict[str, Any] = {"name": call.name, "args": call.args}
    if call.result is not None:
        data["result"] = call.result
    return data
