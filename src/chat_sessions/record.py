"""Interactive recorder: collect alternating turns and save them as a new session."""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable

from .errors import RecorderClosed
from .store import unique_session_name, write_session
from .transcripts import COUNTERPART, OPERATOR, Transcript, Turn
from .transcripts.messages import dump_messages

_LOGGER = logging.getLogger(__name__)

SENTINEL = "DONE"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RecorderState(Enum):
    AWAITING_INPUT = "awaiting_input"
    FINALIZING = "finalizing"


class Recorder:
    """Turn-collection state machine.

    Starts in AWAITING_INPUT with the operator to speak. Every line of text
    becomes a turn for the current role and hands the floor to the other
    role; the sentinel (case-insensitive) or end-of-input moves the machine to
    FINALIZING, which is terminal.
    """

    def __init__(
        self,
        clock: Callable[[], datetime] = _utcnow,
        sentinel: str = SENTINEL,
        roles: tuple[str, str] = (OPERATOR, COUNTERPART),
    ) -> None:
        self.clock = clock
        self.sentinel = sentinel
        self.roles = roles
        self.state = RecorderState.AWAITING_INPUT
        self.current_role = roles[0]
        self._turns: list[Turn] = []

    @property
    def turns(self) -> tuple[Turn, ...]:
        return tuple(self._turns)

    @property
    def finished(self) -> bool:
        return self.state is RecorderState.FINALIZING

    def is_sentinel(self, text: str) -> bool:
        return text.strip().upper() == self.sentinel.upper()

    def feed(self, text: str) -> RecorderState:
        """Consume one line of input and return the resulting state."""
        if self.finished:
            raise RecorderClosed("Recorder has already finished collecting turns")

        if self.is_sentinel(text):
            self.state = RecorderState.FINALIZING
            return self.state

        self.add_turn(self.current_role, text)
        self.current_role = self.roles[1] if self.current_role == self.roles[0] else self.roles[0]
        return self.state

    def finish(self) -> None:
        """End collection without the sentinel (end-of-input)."""
        self.state = RecorderState.FINALIZING

    def add_turn(self, role: str, text: str) -> None:
        """Append a turn for an explicit role. The role to prompt for next is unchanged."""
        if self.finished:
            raise RecorderClosed("Recorder has already finished collecting turns")
        self._turns.append(Turn(
            role=role,
            timestamp=self.clock(),
            content=(text,),
            id=f"chat-save-{uuid.uuid4()}",
            label=role.upper(),
        ))

    def finalize(self) -> Transcript | None:
        """Freeze the collected turns. Returns None when no turns were collected."""
        self.finish()
        if not self._turns:
            return None
        return Transcript(
            id=f"chat-save-session-{uuid.uuid4()}",
            turns=tuple(self._turns),
            started_at=self._turns[0].timestamp,
            updated_at=self._turns[-1].timestamp,
        )

    def run_interactive(
        self,
        read_line: Callable[[], str | None],
        prompt: Callable[[str], None],
    ) -> Transcript | None:
        """Drive the machine from a blocking line reader until the sentinel or end-of-input.

        Args:
            read_line: Returns the next line without its newline, or None at end-of-input.
            prompt: Receives the prompt text shown before each read.
        """
        while not self.finished:
            prompt(f"Enter content for [{self.current_role.upper()}] (or type {self.sentinel} to finish):")
            line = read_line()
            if line is None:
                self.finish()
                break
            self.feed(line)
        return self.finalize()


def record_pairs(
    pairs: Iterable[tuple[str, str]],
    clock: Callable[[], datetime] = _utcnow,
) -> Transcript | None:
    """Build a transcript from pre-collected ``(role, text)`` pairs, without prompting."""
    recorder = Recorder(clock=clock)
    for role, text in pairs:
        recorder.add_turn(role, text)
    return recorder.finalize()


def save_recording(directory: Path, transcript: Transcript, now: datetime | None = None) -> Path:
    """Write a finalized transcript as a new session file. Returns its path."""
    if not transcript.turns:
        raise ValueError("Refusing to save a transcript with no turns")

    name = unique_session_name(directory, now or _utcnow())
    data = json.dumps(dump_messages(transcript), indent=2, ensure_ascii=False) + "\n"
    path = write_session(directory, name, data.encode("utf-8"))
    _LOGGER.info("Saved %d turn(s) to %s", len(transcript.turns), path)
    return path
