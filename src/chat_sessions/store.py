"""Locate, list, read, and write session files in the configured directory."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from .config import Config
from .errors import NotConfigured, ReadError, SessionNotFound, WriteError

_LOGGER = logging.getLogger(__name__)

NOT_CONFIGURED_MESSAGE = 'The sessions directory is not configured. Use "dir <path>" to set it.'


@dataclass(frozen=True)
class SessionFile:
    name: str
    path: Path
    modified: datetime


def resolve_directory(config: Config) -> Path:
    """Return the session directory, or raise NotConfigured."""
    directory = config.load_session_dir()
    if directory is None:
        raise NotConfigured(NOT_CONFIGURED_MESSAGE)
    if not directory.is_dir():
        raise NotConfigured(
            f'The sessions directory {directory} was not found. Use "dir <path>" to set it.'
        )
    return directory


def list_session_files(directory: Path, suffix: str = ".json") -> list[SessionFile]:
    """Session files in ``directory``, sorted oldest-first by modification time."""
    sessions = []
    for path in directory.iterdir():
        if not path.is_file() or path.suffix.lower() != suffix:
            continue
        modified = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
        sessions.append(SessionFile(name=path.name, path=path, modified=modified))
    return sorted(sessions, key=lambda s: (s.modified, s.name))


def read_session(directory: Path, name: str) -> bytes:
    """Read one session file's raw bytes."""
    path = directory / name
    if not path.is_file():
        raise SessionNotFound(f"File not found at {path}")
    _LOGGER.debug("Reading session %s", path)
    try:
        return path.read_bytes()
    except FileNotFoundError as exc:
        raise SessionNotFound(f"File not found at {path}") from exc
    except OSError as exc:
        raise ReadError(f"Error reading session {path}: {exc}") from exc


def write_session(directory: Path, name: str, data: bytes) -> Path:
    """Create ``name`` in ``directory``. Existing files are never overwritten."""
    path = directory / name
    try:
        fh = path.open("xb")
    except OSError as exc:
        raise WriteError(f"Error saving session to {path}: {exc}") from exc

    try:
        with fh:
            fh.write(data)
    except OSError as exc:
        # A truncated file would claim the name for good
        path.unlink(missing_ok=True)
        raise WriteError(f"Error saving session to {path}: {exc}") from exc
    _LOGGER.debug("Wrote %d bytes to %s", len(data), path)
    return path


def session_filename(now: datetime, counter: int = 1) -> str:
    """Sortable, colon-free file name for a new recording."""
    stamp = now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S")
    suffix = "" if counter <= 1 else f"-{counter}"
    return f"session-{stamp}-chatsave{suffix}.json"


def unique_session_name(directory: Path, now: datetime) -> str:
    """First free file name for ``now``; same-second recordings get a numeric suffix."""
    counter = 1
    while (directory / session_filename(now, counter)).exists():
        counter += 1
    return session_filename(now, counter)
