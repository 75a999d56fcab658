"""Error kinds raised by the session engine and reported by the CLI."""

from __future__ import annotations


class SessionError(Exception):
    """Base class for errors that end the current command but not the process."""


class NotConfigured(SessionError):
    """The session directory has not been set, or no longer exists."""


class SessionNotFound(SessionError):
    """The named session file does not exist."""


class InvalidSchema(SessionError):
    """The document matches neither known session shape."""


class MalformedJSON(SessionError):
    """The file content is not parseable JSON."""


class ReadError(SessionError):
    """A session file exists but could not be read."""


class WriteError(SessionError):
    """A session file could not be persisted."""


class RecorderClosed(SessionError):
    """Input was fed to a recorder that has already finished."""
