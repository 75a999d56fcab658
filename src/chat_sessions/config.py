"""Paths, defaults, and the persisted session directory setting."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

_LOGGER = logging.getLogger(__name__)

SESSION_DIR_ENV = "CHAT_SESSIONS_DIR"
SESSION_DIR_KEY = "sessionDir"


def _xdg_config_home() -> Path:
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


@dataclass
class Config:
    """Runtime configuration, constructed once per CLI invocation.

    The session directory is read from disk on every call so a value written
    by ``dir`` is never shadowed by a stale copy.
    """

    config_dir: Path = field(default_factory=lambda: _xdg_config_home() / "chat-sessions")

    # Session files are recognized by suffix
    session_suffix: str = ".json"

    @property
    def config_path(self) -> Path:
        return self.config_dir / "config.json"

    def load_session_dir(self) -> Path | None:
        """Return the configured session directory, or None if never set."""
        override = os.environ.get(SESSION_DIR_ENV)
        if override:
            return Path(override).expanduser()

        if not self.config_path.exists():
            return None
        try:
            data = json.loads(self.config_path.read_text())
        except (OSError, ValueError) as exc:
            _LOGGER.warning("Ignoring unreadable config file %s: %s", self.config_path, exc)
            return None

        value = data.get(SESSION_DIR_KEY) if isinstance(data, dict) else None
        if not isinstance(value, str) or not value:
            return None
        return Path(value)

    def save_session_dir(self, path: Path) -> None:
        """Persist the session directory, replacing the whole config file."""
        self.config_dir.mkdir(parents=True, exist_ok=True)
        data = {SESSION_DIR_KEY: str(path)}
        self.config_path.write_text(json.dumps(data, indent=2) + "\n")
