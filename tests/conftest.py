import pytest


@pytest.fixture(autouse=True)
def _no_session_dir_override(monkeypatch):
    monkeypatch.delenv("CHAT_SESSIONS_DIR", raising=False)
