"""
Shared fixtures: every test gets its own empty data directory and runs with
token mode off unless it opts in.
"""

import pytest

from app import db


@pytest.fixture(autouse=True)
def data_dir(tmp_path, monkeypatch):
    """Point the flat-file store at a fresh temporary directory."""
    root = tmp_path / "data"
    monkeypatch.setattr(db, "DATA_DIR", root)
    monkeypatch.setattr(db, "USERS_FILE", root / "users.json")
    monkeypatch.setattr(db, "EMAILS_DIR", root / "emails")
    monkeypatch.setattr(db, "ATTACHMENTS_DIR", root / "attachments")
    monkeypatch.delenv("WEBMAIL_JWT_SECRET", raising=False)
    monkeypatch.delenv("WEBMAIL_TOKEN_TTL_SECONDS", raising=False)
    return root


@pytest.fixture()
def token_mode(monkeypatch):
    """Enable session tokens with a known secret."""
    secret = "test-jwt-secret"
    monkeypatch.setenv("WEBMAIL_JWT_SECRET", secret)
    return secret
