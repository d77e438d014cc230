# File: tests/core/test_database_setup.py

from sqlalchemy import text
from toeic_splitter.core.config.settings import Settings, settings
from toeic_splitter.core.database.connection import SessionLocal, init_db


def test_database_connection():
    """
    Simple smoke test to ensure DB is reachable and configured.
    """
    init_db()
    with SessionLocal() as db:
        result = db.execute(text("SELECT 1"))
        assert result.scalar() == 1


def test_database_url_prefers_environment(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///./somewhere_else.db")

    assert Settings().DATABASE_URL == "sqlite:///./somewhere_else.db"


def test_database_url_defaults(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("USE_SQLITE", raising=False)
    assert Settings().DATABASE_URL.startswith("sqlite:///")
    assert Settings().DATABASE_URL.endswith("toeic_splitter.db")

    monkeypatch.setenv("USE_SQLITE", "false")
    assert Settings().DATABASE_URL.startswith("postgresql://")


def test_silence_defaults():
    assert settings.SILENCE_NOISE_DB == -40.0
    assert settings.SILENCE_MIN_DURATION == 0.3
