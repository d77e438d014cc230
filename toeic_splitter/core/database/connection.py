# File: toeic_splitter/core/database/connection.py

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from toeic_splitter.core.config.settings import settings

# The SQLite file lives under DATA_DIR, which may not exist on a fresh checkout.
if settings.DATABASE_URL.startswith("sqlite"):
    settings.DATA_DIR.mkdir(parents=True, exist_ok=True)

# check_same_thread=False is needed only for SQLite (cut workers run on a thread pool)
connect_args = {"check_same_thread": False} if "sqlite" in settings.DATABASE_URL else {}

engine = create_engine(
    settings.DATABASE_URL,
    echo=False,
    pool_pre_ping=True,
    connect_args=connect_args
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db():
    """Creates the metadata tables if they don't exist yet."""
    from .base import Base
    import toeic_splitter.features.split_metadata.data.sql_models  # noqa: F401

    Base.metadata.create_all(bind=engine)
