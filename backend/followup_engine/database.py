"""
Follow-up Engine - Database Configuration
SQLAlchemy connection for the customer snapshot and the follow-up ledger
"""
import os
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

# Any SQLAlchemy URL; defaults to a SQLite file in the working directory
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    "sqlite:///./followup_engine.db"
)


def engine_options(url: str) -> dict:
    """Keyword arguments for create_engine.

    SQLite connections are handed between FastAPI's worker threads, so the
    same-thread check is switched off for them.
    """
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


engine = create_engine(DATABASE_URL, echo=False, **engine_options(DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for ORM models
Base = declarative_base()


def get_db():
    """Dependency for FastAPI - one session per request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Create the customer and follow-up log tables if missing."""
    Base.metadata.create_all(bind=engine)
