# coach_scraper/db.py
"""Coach listing store: one engine per process, one session per request or run.

The API gets its session through ``get_db``; the scrape runner opens its own
from ``SessionLocal`` for the length of a run.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from . import config


def normalize_url(url: str) -> str:
    """Heroku-style ``postgres://`` URLs need the explicit psycopg2 dialect."""
    if url.startswith("postgres://"):
        return "postgresql+psycopg2://" + url[len("postgres://"):]
    return url


def make_engine(url: str):
    if url.startswith("sqlite"):
        # sqlite pools take no sizing arguments; the scheduler thread shares connections
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(
        url,
        pool_size=config.DB_POOL_SIZE,
        max_overflow=config.DB_MAX_OVERFLOW,
        pool_pre_ping=True,
    )


if not config.POSTGRES_URL:
    raise RuntimeError("POSTGRES_URL not set")

DATABASE_URL = normalize_url(config.POSTGRES_URL)
engine = make_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """FastAPI dependency yielding a session that is closed after the response."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
