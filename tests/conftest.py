# tests/conftest.py
import os

# must be set before coach_scraper.db is imported
os.environ.setdefault("POSTGRES_URL", "sqlite://")
os.environ.setdefault("REQUEST_DELAY", "0")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from coach_scraper import models  # noqa: F401
from coach_scraper.db import Base
from coach_scraper.scraper.errors import FetchError
from coach_scraper.scraper.fetch import PageFetcher


class FakeFetcher(PageFetcher):
    """Serves canned HTML by URL and records every request."""

    def __init__(self, pages):
        self.pages = dict(pages)
        self.requested = []
        self.closed = False

    def get(self, url):
        self.requested.append(url)
        page = self.pages.get(url)
        if page is None:
            raise FetchError(url, "HTTP 404")
        if isinstance(page, Exception):
            raise page
        return page

    def close(self):
        self.closed = True


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def fake_fetcher():
    return FakeFetcher
