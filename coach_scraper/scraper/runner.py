# coach_scraper/scraper/runner.py
"""Run orchestration: index -> dedup gate -> detail fetch -> persist.

One `ScrapeRunner` lives for the whole process (created with the app) and
carries the Idle/Running state. Candidates are processed one at a time, in
index order; a failing listing is logged and the run moves on.
"""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from sqlalchemy.orm import Session

from .. import config
from ..db import SessionLocal
from ..services import persist_record
from ..utils import get_logger
from .dedup import DedupGate, external_id_for
from .detail import ListingDetailFetcher
from .errors import IndexFetchError
from .fetch import PageFetcher, make_fetcher
from .index import ListingIndexFetcher
from .records import ListingCandidate

logger = get_logger("scraper")


class RunState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


@dataclass
class RunSummary:
    discovered: int = 0
    created: int = 0
    skipped: int = 0
    failed: int = 0


class ScrapeRunner:
    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        fetcher_factory: Callable[[], PageFetcher] = make_fetcher,
        index_url: str = config.INDEX_URL,
        max_pages: int = config.INDEX_MAX_PAGES,
        delay: float = config.REQUEST_DELAY,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.session_factory = session_factory
        self.fetcher_factory = fetcher_factory
        self.index_url = index_url
        self.max_pages = max_pages
        self.delay = delay
        self.sleep = sleep
        self.last_summary: Optional[RunSummary] = None
        # runs may overlap (scheduler threads), so count them
        self._active = 0
        self._lock = threading.Lock()

    @property
    def state(self) -> RunState:
        return RunState.RUNNING if self._active else RunState.IDLE

    @property
    def is_running(self) -> bool:
        return self.state is RunState.RUNNING

    def run(self) -> RunSummary:
        summary = RunSummary()
        logger.info("Starting scraper run")
        db = self.session_factory()
        with self._lock:
            if self._active:
                # not guarded: overlapping runs may repeat work
                logger.warning("A scraper run is already in progress; starting another")
            self._active += 1
        try:
            with self.fetcher_factory() as fetcher:
                index = ListingIndexFetcher(
                    fetcher, index_url=self.index_url, max_pages=self.max_pages,
                    delay=self.delay, sleep=self.sleep,
                )
                try:
                    candidates = index.fetch()
                except IndexFetchError as e:
                    logger.error("Scraper run aborted: %s", e)
                    raise
                summary.discovered = len(candidates)
                logger.info("Found %d coach listings", len(candidates))

                gate = DedupGate(db)
                detail = ListingDetailFetcher(fetcher)
                for candidate in candidates:
                    try:
                        if self.process(candidate, gate, detail, db):
                            summary.created += 1
                        else:
                            summary.skipped += 1
                    except Exception as e:
                        summary.failed += 1
                        db.rollback()
                        logger.exception("Error processing listing %s: %s", candidate.url, e)
        finally:
            db.close()
            with self._lock:
                self._active -= 1
            self.last_summary = summary
        logger.info(
            "Completed scraper run: %d found, %d created, %d skipped, %d failed",
            summary.discovered, summary.created, summary.skipped, summary.failed
        )
        return summary

    def process(self, candidate: ListingCandidate, gate: DedupGate, detail: ListingDetailFetcher, db: Session) -> bool:
        """Returns True when a new coach was stored, False when skipped."""
        external_id = external_id_for(candidate.url)
        # before the detail fetch, so known listings cost no request
        if gate.exists(external_id):
            logger.info("Coach with source ID %s already exists, skipping", external_id)
            return False
        logger.info("Processing coach listing: %s", candidate.url)
        record = detail.fetch(candidate)
        persist_record(db, record)
        return True
