# coach_scraper/scraper/fetch.py
"""Page transports.

Both fetchers expose ``get(url) -> str`` and are used as context managers so a
run opens one client (or one browser) and closes it when the run ends.
Failures surface as :class:`FetchError`; nothing here retries.
"""
from __future__ import annotations

from abc import ABC, abstractmethod

import httpx
from playwright.sync_api import sync_playwright, Error as PWError

from .. import config
from ..utils import get_logger
from .errors import FetchError

logger = get_logger("scraper")


class PageFetcher(ABC):
    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    @abstractmethod
    def get(self, url: str) -> str:
        """Return the HTML at ``url``; raise FetchError when it cannot be had."""

    def close(self) -> None:
        pass


class HttpFetcher(PageFetcher):
    """Plain GET with httpx defaults (no custom headers, default timeout)."""

    def __init__(self, client: httpx.Client | None = None):
        self.client = client or httpx.Client(follow_redirects=True)

    def get(self, url: str) -> str:
        try:
            resp = self.client.get(url)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise FetchError(url, e) from e
        return resp.text

    def close(self) -> None:
        self.client.close()


class BrowserFetcher(PageFetcher):
    """Headless Chromium via Playwright, for markup that needs rendering."""

    def __init__(self, headless: bool = config.HEADLESS):
        self.headless = headless
        self._pw = None
        self._browser = None
        self._page = None

    def __enter__(self):
        self._pw = sync_playwright().start()
        self._browser = self._pw.chromium.launch(headless=self.headless)
        self._page = self._browser.new_context().new_page()
        return self

    def get(self, url: str) -> str:
        if self._page is None:
            raise RuntimeError("BrowserFetcher used outside of a 'with' block")
        try:
            resp = self._page.goto(url, timeout=60000)
            self._page.wait_for_load_state("domcontentloaded")
        except PWError as e:
            raise FetchError(url, e) from e
        if resp is not None and not resp.ok:
            raise FetchError(url, f"HTTP {resp.status}")
        return self._page.content()

    def close(self) -> None:
        if self._browser is not None:
            self._browser.close()
        if self._pw is not None:
            self._pw.stop()
        self._page = self._browser = self._pw = None


def make_fetcher(backend: str | None = None) -> PageFetcher:
    backend = (backend or config.FETCH_BACKEND).lower()
    if backend == "browser":
        return BrowserFetcher()
    if backend != "http":
        logger.warning("Unknown FETCH_BACKEND %r, using plain http", backend)
    return HttpFetcher()
