# coach_scraper/scraper/index.py
"""Listing index: turn the marketplace's index page(s) into candidates.

The site has changed its index markup over time, so every markup convention is
an `IndexStrategy`. For each page the strategies are tried in priority order
and the first one that finds any listing links wins.
"""
from __future__ import annotations

import re
import time
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Sequence, Tuple
from urllib.parse import urlparse, urlencode, parse_qsl, urlunparse

from bs4 import NavigableString, Tag

from .. import config
from ..utils import get_logger
from .errors import FetchError, IndexFetchError
from .extract import YEAR_RE, KNOWN_MAKES, parse_price, normalize_state
from .fetch import PageFetcher
from .helpers import make_soup, element_text, absolute_url, clean_text
from .records import IndexMetadata, ListingCandidate

logger = get_logger("scraper")

# not coaches
EXCLUDED_KEYWORDS = ("hauler", "stacker", "trailer")

ROW_LABELS = ("Seller", "Converter", "Model", "Slides", "State", "Price")
_NEXT_LABEL = "|".join(ROW_LABELS)
_LABEL_RES = {
    label: re.compile(rf"\b{label}\s*:\s*(.*?)\s*(?=\b(?:{_NEXT_LABEL})\s*:|$)", re.I)
    for label in ROW_LABELS
}
_PRICE_VALUE_RE = re.compile(r"\$?\s*(\d[\d,]*(?:\.\d{1,2})?)")
_SLIDES_VALUE_RE = re.compile(r"\b([0-4])\b")
_MAKE_RE = re.compile(r"\b(?:" + "|".join(re.escape(m) for m in KNOWN_MAKES) + r")\b", re.I)


def _label_value(text: str, label: str) -> Optional[str]:
    m = _LABEL_RES[label].search(text)
    if not m:
        return None
    return m.group(1).strip(" ,;|-") or None


def parse_row_metadata(row_text: str, anchor_text: str = "") -> IndexMetadata:
    """Read the ``Label: value`` pairs of one index row.

    The anchor text becomes the title only if it looks like one (mentions a
    year or a known make); link captions like "Details" are ignored.
    """
    meta = IndexMetadata(
        seller=_label_value(row_text, "Seller"),
        converter=_label_value(row_text, "Converter"),
        model=_label_value(row_text, "Model"),
    )
    if anchor_text and (YEAR_RE.search(anchor_text) or _MAKE_RE.search(anchor_text)):
        meta.raw_title = anchor_text

    slides = _label_value(row_text, "Slides")
    if slides:
        m = _SLIDES_VALUE_RE.search(slides)
        meta.slide_count = int(m.group(1)) if m else None

    state = _label_value(row_text, "State")
    if state:
        meta.state = normalize_state(state.split()[0]) or normalize_state(state)

    price = _label_value(row_text, "Price")
    if price:
        m = _PRICE_VALUE_RE.search(price)
        value = parse_price(m.group(1)) if m else 0.0
        meta.price = value or None
    return meta


def is_excluded(row_text: str) -> bool:
    lowered = row_text.lower()
    return any(word in lowered for word in EXCLUDED_KEYWORDS)


def _segment_text(anchor, container, listing_ids) -> str:
    """Text from ``anchor`` up to the next listing anchor inside ``container``."""
    parts = [element_text(anchor)]
    for el in anchor.next_elements:
        if not any(p is container for p in el.parents):
            break
        if id(el) in listing_ids:
            break
        # plain text only: comments and script/style strings are subclasses
        if type(el) is NavigableString:
            if not any(p is anchor for p in el.parents):
                parts.append(str(el))
    return clean_text(" ".join(parts))


def listing_row_text(anchor, listing_ids) -> str:
    """The index row an anchor belongs to.

    Table rows and list items are rows of their own. A bare container holding
    several listing links is split so each link only sees its own segment.
    """
    row = anchor.find_parent("tr") or anchor.find_parent("li")
    if row is not None:
        return element_text(row)
    container = anchor.parent
    siblings = [a for a in container.find_all("a") if id(a) in listing_ids]
    if len(siblings) > 1:
        return _segment_text(anchor, container, listing_ids)
    return element_text(container)


class IndexStrategy(ABC):
    name = "base"

    @abstractmethod
    def links(self, soup, page_url: str) -> List[Tuple[Tag, str]]:
        """Listing anchors on the page with their absolute URLs, in page order."""

    def candidates(self, soup, page_url: str) -> List[ListingCandidate]:
        links = self.links(soup, page_url)
        listing_ids = {id(a) for a, _ in links}
        found = []
        for anchor, url in links:
            text = listing_row_text(anchor, listing_ids)
            if is_excluded(text):
                logger.debug("Excluded non-coach row: %s", url)
                continue
            found.append(ListingCandidate(url=url, metadata=parse_row_metadata(text, element_text(anchor))))
        return found


class SuffixLinkStrategy(IndexStrategy):
    """Current markup: table rows linking to ``*.html`` detail pages."""
    name = "suffix-link"

    def __init__(self, listing_base: str = config.LISTING_BASE, suffix: str = ".html"):
        self.listing_base = listing_base
        self.suffix = suffix

    def links(self, soup, page_url):
        found = []
        for a in soup.find_all("a", href=True):
            href = a["href"].strip()
            if not urlparse(href).path.lower().endswith(self.suffix):
                continue
            # "/x.html" resolves against the site root, "x.html" against the listing sub-path
            found.append((a, absolute_url(href, self.listing_base)))
        return found


class ClassedLinkStrategy(IndexStrategy):
    """First-generation markup: classed anchors pointing at ``/coach/<id>``."""
    name = "classed-link"
    selector = "a.coach-listing-link, a.coach-item, div.coach-listing a"

    def __init__(self, site_root: str = config.SITE_ROOT):
        self.site_root = site_root.rstrip("/") + "/"

    def links(self, soup, page_url):
        found = []
        for a in soup.select(self.selector):
            href = (a.get("href") or "").strip()
            if "/coach/" in href:
                found.append((a, absolute_url(href, self.site_root)))
        return found


DEFAULT_STRATEGIES: Sequence[IndexStrategy] = (SuffixLinkStrategy(), ClassedLinkStrategy())


class ListingIndexFetcher:
    """Fetches the index page(s) and returns candidates in index order.

    With ``max_pages > 1`` page N is requested as ``?page=N`` and the crawl
    stops at the first page that yields no candidates.
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        index_url: str = config.INDEX_URL,
        max_pages: int = config.INDEX_MAX_PAGES,
        delay: float = config.REQUEST_DELAY,
        strategies: Sequence[IndexStrategy] = DEFAULT_STRATEGIES,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.fetcher = fetcher
        self.index_url = index_url
        self.max_pages = max(1, max_pages)
        self.delay = delay
        self.strategies = strategies
        self.sleep = sleep

    def page_url(self, page: int) -> str:
        if page == 1:
            return self.index_url
        parts = urlparse(self.index_url)
        query = dict(parse_qsl(parts.query))
        query["page"] = str(page)
        return urlunparse(parts._replace(query=urlencode(query)))

    def parse(self, html: str, page_url: str) -> List[ListingCandidate]:
        soup = make_soup(html)
        for strategy in self.strategies:
            found = strategy.candidates(soup, page_url)
            if found:
                logger.debug("Index strategy %s matched %d link(s) on %s", strategy.name, len(found), page_url)
                return found
        return []

    def fetch(self) -> List[ListingCandidate]:
        seen = set()
        candidates: List[ListingCandidate] = []
        for page in range(1, self.max_pages + 1):
            url = self.page_url(page)
            try:
                html = self.fetcher.get(url)
            except FetchError as e:
                if page == 1:
                    raise IndexFetchError(f"Index page unavailable: {e}") from e
                logger.warning("Index page %d failed, stopping pagination: %s", page, e)
                break
            # politeness delay, once per index page
            self.sleep(self.delay)

            found = self.parse(html, url)
            if not found:
                logger.info("Index page %d has no listings, stopping", page)
                break
            for candidate in found:
                if candidate.url not in seen:
                    seen.add(candidate.url)
                    candidates.append(candidate)
        return candidates
