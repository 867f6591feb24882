# coach_scraper/scraper/detail.py
"""Listing detail page -> NormalizedRecord.

Page extraction runs a chain of `DetailStrategy` objects, one per markup
convention the site has used. For each field the first strategy that returns a
value wins. The fetcher then merges those page values with the index metadata
(index first, page second, computed default last).
"""
from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, fields
from datetime import date
from typing import Iterable, List, Optional, Sequence
from urllib.parse import urlparse

from .. import config
from ..utils import get_logger
from .dedup import external_id_for
from .extract import (
    KNOWN_MAKES, YEAR_RE, classify_category, extract_bed_type, extract_exterior_color,
    extract_interior_color, extract_length, extract_mileage, extract_seller,
    extract_slide_count, extract_state, extract_year_make_model, model_from_body,
    parse_price, year_from_text,
)
from .fetch import PageFetcher
from .helpers import (
    IMAGE_EXT_RE, absolute_url, body_text, element_text, filename_title,
    has_copyright, has_url, make_soup,
)
from .records import ImageRef, ListingCandidate, NormalizedRecord

logger = get_logger("scraper")

MAX_IMAGES = 20
FEATURED_HINTS = ("main", "large", "hero")
DEFAULT_MAKE = "Prevost"
GENERIC_MODEL = "Coach"

_TITLE_TAGS = ["h1", "h2", "h3", "b", "strong", "title"]
_BRAND_RE = re.compile(r"\b(?:" + "|".join(re.escape(m) for m in KNOWN_MAKES) + r")\b", re.I)
_LABELLED_PRICE_RE = re.compile(r"price[^\d$\n]{0,20}\$?\s*(\d[\d,]*(?:\.\d{1,2})?)", re.I)
_DOLLAR_RE = re.compile(r"\$\s*(\d[\d,]*(?:\.\d{1,2})?)")


@dataclass
class PageFields:
    """Whatever one strategy could read off the page; ``None``/empty = not found."""
    title: Optional[str] = None
    year: Optional[int] = None
    model: Optional[str] = None
    price: Optional[float] = None
    description: Optional[str] = None
    mileage: Optional[int] = None
    length: Optional[str] = None
    slide_count: Optional[int] = None
    bed_type: Optional[str] = None
    exterior_color: Optional[str] = None
    interior_color: Optional[str] = None
    seller: Optional[str] = None
    location: Optional[str] = None
    images: List[str] = field(default_factory=list)
    features: List[str] = field(default_factory=list)

    def fill_from(self, other: "PageFields") -> None:
        """Copy over fields still missing here."""
        for f in fields(self):
            if _missing(getattr(self, f.name)):
                setattr(self, f.name, getattr(other, f.name))


def _missing(value) -> bool:
    return value is None or value == "" or value == []


def first_present(*values):
    for value in values:
        if not _missing(value):
            return value
    return None


def _img_src(img) -> Optional[str]:
    return img.get("src") or img.get("data-src")


def _price_or_none(text: Optional[str]) -> Optional[float]:
    value = parse_price(text)
    return value if value > 0 else None


def select_images(urls: Iterable[str]) -> List[ImageRef]:
    """Image files only, deduped, first 20 in page order.

    If a later URL path carries a "main"/"large"/"hero" hint, the first such URL
    moves to position 0 and becomes the featured image.
    """
    unique: List[str] = []
    for url in urls:
        if url and IMAGE_EXT_RE.search(url) and url not in unique:
            unique.append(url)
    unique = unique[:MAX_IMAGES]
    for i, url in enumerate(unique):
        path = urlparse(url).path.lower()
        if any(hint in path for hint in FEATURED_HINTS):
            if i > 0:
                unique.insert(0, unique.pop(i))
            break
    return [ImageRef(url=url, position=pos) for pos, url in enumerate(unique)]


class DetailStrategy(ABC):
    name = "base"

    @abstractmethod
    def extract(self, soup, page_url: str) -> PageFields:
        ...


class StructuredMarkupStrategy(DetailStrategy):
    """First-generation pages with classed containers and a specs table."""
    name = "structured"

    def extract(self, soup, page_url):
        page = PageFields()
        page.title = element_text(soup.select_one("h1.coach-title, div.coach-title h1")) or None
        price_el = soup.select_one("div.coach-price, span.price")
        page.price = _price_or_none(element_text(price_el)) if price_el else None
        page.description = element_text(soup.select_one("div.coach-description, div.description")) or None
        page.images = [
            absolute_url(src, page_url)
            for src in (_img_src(img) for img in soup.select("div.coach-images img, div.coach-gallery img"))
            if src
        ]
        features = []
        for li in soup.select("div.coach-features li, div.specs li, ul.features li"):
            text = element_text(li)
            if text and text not in features:
                features.append(text)
        page.features = features

        for row in soup.select("table.specs tr, div.coach-specs div.row"):
            cells = row.find_all(["th", "td", "div"], recursive=False)
            if len(cells) < 2:
                continue
            label, value = element_text(cells[0]).lower(), element_text(cells[-1])
            self._apply_spec(page, label, value)
        return page

    def _apply_spec(self, page: PageFields, label: str, value: str) -> None:
        if not value:
            return
        if "mileage" in label or "miles" in label:
            digits = re.sub(r"\D", "", value)
            page.mileage = int(digits) if digits else None
        elif "length" in label:
            page.length = value
        elif "slide" in label:
            page.slide_count = extract_slide_count(f"slides: {value}".lower()) \
                or extract_slide_count(f"{value} slide".lower())
        elif "bed" in label:
            page.bed_type = value
        elif "exterior" in label:
            page.exterior_color = value
        elif "interior" in label:
            page.interior_color = value


class HeuristicMarkupStrategy(DetailStrategy):
    """Free-form pages: headings, loose paragraphs and free-text details."""
    name = "heuristic"

    def extract(self, soup, page_url):
        page = PageFields()
        page.title = self._title(soup)
        page.description = self._description(soup)
        page.images = [absolute_url(src, page_url) for src in (_img_src(img) for img in soup.find_all("img")) if src]
        page.features = self._features(soup)

        text = body_text(soup)
        lowered = text.lower()
        page.price = self._price(text)
        page.year = year_from_text(text)
        page.model = model_from_body(lowered)
        page.mileage = extract_mileage(lowered)
        page.length = extract_length(lowered)
        page.slide_count = extract_slide_count(lowered)
        page.bed_type = extract_bed_type(lowered)
        page.exterior_color = extract_exterior_color(lowered)
        page.interior_color = extract_interior_color(lowered)
        page.seller = extract_seller(text)
        page.location = extract_state(text)
        return page

    @staticmethod
    def _title(soup) -> Optional[str]:
        best = None
        for el in soup.find_all(_TITLE_TAGS):
            text = element_text(el)
            if not (YEAR_RE.search(text) or _BRAND_RE.search(text)):
                continue
            if best is None or len(text) > len(best):
                best = text
        return best

    @staticmethod
    def _description(soup) -> Optional[str]:
        for el in soup.find_all(["p", "div"]):
            text = element_text(el)
            if len(text) > 100 and not has_copyright(text):
                return text
        return None

    @staticmethod
    def _features(soup) -> List[str]:
        features: List[str] = []
        for el in soup.find_all(["li", "td", "div"]):
            text = element_text(el)
            if not 10 <= len(text) <= 100:
                continue
            if has_copyright(text) or has_url(text) or text in features:
                continue
            features.append(text)
        return features

    @staticmethod
    def _price(text: str) -> Optional[float]:
        for pattern in (_LABELLED_PRICE_RE, _DOLLAR_RE):
            for m in pattern.finditer(text):
                value = _price_or_none(m.group(1))
                if value:
                    return value
        return None


DEFAULT_STRATEGIES: Sequence[DetailStrategy] = (StructuredMarkupStrategy(), HeuristicMarkupStrategy())


class ListingDetailFetcher:
    def __init__(
        self,
        fetcher: PageFetcher,
        strategies: Sequence[DetailStrategy] = DEFAULT_STRATEGIES,
        default_price: float = config.DEFAULT_PRICE,
    ):
        self.fetcher = fetcher
        self.strategies = strategies
        self.default_price = default_price

    def extract_page(self, html: str, page_url: str) -> PageFields:
        page = PageFields()
        for strategy in self.strategies:
            # each strategy gets its own soup; body_text() strips script tags in place
            page.fill_from(strategy.extract(make_soup(html), page_url))
        return page

    def fetch(self, candidate: ListingCandidate) -> NormalizedRecord:
        """Fetch and normalize one listing. Fetch/parse errors propagate."""
        html = self.fetcher.get(candidate.url)
        page = self.extract_page(html, candidate.url)
        logger.debug("Detail %s: %d image(s), %d feature(s)", candidate.url, len(page.images), len(page.features))
        return self.compose(candidate, page)

    def compose(self, candidate: ListingCandidate, page: PageFields) -> NormalizedRecord:
        meta = candidate.metadata
        title = first_present(meta.raw_title, page.title, filename_title(candidate.url))
        parsed = extract_year_make_model(title)
        make = first_present(meta.converter, parsed.make, DEFAULT_MAKE)
        images = select_images(page.images)
        return NormalizedRecord(
            external_id=external_id_for(candidate.url),
            title=title,
            year=first_present(parsed.year, page.year, date.today().year),
            make=make,
            model=first_present(meta.model, parsed.model, page.model, GENERIC_MODEL),
            price=first_present(meta.price, page.price, self.default_price),
            description=page.description,
            mileage=page.mileage,
            length=page.length,
            slide_count=first_present(meta.slide_count, page.slide_count, 0),
            bed_type=page.bed_type,
            exterior_color=page.exterior_color,
            interior_color=page.interior_color,
            category=classify_category(title, make).value,
            seller=first_present(meta.seller, page.seller),
            location=first_present(meta.state, page.location),
            source_url=candidate.url,
            images=images,
            features=page.features,
        )
