# coach_scraper/scraper/helpers.py
"""Small HTML/text helpers shared by the index and detail strategies."""
from __future__ import annotations

import re
from typing import Optional
from urllib.parse import urljoin, urlparse, unquote

from bs4 import BeautifulSoup

# try to detect available parser; prefer lxml if installed
try:
    import lxml  # type: ignore # noqa: F401
    _bs_parser = "lxml"
except Exception:
    _bs_parser = "html.parser"

_WS_RE = re.compile(r"\s+")
_COPYRIGHT_RE = re.compile(r"©|&copy;|\bcopyright\b", re.I)
_URL_RE = re.compile(r"https?://|www\.", re.I)
IMAGE_EXT_RE = re.compile(r"\.(?:jpe?g|png|gif|webp)(?:$|[?#])", re.I)


def make_soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", _bs_parser)


def clean_text(text: Optional[str]) -> str:
    """Collapse runs of whitespace and strip."""
    return _WS_RE.sub(" ", text or "").strip()


def element_text(el) -> str:
    return clean_text(el.get_text(" ", strip=True)) if el is not None else ""


def body_text(soup: BeautifulSoup) -> str:
    """Visible page text, one text node per line."""
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    root = soup.body or soup
    lines = (clean_text(s) for s in root.get_text("\n").splitlines())
    return "\n".join(line for line in lines if line)


def has_copyright(text: str) -> bool:
    return bool(_COPYRIGHT_RE.search(text or ""))


def has_url(text: str) -> bool:
    return bool(_URL_RE.search(text or ""))


def absolute_url(href: str, base: str) -> str:
    return urljoin(base, href.strip())


def filename_title(url: str) -> str:
    """Title from the file name: ``2004-prevost-h3-45.html`` -> ``2004 Prevost H3 45``."""
    name = unquote(urlparse(url).path.rstrip("/").rsplit("/", 1)[-1])
    name = name.rsplit(".", 1)[0] if "." in name else name
    words = re.split(r"[-_+\s]+", name)
    return " ".join(w.capitalize() for w in words if w) or "Untitled Coach"
