# coach_scraper/scraper/dedup.py
"""Deduplication gate: stable listing ids and the "already stored?" check."""
from __future__ import annotations

import hashlib
from urllib.parse import urlparse, parse_qs

from sqlalchemy.orm import Session

from .. import crud


def external_id_for(url: str) -> str:
    """Derive the dedup key for a listing URL.

    ``?id=42`` wins, then the last path segment (``/coach/abc`` -> ``abc``,
    ``/forsale/2004-h345.html`` -> ``2004-h345.html``). URLs with neither get
    a hash of the whole URL so the key is still the same on the next run.
    """
    parts = urlparse(url.strip())
    ids = [v.strip() for v in parse_qs(parts.query).get("id", []) if v.strip()]
    if ids:
        return ids[0]
    segment = parts.path.rstrip("/").rsplit("/", 1)[-1]
    if segment:
        return segment
    return "url-" + hashlib.sha1(url.strip().encode("utf-8")).hexdigest()[:16]


class DedupGate:
    def __init__(self, db: Session):
        self.db = db

    def exists(self, external_id: str) -> bool:
        return crud.exists_by_external_id(self.db, external_id)
