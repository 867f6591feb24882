# coach_scraper/scraper/records.py
"""In-memory shapes passed between pipeline stages.

`ListingCandidate` lives for one run iteration only. `NormalizedRecord` is what
gets written to the `coaches` table together with its images and features.
"""
from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional


@dataclass
class IndexMetadata:
    """Fields recoverable from an index row. Every field may be missing."""
    raw_title: Optional[str] = None
    seller: Optional[str] = None
    converter: Optional[str] = None
    model: Optional[str] = None
    slide_count: Optional[int] = None
    state: Optional[str] = None
    price: Optional[float] = None


@dataclass
class ListingCandidate:
    url: str
    metadata: IndexMetadata = field(default_factory=IndexMetadata)


@dataclass
class ImageRef:
    url: str
    position: int

    @property
    def is_featured(self) -> bool:
        return self.position == 0


@dataclass
class NormalizedRecord:
    external_id: str
    title: str
    year: int
    make: str
    model: str
    price: float
    source_url: str
    description: Optional[str] = None
    mileage: Optional[int] = None
    length: Optional[str] = None
    slide_count: int = 0
    bed_type: Optional[str] = None
    exterior_color: Optional[str] = None
    interior_color: Optional[str] = None
    category: str = "Unclassified"
    seller: Optional[str] = None
    location: Optional[str] = None
    status: str = "available"
    is_featured: bool = False
    is_new_arrival: bool = True
    images: List[ImageRef] = field(default_factory=list)
    features: List[str] = field(default_factory=list)

    @property
    def featured_image(self) -> Optional[str]:
        return self.images[0].url if self.images else None

    def to_db_row(self) -> Dict[str, Any]:
        d = asdict(self)
        # images/features go to their own tables
        d.pop("images")
        d.pop("features")
        d["featured_image"] = self.featured_image
        return d
