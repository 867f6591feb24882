# coach_scraper/schemas.py
from pydantic import BaseModel, ConfigDict
from typing import List, Optional
from datetime import datetime

class CoachImageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    image_url: str
    is_featured: bool
    position: int

class CoachFeatureOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str

class CoachOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    external_id: str
    title: str
    year: int
    make: str
    model: str
    price: Optional[float] = None
    description: Optional[str] = None
    exterior_color: Optional[str] = None
    interior_color: Optional[str] = None
    mileage: Optional[int] = None
    length: Optional[str] = None
    slide_count: Optional[int] = None
    bed_type: Optional[str] = None
    category: Optional[str] = None
    featured_image: Optional[str] = None
    status: Optional[str] = None
    is_featured: bool = False
    is_new_arrival: bool = False
    seller: Optional[str] = None
    location: Optional[str] = None
    source_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class CoachDetailOut(CoachOut):
    images: List[CoachImageOut] = []
    features: List[CoachFeatureOut] = []

class CoachPage(BaseModel):
    total: int
    items: List[CoachOut]

class ScrapeStarted(BaseModel):
    message: str
