# coach_scraper/models.py
"""SQLAlchemy ORM models for persisted entities.

`Coach` is one normalized marketplace listing; `CoachImage` and `CoachFeature`
belong to exactly one coach and are removed together with it.
"""
from sqlalchemy import Column, Integer, Text, Numeric, Boolean, ForeignKey, TIMESTAMP, func, Index
from sqlalchemy.orm import relationship
from .db import Base

class Coach(Base):
    __tablename__ = "coaches"
    id = Column(Integer, primary_key=True, index=True)
    external_id = Column(Text, nullable=False, unique=True, index=True)
    title = Column(Text, nullable=False)
    year = Column(Integer, nullable=False)
    make = Column(Text, nullable=False)
    model = Column(Text, nullable=False)
    price = Column(Numeric(12, 2))
    description = Column(Text)
    exterior_color = Column(Text)
    interior_color = Column(Text)
    mileage = Column(Integer)
    length = Column(Text)
    slide_count = Column(Integer, default=0)
    bed_type = Column(Text)
    category = Column(Text)
    featured_image = Column(Text)
    status = Column(Text, default="available")
    is_featured = Column(Boolean, default=False)
    is_new_arrival = Column(Boolean, default=True)
    seller = Column(Text)
    location = Column(Text)
    source_url = Column(Text)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    images = relationship(
        "CoachImage", back_populates="coach", cascade="all, delete-orphan",
        order_by="CoachImage.position"
    )
    features = relationship("CoachFeature", back_populates="coach", cascade="all, delete-orphan")


class CoachImage(Base):
    __tablename__ = "coach_images"
    id = Column(Integer, primary_key=True)
    coach_id = Column(Integer, ForeignKey("coaches.id", ondelete="CASCADE"), nullable=False, index=True)
    image_url = Column(Text, nullable=False)
    is_featured = Column(Boolean, default=False)
    position = Column(Integer, default=0)

    coach = relationship("Coach", back_populates="images")


class CoachFeature(Base):
    __tablename__ = "coach_features"
    id = Column(Integer, primary_key=True)
    coach_id = Column(Integer, ForeignKey("coaches.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(Text, nullable=False)

    coach = relationship("Coach", back_populates="features")

Index("idx_coaches_price", Coach.price)
Index("idx_coaches_year", Coach.year)
Index("idx_coaches_make", Coach.make)
