# coach_scraper/crud.py
"""CRUD operations for `Coach` entities and their images/features.

The write helpers are the persistence facade used by the scraper; every call
commits on its own, so a listing that fails halfway keeps what was already
written. The read helpers back the browsing API.
"""
from sqlalchemy import select, and_, desc, asc
from sqlalchemy.orm import Session, selectinload
from .models import Coach, CoachImage, CoachFeature
from typing import Dict, Any, List, Optional

# ---- scraper facade ----

def exists_by_external_id(db: Session, external_id: str) -> bool:
    stmt = select(Coach.id).where(Coach.external_id == external_id).limit(1)
    return db.execute(stmt).first() is not None

def insert_record(db: Session, data: Dict[str, Any]) -> Coach:
    obj = Coach(**data)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj

def insert_image(db: Session, coach_id: int, url: str, featured: bool, position: int) -> CoachImage:
    obj = CoachImage(coach_id=coach_id, image_url=url, is_featured=featured, position=position)
    db.add(obj)
    db.commit()
    return obj

def insert_feature(db: Session, coach_id: int, name: str) -> CoachFeature:
    obj = CoachFeature(coach_id=coach_id, name=name)
    db.add(obj)
    db.commit()
    return obj

def delete_images_for(db: Session, coach_id: int) -> int:
    count = db.query(CoachImage).filter(CoachImage.coach_id == coach_id).delete(synchronize_session=False)
    db.commit()
    return count

def delete_features_for(db: Session, coach_id: int) -> int:
    count = db.query(CoachFeature).filter(CoachFeature.coach_id == coach_id).delete(synchronize_session=False)
    db.commit()
    return count

# ---- read API ----

SORT_ORDERS = {
    "newest": (desc(Coach.year), desc(Coach.id)),
    "price_high_low": (desc(Coach.price), desc(Coach.id)),
    "price_low_high": (asc(Coach.price), desc(Coach.id)),
}

def get_coach(db: Session, coach_id: int) -> Optional[Coach]:
    stmt = (
        select(Coach)
        .options(selectinload(Coach.images), selectinload(Coach.features))
        .where(Coach.id == coach_id)
    )
    return db.execute(stmt).scalars().first()

def get_coach_by_external_id(db: Session, external_id: str) -> Optional[Coach]:
    return db.query(Coach).filter(Coach.external_id == external_id).first()

def list_coaches(db: Session, skip: int = 0, limit: int = 6, filters: Dict = None, sort_by: str = "newest"):
    q = db.query(Coach)
    if filters:
        conds = []
        if filters.get("search"):
            conds.append(Coach.title.ilike(f"%{filters['search']}%"))
        if filters.get("make"):
            conds.append(Coach.make == filters["make"])
        if filters.get("model"):
            conds.append(Coach.model == filters["model"])
        if filters.get("year") is not None:
            conds.append(Coach.year == filters["year"])
        if filters.get("min_price") is not None:
            conds.append(Coach.price >= filters["min_price"])
        if filters.get("max_price") is not None:
            conds.append(Coach.price <= filters["max_price"])
        if filters.get("status"):
            conds.append(Coach.status == filters["status"])
        if conds:
            q = q.filter(and_(*conds))
    total = q.count()
    order = SORT_ORDERS.get(sort_by, (desc(Coach.id),))
    items = q.order_by(*order).offset(skip).limit(limit).all()
    return {"total": total, "items": items}

def distinct_makes(db: Session) -> List[str]:
    return list(db.execute(select(Coach.make).group_by(Coach.make).order_by(Coach.make)).scalars())

def distinct_models(db: Session) -> List[str]:
    return list(db.execute(select(Coach.model).group_by(Coach.model).order_by(Coach.model)).scalars())

def distinct_years(db: Session) -> List[int]:
    return list(db.execute(select(Coach.year).group_by(Coach.year).order_by(desc(Coach.year))).scalars())
