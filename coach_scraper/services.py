# coach_scraper/services.py
from sqlalchemy.orm import Session
from . import crud
from .models import Coach
from .scraper.records import NormalizedRecord
from .utils import get_logger

logger = get_logger("scraper")

def persist_record(db: Session, record: NormalizedRecord) -> Coach:
    """Write one listing: coach row, then its images and features.

    Images/features are cleared for the coach id before being inserted, so the
    stored set always mirrors the page that was just scraped. Not atomic: an
    error part way leaves earlier writes in place.
    """
    if not record.external_id:
        raise ValueError("external_id missing")
    coach = crud.insert_record(db, record.to_db_row())
    crud.delete_images_for(db, coach.id)
    crud.delete_features_for(db, coach.id)
    for image in record.images:
        crud.insert_image(db, coach.id, image.url, image.is_featured, image.position)
    for name in record.features:
        crud.insert_feature(db, coach.id, name)
    logger.info(
        "Stored coach %s (%s): %d image(s), %d feature(s)",
        record.external_id, record.title, len(record.images), len(record.features)
    )
    return coach
