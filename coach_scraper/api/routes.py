# coach_scraper/api/routes.py
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session
from typing import List
from .. import crud, schemas
from ..db import get_db
from ..scheduler import trigger_run
from ..utils import logger

router = APIRouter()

@router.get("/health")
def health():
    return {"status": "ok"}

@router.get("/coaches", response_model=schemas.CoachPage)
def coaches(
    search: str | None = Query(None),
    make: str | None = Query(None),
    model: str | None = Query(None),
    year: int | None = Query(None),
    min_price: float | None = Query(None),
    max_price: float | None = Query(None),
    status: str | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(6, ge=1, le=100),
    sort_by: str = Query("newest"),
    db: Session = Depends(get_db)
):
    filters = {
        "search": search,
        "make": make,
        "model": model,
        "year": year,
        "min_price": min_price,
        "max_price": max_price,
        "status": status,
    }
    return crud.list_coaches(db, skip=(page - 1) * limit, limit=limit, filters=filters, sort_by=sort_by)


@router.get("/coaches/{coach_id}", response_model=schemas.CoachDetailOut)
def get_coach(coach_id: int, db: Session = Depends(get_db)):
    obj = crud.get_coach(db, coach_id)
    if not obj:
        raise HTTPException(status_code=404, detail="Coach not found")
    return obj


@router.get("/makes", response_model=List[str])
def makes(db: Session = Depends(get_db)):
    return crud.distinct_makes(db)


@router.get("/models", response_model=List[str])
def models(db: Session = Depends(get_db)):
    return crud.distinct_models(db)


@router.get("/years", response_model=List[int])
def years(db: Session = Depends(get_db)):
    return crud.distinct_years(db)


@router.post("/scrape", response_model=schemas.ScrapeStarted)
def trigger_scrape(request: Request):
    # fire-and-forget: the response only says a run was queued
    trigger_run(request.app.state.scheduler, request.app.state.runner)
    logger.info("Scraper run requested")
    return {"message": "Scraper started"}
