# coach_scraper/main.py
from contextlib import asynccontextmanager
from fastapi import FastAPI
from .db import Base, engine
from . import models  # noqa: F401 ensure models are imported so tables are known
from .api.routes import router as api_router
from .scheduler import create_scheduler
from .scraper.runner import ScrapeRunner
from .utils import logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Ensure database tables are created on startup
    Base.metadata.create_all(bind=engine)
    # runner and scheduler live exactly as long as the app
    app.state.runner = ScrapeRunner()
    app.state.scheduler = create_scheduler(app.state.runner)
    app.state.scheduler.start()
    logger.info("Scheduler started")
    try:
        yield
    finally:
        app.state.scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")


# create FastAPI instance
app = FastAPI(title="Luxury Coach Listings", lifespan=lifespan)
app.include_router(api_router)
