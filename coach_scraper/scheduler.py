# coach_scraper/scheduler.py
"""Background scheduling of scraper runs.

The scheduler and the runner are created by the app on startup and shut down
with it; nothing is started at import time.
"""
from datetime import datetime, timedelta
from apscheduler.schedulers.background import BackgroundScheduler
from . import config
from .scraper.runner import ScrapeRunner
from .utils import logger


def _run_job(runner: ScrapeRunner):
    try:
        runner.run()
    except Exception as e:
        logger.exception("Scraper failed: %s", e)


def create_scheduler(runner: ScrapeRunner, initial_delay: float = config.INITIAL_RUN_DELAY,
                     interval_hours: float = config.SCRAPE_INTERVAL_HOURS) -> BackgroundScheduler:
    scheduler = BackgroundScheduler()
    # one run shortly after start-up
    scheduler.add_job(
        _run_job, "date", args=[runner], id="initial-scrape",
        run_date=datetime.now() + timedelta(seconds=initial_delay),
    )
    if interval_hours > 0:
        scheduler.add_job(_run_job, "interval", args=[runner], id="periodic-scrape", hours=interval_hours)
    return scheduler


def trigger_run(scheduler, runner: ScrapeRunner):
    """Queue a run right away and return without waiting for it."""
    return scheduler.add_job(_run_job, "date", args=[runner], run_date=datetime.now())
