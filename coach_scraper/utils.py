# coach_scraper/utils.py
"""Logging setup shared by the API, the scheduler and the scraper pipeline."""
import logging
from . import config


def get_logger(name=__name__):
    logging.basicConfig(
        format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        level=getattr(logging, config.LOG_LEVEL, logging.INFO)
    )
    return logging.getLogger(name)

logger = get_logger("coach-service")
