"""Run one scrape from the command line, outside the API process.

    python run_and_save.py [--pages N] [--backend http|browser] [--delay SECONDS]
"""
import argparse
from dotenv import load_dotenv

# .env first, so the config module sees it on import
load_dotenv()


def main(argv=None):
    from coach_scraper import config

    parser = argparse.ArgumentParser(description="Scrape coach listings into the database once.")
    parser.add_argument("--pages", type=int, default=config.INDEX_MAX_PAGES, help="index pages to crawl")
    parser.add_argument("--backend", choices=("http", "browser"), default=config.FETCH_BACKEND)
    parser.add_argument("--delay", type=float, default=config.REQUEST_DELAY, help="seconds between index pages")
    args = parser.parse_args(argv)

    from coach_scraper import models  # noqa: F401
    from coach_scraper.db import Base, engine
    from coach_scraper.scraper.fetch import make_fetcher
    from coach_scraper.scraper.runner import ScrapeRunner

    Base.metadata.create_all(bind=engine)
    runner = ScrapeRunner(
        fetcher_factory=lambda: make_fetcher(args.backend),
        max_pages=args.pages,
        delay=args.delay,
    )
    summary = runner.run()
    print(
        f"found={summary.discovered} created={summary.created} "
        f"skipped={summary.skipped} failed={summary.failed}"
    )
    return 1 if summary.failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
