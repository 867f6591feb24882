# coach_scraper/scraper/errors.py


class ScraperError(Exception):
    """Base class for pipeline failures."""


class FetchError(ScraperError):
    """A page could not be retrieved (network error or non-2xx status)."""

    def __init__(self, url, reason):
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class IndexFetchError(ScraperError):
    """The listing index is unreachable, so the run has nothing to iterate."""
