# coach_scraper/config.py
"""Runtime settings read from the environment (and `.env` when present)."""
import os
from dotenv import load_dotenv

load_dotenv()

# database
POSTGRES_URL = os.getenv("POSTGRES_URL")
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", 5))
DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", 10))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# marketplace
SITE_ROOT = os.getenv("SITE_ROOT", "https://www.prevost-stuff.com").rstrip("/")
LISTING_BASE = os.getenv("LISTING_BASE", f"{SITE_ROOT}/forsale/")
INDEX_URL = os.getenv("INDEX_URL", f"{LISTING_BASE}public_list_ads.php")
INDEX_MAX_PAGES = int(os.getenv("INDEX_MAX_PAGES", "1"))
# seconds to wait after every index page request
REQUEST_DELAY = float(os.getenv("REQUEST_DELAY", "1.0"))
# stored instead of a zero price when no price could be found
DEFAULT_PRICE = float(os.getenv("DEFAULT_PRICE", "500000"))

# transport: "http" (plain GET) or "browser" (playwright chromium)
FETCH_BACKEND = os.getenv("FETCH_BACKEND", "http").lower()
HEADLESS = os.getenv("HEADLESS", "1") == "1"

# scheduling
INITIAL_RUN_DELAY = float(os.getenv("INITIAL_RUN_DELAY", "5"))
SCRAPE_INTERVAL_HOURS = float(os.getenv("SCRAPE_INTERVAL_HOURS", "0"))
