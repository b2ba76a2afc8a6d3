"""
Configuration constants for Wikipedia Golf.

All paths, API settings, and daily challenge tuning parameters are defined here.
Paths can be overridden from the environment (a local .env file is honoured).
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# =============================================================================
# Path Configuration
# =============================================================================

# Project root is parent of wikigolf/
PROJECT_ROOT = Path(__file__).parent.parent

# Data directory (pre-generated daily challenge documents)
DATA_DIR = PROJECT_ROOT / "data"

# Pre-generated daily challenge written by scripts/generate_daily_challenge.py
DAILY_CHALLENGE_JSON_PATH = Path(
    os.environ.get("WIKIGOLF_DAILY_JSON", DATA_DIR / "daily-challenge.json")
)

# Local persistent storage (survives restarts, scoped to this user)
CACHE_DIR = Path(os.environ.get("WIKIGOLF_CACHE_DIR", PROJECT_ROOT / ".cache"))
STORAGE_PATH = CACHE_DIR / "storage.json"

# =============================================================================
# Locale Configuration
# =============================================================================

SUPPORTED_LOCALES = ("ja", "en")
DEFAULT_LOCALE = os.environ.get("WIKIGOLF_LOCALE", "ja")

# Main page titles; landing on these never counts as a stroke
MAIN_PAGE_TITLES = {
    "ja": "メインページ",
    "en": "Main Page",
}

# =============================================================================
# Daily Challenge Configuration
# =============================================================================

# Every player shares the calendar day of this timezone
DAILY_TIMEZONE = "Asia/Tokyo"

# seed = (year * Y + month * M + day * D) * day
DAILY_ID_MULTIPLIERS = {
    "year": 10,
    "month": 100,
    "day": 1000,
}

# goal search starts at seed + GOAL_OFFSET, start search at goal.id + START_OFFSET
GOAL_OFFSET = 100
START_OFFSET = 1000

# Candidate ids checked on each side of the seed
MAX_SEARCH_OFFSET = 5000

# Page ids per bulk metadata query (API limit is 50)
PAGEID_CHUNK_SIZE = 50

# Batches in flight at once, and pause between waves
MAX_CONCURRENT_BATCHES = 5
WAVE_DELAY_SECONDS = 0.5

# Only main-namespace articles are eligible
ARTICLE_NAMESPACE = 0

# =============================================================================
# Wikipedia API Configuration
# =============================================================================

# API endpoint template, formatted with the locale
WIKIPEDIA_API_URL = "https://{locale}.wikipedia.org/w/api.php"

# Metadata query timeout in seconds
WIKIPEDIA_TIMEOUT = 10

# Strict timeout for a single parse request, in seconds
ARTICLE_FETCH_TIMEOUT = 2

# Ids tried by parse fallback-by-increment
ARTICLE_FETCH_MAX_ATTEMPTS = 50

# Transport retries for metadata queries: 1s, 2s, 4s
QUERY_RETRY_ATTEMPTS = 3
QUERY_RETRY_BASE_DELAY = 1.0

# Parse requests are not retried; fallback-by-increment covers them
PARSE_RETRY_ATTEMPTS = 1

# User agent for requests (be a good citizen)
USER_AGENT = "WikipediaGolf/0.1 (https://github.com/shiryu2002/Wikipedia-Golf)"

# =============================================================================
# Logging Configuration
# =============================================================================

# Log level (DEBUG, INFO, WARNING, ERROR)
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
