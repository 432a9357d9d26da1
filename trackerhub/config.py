"""Constants, thresholds, and API URLs."""

import os

# ── Paths ──────────────────────────────────────────────────────────────
DATA_DIR = os.path.expanduser("~/.trackerhub")
CACHE_DIR = os.path.join(DATA_DIR, "cache")

# ── Google Sheets API ─────────────────────────────────────────────────
SHEETS_API_BASE = "https://sheets.googleapis.com/v4/spreadsheets"
SHEETS_USER_AGENT = "TrackerHub/1.0 (music tracker parser)"
SHEETS_API_KEY = os.environ.get("GOOGLE_SHEETS_API_KEY")
SHEETS_RATE_LIMIT = 1.0   # seconds between requests
SHEETS_TIMEOUT = 30       # seconds per request
CACHE_MAX_AGE = 3600      # seconds before a cached sheet is refetched

# ── Header detection ───────────────────────────────────────────────────
HEADER_SCAN_ROWS = 5      # only the first N rows can hold the header
HEADER_MIN_MATCHES = 3    # distinct column names needed to accept a row

# ── Row classification ─────────────────────────────────────────────────
# Era cells this long are descriptions, not labels.
ERA_LABEL_MAX_LENGTH = 100
# File and leak dates at or before this year are kept as written.
DATE_YEAR_MIN = 1900

# ── Defaults ───────────────────────────────────────────────────────────
DEFAULT_ARTIST_NAME = "Unknown Artist"
UNKNOWN_ERA = "Unknown Era"

# ── Quality buckets ────────────────────────────────────────────────────
# Counter field names, in the order the statistics blob lists them.
QUALITY_BUCKETS = (
    "og",
    "full",
    "tagged",
    "partial",
    "snippet",
    "stem_bounce",
    "unavailable",
)
