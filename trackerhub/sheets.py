"""Google Sheets API v4 client: the row source for the tracker parser.

Fetches spreadsheet metadata and tab values with the public API key flow.
Requests go through a caller-supplied RateLimiter and responses can be
kept in a Cache so re-parsing a tracker does not refetch it.
"""

import re
import unicodedata
from urllib.parse import quote

from trackerhub.config import (
    DEFAULT_ARTIST_NAME,
    SHEETS_API_BASE,
    SHEETS_USER_AGENT,
)
from trackerhub.http_utils import api_get_with_retry, create_session

_DOC_PATH_ID = re.compile(r"/d/([a-zA-Z0-9_-]+)")
_QUERY_ID = re.compile(r"[?&]id=([a-zA-Z0-9_-]+)")
_BARE_ID = re.compile(r"^[a-zA-Z0-9_-]{10,}$")
_GID = re.compile(r"[?&#]gid=([0-9]+)")


def spreadsheet_id_from_url(url_or_id):
    """Extract the spreadsheet id from a sharing URL, or accept a bare id.

    Raises:
        ValueError: if no id can be found
    """
    s = (url_or_id or "").strip()
    m = _DOC_PATH_ID.search(s) or _QUERY_ID.search(s)
    if m:
        return m.group(1)
    if _BARE_ID.match(s):
        return s
    raise ValueError(f"Invalid Google Sheets URL format: {url_or_id!r}")


def gid_from_url(url):
    """Tab id from a ``gid=`` parameter or fragment, or None."""
    m = _GID.search(url or "")
    return int(m.group(1)) if m else None


def artist_name_from_title(title):
    """Derive the artist name from a spreadsheet title like "Artist Tracker"."""
    name = re.sub(r"tracker", "", title or "", count=1, flags=re.IGNORECASE)
    name = re.sub(r"\s+", " ", name).strip(" -|")
    return name or DEFAULT_ARTIST_NAME


def _clean_rows(values):
    return [
        [unicodedata.normalize("NFC", "" if c is None else str(c)) for c in row]
        for row in values
    ]


class SheetsClient:
    """Read-only Sheets API client.

    Args:
        api_key: Google API key with Sheets API access
        session: Optional requests.Session (one is created if omitted)
        rate_limiter: Optional RateLimiter shared by all requests
        cache: Optional Cache for metadata and row values
    """

    def __init__(self, api_key, session=None, rate_limiter=None, cache=None):
        if not api_key:
            raise ValueError("Google Sheets API key is required "
                             "(set GOOGLE_SHEETS_API_KEY)")
        self.api_key = api_key
        self.session = session or create_session(SHEETS_USER_AGENT)
        self.rate_limiter = rate_limiter
        self.cache = cache

    def _get(self, url, params):
        params = dict(params, key=self.api_key)
        return api_get_with_retry(self.session, url, params=params,
                                  rate_limiter=self.rate_limiter)

    def _cached(self, key, fetch):
        if self.cache is not None:
            data = self.cache.get(key)
            if data is not None:
                return data
        data = fetch()
        if self.cache is not None:
            self.cache.set(key, data)
        return data

    def fetch_metadata(self, source_id):
        """Spreadsheet title and tab properties."""
        url = f"{SHEETS_API_BASE}/{source_id}"
        params = {"fields": "properties.title,sheets.properties(title,sheetId)"}
        return self._cached(f"meta-{source_id}", lambda: self._get(url, params))

    def fetch_title(self, source_id):
        return self.fetch_metadata(source_id).get("properties", {}).get("title", "")

    def fetch_available_sheets(self, source_id):
        """List the tabs as ``{"title", "tab_id"}`` dicts in sheet order."""
        meta = self.fetch_metadata(source_id)
        return [
            {"title": s["properties"]["title"], "tab_id": s["properties"].get("sheetId")}
            for s in meta.get("sheets", [])
        ]

    def sheet_name_for_gid(self, source_id, gid):
        for sheet in self.fetch_available_sheets(source_id):
            if sheet["tab_id"] == gid:
                return sheet["title"]
        return None

    def fetch_rows(self, source_id, sheet_name=None):
        """Formatted cell values of one tab (the first tab when unnamed).

        Cells are NFC-normalized strings; missing cells come back as "".
        """
        if sheet_name is None:
            sheets = self.fetch_available_sheets(source_id)
            if not sheets:
                return []
            sheet_name = sheets[0]["title"]
        url = f"{SHEETS_API_BASE}/{source_id}/values/{quote(sheet_name, safe='')}"
        params = {"valueRenderOption": "FORMATTED_VALUE"}
        data = self._cached(f"rows-{source_id}-{sheet_name}",
                            lambda: self._get(url, params))
        return _clean_rows(data.get("values", []))
