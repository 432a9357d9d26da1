"""Shared HTTP utilities for the Sheets client."""

import time

import requests

from trackerhub.config import SHEETS_TIMEOUT


def create_session(user_agent):
    """Create a requests.Session with a User-Agent header."""
    s = requests.Session()
    s.headers["User-Agent"] = user_agent
    return s


class RateLimiter:
    """Enforces a minimum interval between requests made through it.

    Owned by the caller and passed to every request that should share the
    same budget.
    """

    def __init__(self, min_interval):
        self.min_interval = min_interval
        self.last_request = None

    def wait(self):
        """Sleep until min_interval has passed since the previous call."""
        now = time.monotonic()
        if self.last_request is not None:
            remaining = self.min_interval - (now - self.last_request)
            if remaining > 0:
                time.sleep(remaining)
                now = time.monotonic()
        self.last_request = now


def _get(session, url, params, rate_limiter, timeout):
    if rate_limiter is not None:
        rate_limiter.wait()
    return session.get(url, params=params, timeout=timeout)


def api_get_with_retry(session, url, params=None, rate_limiter=None,
                       max_retries=3, timeout=SHEETS_TIMEOUT):
    """Make an API request with rate limiting and retry on 429/5xx.

    Args:
        session: requests.Session to use
        url: Request URL
        params: Optional query parameters
        rate_limiter: Optional RateLimiter consulted before every attempt
        max_retries: Number of retry attempts before a final raise
        timeout: Per-request timeout in seconds
    """
    for attempt in range(max_retries):
        resp = _get(session, url, params, rate_limiter, timeout)
        if resp.status_code == 429 or resp.status_code >= 500:
            retry_after = int(resp.headers.get("Retry-After", 2 ** attempt))
            print(f"    HTTP {resp.status_code}, retrying in {retry_after}s "
                  f"(attempt {attempt + 1}/{max_retries})")
            time.sleep(retry_after)
            continue
        resp.raise_for_status()
        return resp.json()
    # Final attempt, any error status raises
    resp = _get(session, url, params, rate_limiter, timeout)
    resp.raise_for_status()
    return resp.json()
