"""JSON cache for fetched sheet data (two-level directory, atomic writes)."""

import hashlib
import json
import os
import re
import tempfile
import time
from pathlib import Path


def sanitize_key(key):
    """Reduce an arbitrary key to a file-safe identifier.

    The readable stem keeps ASCII letters, digits, dots, dashes and
    underscores. A digest of the full key is appended so distinct keys
    never share a file.
    """
    key = str(key)
    stem = re.sub(r"[^A-Za-z0-9._-]+", "_", key).strip("._") or "_"
    digest = hashlib.sha1(key.encode("utf-8")).hexdigest()[:12]
    return f"{stem}-{digest}"


def cache_path(cache_dir, identifier):
    """Two-level cache path: cache_dir/prefix/identifier.json"""
    # First 4 chars of the identifier name the prefix subdirectory
    prefix = identifier[:4] if len(identifier) >= 4 else identifier
    return Path(cache_dir) / prefix / f"{identifier}.json"


def read_cache(cache_dir, identifier, max_age_seconds=0):
    """Read cached JSON for an identifier. Returns the data or None."""
    path = cache_path(cache_dir, identifier)
    if not path.exists():
        return None
    if max_age_seconds > 0:
        age = time.time() - path.stat().st_mtime
        if age > max_age_seconds:
            return None
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError):
        return None


def write_cache(cache_dir, identifier, data):
    """Atomically write JSON to cache."""
    path = cache_path(cache_dir, identifier)
    path.parent.mkdir(parents=True, exist_ok=True)
    # Write to a temp file in the same directory, then rename over
    fd, tmp = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False)
        os.replace(tmp, path)
    except BaseException:
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise


class Cache:
    """Keyed JSON cache with a freshness window.

    max_age_seconds of 0 never expires entries.
    """

    def __init__(self, cache_dir, max_age_seconds=0):
        self.cache_dir = cache_dir
        self.max_age_seconds = max_age_seconds

    def get(self, key):
        return read_cache(self.cache_dir, sanitize_key(key), self.max_age_seconds)

    def set(self, key, data):
        write_cache(self.cache_dir, sanitize_key(key), data)

    def clear(self, key):
        """Remove one entry; returns True if it existed."""
        path = cache_path(self.cache_dir, sanitize_key(key))
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        return True
