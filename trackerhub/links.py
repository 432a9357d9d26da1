"""Download/stream link classification."""

import re
from urllib.parse import urlsplit

from trackerhub.models import Link

_VALID_URL = re.compile(r"^https?://.+", re.IGNORECASE)
_PILLOWCASE_FILE = re.compile(r"/f/([0-9a-f]{32})", re.IGNORECASE)
_HEX_ID = re.compile(r"(?<![0-9a-f])([0-9a-f]{32})(?![0-9a-f])", re.IGNORECASE)
_AUDIO_EXTENSION = re.compile(r"\.(mp3|wav|flac|m4a|aac|ogg|opus)$", re.IGNORECASE)

PILLOWCASE_HOSTS = ("pillows.su", "pillowcase.su", "pillowcases.su", "pillowcases.top")

# (platform, type, host suffixes), first match wins
PLATFORMS = [
    ("pillowcase", "audio", PILLOWCASE_HOSTS),
    ("froste", "audio", ("froste.lol",)),
    ("youtube", "video", ("youtube.com", "youtu.be")),
    ("soundcloud", "audio", ("soundcloud.com",)),
    ("spotify", "stream", ("spotify.com",)),
    ("apple-music", "stream", ("music.apple.com",)),
    ("dbree", "download", ("dbree.org", "dbree.me")),
    ("mediafire", "download", ("mediafire.com",)),
    ("mega", "download", ("mega.nz", "mega.io", "mega.co.nz")),
    ("dropbox", "download", ("dropbox.com",)),
    ("google-drive", "download", ("drive.google.com", "docs.google.com")),
    ("tidal", "stream", ("tidal.com",)),
    ("deezer", "stream", ("deezer.com",)),
    ("bandcamp", "stream", ("bandcamp.com",)),
    ("social", "social", ("twitter.com", "x.com", "instagram.com",
                          "tiktok.com", "reddit.com", "facebook.com")),
    ("discord", "social", ("discord.gg", "discord.com")),
]


def _host_and_path(url):
    """Lower-cased host and path, tolerating scheme-less input."""
    if "://" not in url:
        host, _, path = url.partition("/")
        return host.lower(), "/" + path
    parts = urlsplit(url)
    return (parts.hostname or "").lower(), parts.path


def _host_matches(host, suffixes):
    return any(host == s or host.endswith("." + s) for s in suffixes)


def extract_file_id(url):
    """32-hex file id from a /f/<id> path segment, else any standalone 32-hex run."""
    m = _PILLOWCASE_FILE.search(url) or _HEX_ID.search(url)
    return m.group(1).lower() if m else None


def categorize_link(url):
    """Classify a single URL by hosting platform.

    >>> categorize_link("https://youtu.be/abc").platform
    'youtube'
    """
    url = (url or "").strip()
    if not url:
        return Link(url="")
    is_valid = bool(_VALID_URL.match(url))
    host, path = _host_and_path(url)

    if _host_matches(host, ("apple.com",)) and path.startswith("/music"):
        return Link(url, "apple-music", "stream", is_valid)

    for platform, link_type, suffixes in PLATFORMS:
        if _host_matches(host, suffixes):
            file_id = extract_file_id(url) if platform == "pillowcase" else None
            return Link(url, platform, link_type, is_valid, file_id)

    if _AUDIO_EXTENSION.search(url.split("?", 1)[0].split("#", 1)[0]):
        return Link(url, "direct", "audio", is_valid)

    return Link(url, "unknown", "unknown", is_valid)


def split_links(cell):
    """Individual link strings from a links cell.

    Every http(s) URL in the cell, whether separated by commas, newlines
    or spaces, or the comma/newline separated tokens when the cell holds
    no URL at all.
    """
    if not cell:
        return []
    tokens = (t.rstrip(";") for t in re.split(r"[,\s]+", cell))
    urls = [t for t in tokens if _VALID_URL.match(t)]
    if urls:
        return urls
    return [t.strip() for t in re.split(r"[,\n]", cell) if t.strip()]
