"""Shared fixtures for trackerhub tests."""

import pytest
import requests

from trackerhub import http_utils
from trackerhub.headers import FIELDS

HEADER = ["Era", "Name", "Notes", "Track Length", "File Date", "Leak Date",
          "Available Length", "Quality", "Link(s)"]

# Column positions of HEADER
COLUMN_MAP = {
    "era": 0,
    "name": 1,
    "notes": 2,
    "track_length": 3,
    "file_date": 4,
    "leak_date": 5,
    "available_length": 6,
    "quality": 7,
    "links": 8,
}


def make_row(*, era="", name="", notes="", track_length="", file_date="",
             leak_date="", available_length="", quality="", links=""):
    """Build a data row laid out like HEADER."""
    values = dict(era=era, name=name, notes=notes, track_length=track_length,
                  file_date=file_date, leak_date=leak_date,
                  available_length=available_length, quality=quality, links=links)
    row = [""] * len(HEADER)
    for field in FIELDS:
        row[COLUMN_MAP[field]] = values[field]
    return row


def metadata_row(album, stats="1 OG File(s)\n2 Full\n0 Snippet(s)"):
    """Era heading row: statistics blob in the era column, album in the name column."""
    return make_row(era=stats, name=album)


class FakeResponse:
    def __init__(self, status_code=200, data=None, headers=None):
        self.status_code = status_code
        self._data = data if data is not None else {}
        self.headers = headers or {}

    def json(self):
        return self._data

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


class FakeSession:
    """Stands in for requests.Session; replays queued responses and records calls."""

    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []
        self.headers = {}

    def get(self, url, params=None, timeout=None):
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        return self.responses.pop(0)


class FakeTime:
    """Manual clock: sleep() records the delay and advances monotonic()."""

    def __init__(self, now=100.0):
        self.now = now
        self.slept = []

    def monotonic(self):
        return self.now

    def sleep(self, seconds):
        self.slept.append(seconds)
        self.now += seconds


@pytest.fixture
def fake_time(monkeypatch):
    """Replace the time module seen by http_utils with a FakeTime."""
    clock = FakeTime()
    monkeypatch.setattr(http_utils, "time", clock)
    return clock
