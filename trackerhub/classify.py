"""Row classification: era metadata, track, or noise.

Tracker sheets put era headings, statistics blobs, announcements and
tracks in the same two columns. Decision order, first match wins:
1. era cell holds a statistics blob and name cell holds the album → ERA_METADATA
2. era cell is noise and name cell is empty → NOISE
3. name cell set, era cell empty or noise → TRACK in the running era
4. era cell is a label and the row looks like a track → TRACK, era switches
5. anything else → NOISE
"""

import re
from collections import namedtuple
from dataclasses import dataclass

from trackerhub.config import ERA_LABEL_MAX_LENGTH
from trackerhub.headers import cell
from trackerhub.normalize import clean_era_name, normalize_text

ERA_METADATA = "era_metadata"
TRACK = "track"
NOISE = "noise"

RowClass = namedtuple("RowClass", ["kind", "era_name", "name_text", "stats_text", "reason"])

_STATS = re.compile(
    r"^\d+\s*og\s*file"
    r"|\d+\s*(?:full|tagged|partial|snippet|stem|bounce|unavailable)"
    r"|og files?|snippets?|unavailable",
    re.IGNORECASE,
)
_NOISE = re.compile(
    r"discord|tracker|server|join|stay updated|get new links|http",
    re.IGNORECASE,
)
_BARE_DATE = re.compile(
    r"^\(?\s*\d{1,4}[/.-]\d{1,2}[/.-]\d{1,4}\s*\)?$"
    r"|^\(?\s*\d{4}\s*\)?$"
)
_DURATION = re.compile(r"\d+:\d+")


@dataclass
class ClassifierState:
    """Running era context threaded from row to row."""
    era_name: str = ""
    alternate_names: tuple = ()


def is_statistics(text):
    return bool(_STATS.search(text))


def is_noise(text):
    return bool(_NOISE.search(text)) or is_statistics(text)


def is_era_label(text):
    return (
        bool(text)
        and not is_noise(text)
        and len(text) < ERA_LABEL_MAX_LENGTH
        and not _BARE_DATE.match(text)
    )


def has_track_evidence(row, column_map):
    if _DURATION.search(cell(row, column_map, "track_length")):
        return True
    return bool(normalize_text(cell(row, column_map, "quality"))
                or normalize_text(cell(row, column_map, "links")))


def first_line(text):
    for line in (text or "").splitlines():
        if line.strip():
            return line
    return ""


def classify_row(row, column_map, state):
    """Classify one data row, updating *state* when the era changes."""
    era = normalize_text(cell(row, column_map, "era"))
    raw_name = cell(row, column_map, "name")
    name = normalize_text(raw_name)

    if era and name and is_statistics(era):
        album = clean_era_name(first_line(raw_name))
        state.era_name = album.main_name
        state.alternate_names = album.alternate_names
        return RowClass(ERA_METADATA, album.main_name, raw_name, era, "statistics")

    if era and not name and is_noise(era):
        return RowClass(NOISE, state.era_name, "", "", "noise")

    if name and (not era or is_noise(era)):
        if not state.era_name:
            return RowClass(NOISE, "", name, "", "orphan")
        return RowClass(TRACK, state.era_name, name, "", "running era")

    if era and name and is_era_label(era) and has_track_evidence(row, column_map):
        label = clean_era_name(era)
        state.era_name = label.main_name
        state.alternate_names = label.alternate_names
        return RowClass(TRACK, label.main_name, name, "", "era label")

    return RowClass(NOISE, state.era_name, name, "", "unclassified")
