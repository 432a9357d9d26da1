"""Assemble classified rows into Eras and deduplicated Tracks.

Several rows of a tracker often describe the same song and differ only in
the link they list. Rows sharing the identity tuple
(era, raw_name, notes, available_length, quality) become one Track whose
links accumulate; only the first row of a Track is tallied into the era's
quality counters.
"""

import re
from datetime import datetime, timezone

from trackerhub.classify import ERA_METADATA, TRACK, ClassifierState, classify_row
from trackerhub.config import DATE_YEAR_MIN, DEFAULT_ARTIST_NAME, QUALITY_BUCKETS
from trackerhub.errors import EmptyInput, HeaderNotFound
from trackerhub.headers import FIELDS, MISSING, cell, locate_header
from trackerhub.links import categorize_link, split_links
from trackerhub.models import Artist, Era, ParseDiagnostics, QualityCounters, Track
from trackerhub.normalize import EraName, decompose_title, normalize_text

# ── Quality tally ──────────────────────────────────────────────────────
# (bucket, quality-cell pattern, name/title pattern), first match wins.
# The name patterns are only consulted when the quality cell is empty.
QUALITY_RULES = [
    ("og", re.compile(r"\bog\b|original"), re.compile(r"og file|\(og\)")),
    ("snippet", re.compile(r"snippet|^low quality$|^recording$|\blq\b"),
     re.compile(r"snippet")),
    ("partial", re.compile(r"partial"), re.compile(r"partial")),
    ("tagged", re.compile(r"tagged"), re.compile(r"tagged")),
    ("stem_bounce", re.compile(r"stem|bounce"), re.compile(r"\bstems?\b|bounce")),
    ("unavailable", re.compile(r"not available|unavailable|n/a"),
     re.compile(r"unavailable")),
    ("full", re.compile(r"^high quality$|^cd quality$|full|lossless|320|flac|cdq|\bhq\b"),
     re.compile(r"\bfull\b")),
]

# Statistics blob tokens, e.g. "12 OG File(s)\n3 Full\n1 Stem Bounce(s)"
STATISTICS_PATTERNS = {
    "og": re.compile(r"(\d+)\s*OG\s*File", re.IGNORECASE),
    "full": re.compile(r"(\d+)\s*Full", re.IGNORECASE),
    "tagged": re.compile(r"(\d+)\s*Tagged", re.IGNORECASE),
    "partial": re.compile(r"(\d+)\s*Partial", re.IGNORECASE),
    "snippet": re.compile(r"(\d+)\s*Snippet", re.IGNORECASE),
    "stem_bounce": re.compile(r"(\d+)\s*Stem\s*Bounce", re.IGNORECASE),
    "unavailable": re.compile(r"(\d+)\s*Unavailable", re.IGNORECASE),
}

_FOOTER = re.compile(
    r"total tracks|total files|statistic|last updated"
    r"|^\d+\s+(?:total|files|tracks|links)",
    re.IGNORECASE,
)
_DISCORD = re.compile(r"https?://discord\.gg/[a-zA-Z0-9]+")
_YEAR = re.compile(r"\((\d{4})\)")
_IMAGE_HOSTS = ("imgur", "drive.google", "dropbox", "ibb.co", "postimg", "gyazo")
_IMAGE_EXTENSION = re.compile(r"\.(jpg|jpeg|png|gif|webp)(\?|$)", re.IGNORECASE)
_DATED_LINE = re.compile(r"^\(\d{2}/\d{2}/\d{4}\)")

SPECIAL_MARKERS = ("⭐", "✨", "🏆")
WANTED_MARKERS = ("🥇", "🥈", "🥉")


def quality_bucket(quality, raw_name="", title=""):
    """Pick the single counter bucket a new Track is tallied under."""
    q = normalize_text(quality).lower()
    if q:
        for bucket, quality_pattern, _ in QUALITY_RULES:
            if quality_pattern.search(q):
                return bucket
    else:
        names = (normalize_text(raw_name).lower(), normalize_text(title).lower())
        for bucket, _, name_pattern in QUALITY_RULES:
            if any(name_pattern.search(n) for n in names):
                return bucket
    return "unavailable" if q in ("", "unknown") else "full"


def parse_statistics(text):
    """Parse a statistics blob into QualityCounters; absent tokens stay 0."""
    counters = QualityCounters()
    for bucket in QUALITY_BUCKETS:
        m = STATISTICS_PATTERNS[bucket].search(text or "")
        if m:
            setattr(counters, bucket, int(m.group(1)))
    return counters


def extract_year(text):
    m = _YEAR.search(text or "")
    return int(m.group(1)) if m else None


def extract_discord_link(text):
    m = _DISCORD.search(text or "")
    return m.group(0) if m else None


# ── Date parsing ───────────────────────────────────────────────────────

_DATE_FORMATS = [
    "%Y-%m-%d",      # 2019-01-01
    "%m/%d/%Y",      # 01/01/2019
    "%m/%d/%y",      # 1/1/19
    "%b %d, %Y",     # Jan 1, 2019
    "%B %d, %Y",     # January 1, 2019
    "%b %d %Y",
    "%B %d %Y",
    "%d %b %Y",      # 1 Jan 2019
    "%d %B %Y",
    "%Y/%m/%d",
]
_ORDINAL = re.compile(r"(\d)(st|nd|rd|th)\b", re.IGNORECASE)


def parse_track_date(text, min_year=DATE_YEAR_MIN):
    """Normalize a file/leak date cell to YYYY-MM-DD.

    Cells that are not a recognizable date after min_year are returned
    unchanged, so "Unknown" or "Early 2019" survive as written.
    """
    raw = normalize_text(text)
    if not raw:
        return ""
    candidate = _ORDINAL.sub(r"\1", raw.replace(".", ""))
    for fmt in _DATE_FORMATS:
        try:
            parsed = datetime.strptime(candidate, fmt)
        except ValueError:
            continue
        if parsed.year > min_year:
            return parsed.date().isoformat()
        break
    return raw


def first_marker(text, markers):
    for marker in markers:
        if marker in text:
            return marker
    return None


def is_footer(row):
    """True for the statistics footer that ends a tracker's data region."""
    if not row:
        return False
    return bool(_FOOTER.search(normalize_text(row[0])))


def _is_image_line(line):
    if "http" not in line:
        return False
    return any(h in line for h in _IMAGE_HOSTS) or bool(_IMAGE_EXTENSION.search(line))


def split_era_details(name_cell):
    """Split the lines under an era's title into (notes, image, description).

    Lines before an image URL are notes, lines after it are description.
    Without an image, a long undated line starts the description.
    """
    lines = [line.strip() for line in (name_cell or "").splitlines()]
    content = [line for line in lines[1:] if line]
    notes, image, description = "", "", ""

    image_index = next((i for i, line in enumerate(content) if _is_image_line(line)), -1)
    if image_index >= 0:
        image = content[image_index]
        notes = "\n".join(content[:image_index])
        description = "\n".join(content[image_index + 1:])
    else:
        desc_index = next(
            (i for i, line in enumerate(content)
             if len(line) > 100 and not _DATED_LINE.match(line)),
            -1,
        )
        if desc_index > 0:
            notes = "\n".join(content[:desc_index])
            description = "\n".join(content[desc_index:])
        else:
            description = "\n".join(content)
    return notes, image, description


class EraBuilder:
    """Accumulates Eras in first-seen order while rows are classified.

    The cursor ``current`` is the era receiving tracks. Switching to an era
    whose name was already seen reopens it rather than creating a second
    Era with the same name.
    """

    def __init__(self, column_map, verbose=False):
        self.column_map = column_map
        self.verbose = verbose
        self.current = None
        self.eras = {}       # lower-cased name → Era
        self._tracks = {}    # lower-cased name → {identity tuple: Track}

    def _open(self, name, alternate_names=()):
        key = name.lower()
        if self.current is not None and self.current.name.lower() == key:
            era = self.current
        else:
            self._finalize()
            era = self.eras.get(key)
            if era is None:
                era = Era(name=name)
                self.eras[key] = era
                self._tracks[key] = {}
                if self.verbose:
                    print(f"  Era: {name}")
            elif self.verbose:
                print(f"  Era: {name} (reopened)")
            self.current = era

        merged = list(era.alternate_names)
        seen = {n.lower() for n in merged} | {key}
        for alt in alternate_names:
            if alt.lower() not in seen:
                seen.add(alt.lower())
                merged.append(alt)
        era.alternate_names = tuple(merged)
        return era

    def _finalize(self):
        if self.current is not None and self.verbose:
            print(f"    {len(self.current.tracks)} tracks in {self.current.name}")
        self.current = None

    def add_metadata(self, album, stats_text, row):
        """Open the era an EraMetadata row announces and record its details."""
        era = self._open(album.main_name, album.alternate_names)
        if era.reported.total() == 0:
            era.reported = parse_statistics(stats_text)

        notes, image, description = split_era_details(cell(row, self.column_map, "name"))
        if not notes:
            notes = normalize_text(cell(row, self.column_map, "notes"))
        era.notes = era.notes or notes
        era.image = era.image or image
        era.description = era.description or description
        if era.year is None:
            era.year = extract_year(notes or description)
        return era

    def _field(self, row, field):
        return normalize_text(cell(row, self.column_map, field))

    def add_track(self, era_name, name_text, row, alternate_names=()):
        """Add a track row. Returns True for a new Track, False for a merge."""
        era = self._open(era_name, alternate_names)

        raw_name = normalize_text(name_text)
        notes = self._field(row, "notes")
        available_length = self._field(row, "available_length")
        quality = self._field(row, "quality")
        links = [categorize_link(u) for u in split_links(cell(row, self.column_map, "links"))]

        identity = (era.name, raw_name, notes, available_length, quality)
        index = self._tracks[era.name.lower()]
        existing = index.get(identity)
        if existing is not None:
            existing.links.extend(links)
            if self.verbose:
                print(f"    Merged links into {existing.display_name}")
            return False

        title = decompose_title(raw_name)
        bucket = quality_bucket(quality, raw_name, title.main)
        track = Track(
            era=era.name,
            title=title,
            raw_name=raw_name,
            notes=notes,
            track_length=self._field(row, "track_length"),
            file_date=parse_track_date(self._field(row, "file_date")),
            leak_date=parse_track_date(self._field(row, "leak_date")),
            available_length=available_length,
            quality=quality,
            links=links,
            quality_bucket=bucket,
            discord_link=extract_discord_link(" ".join(str(c) for c in row if c)),
            special_type=first_marker(raw_name, SPECIAL_MARKERS),
            wanted_type=first_marker(raw_name, WANTED_MARKERS),
        )
        era.tracks.append(track)
        era.counters.increment(bucket)
        index[identity] = track
        return True

    def finish(self):
        """Finalize the cursor and return the non-empty Eras in first-seen order."""
        self._finalize()
        eras = []
        for era in self.eras.values():
            if era.tracks:
                eras.append(era)
            elif self.verbose:
                print(f"  Dropped empty era: {era.name}")
        return eras


def _is_blank(row):
    return not any(normalize_text(c) for c in row)


def parse(rows, column_map=None, artist_name=DEFAULT_ARTIST_NAME,
          last_updated=None, verbose=False):
    """Parse a tracker's rows into an Artist.

    Args:
        rows: List of rows, each a list of cell strings (None allowed)
        column_map: Optional field → column index map; detected when omitted
        artist_name: Name for the resulting Artist
        last_updated: ISO-8601 timestamp; defaults to now (UTC)
        verbose: Print era transitions, merges and dropped rows

    Raises:
        EmptyInput: no row has a non-blank cell
        HeaderNotFound: column_map omitted and no header row detected
    """
    rows = [list(r) if r else [] for r in rows]
    if all(_is_blank(r) for r in rows):
        raise EmptyInput("tracker has no non-blank rows")

    header_index, detected = locate_header(rows)
    if column_map is None:
        if header_index == -1:
            raise HeaderNotFound(
                "no header row in the first rows names enough tracker columns")
        column_map = detected
    else:
        column_map = {f: column_map.get(f, MISSING) for f in FIELDS}
    start = header_index + 1

    diagnostics = ParseDiagnostics(header_index=header_index)
    state = ClassifierState()
    builder = EraBuilder(column_map, verbose=verbose)

    for i in range(start, len(rows)):
        row = rows[i]
        if is_footer(row):
            diagnostics.footer_index = i
            if verbose:
                print(f"  Footer at row {i}, stopping")
            break
        if _is_blank(row):
            continue
        diagnostics.rows_seen += 1

        rc = classify_row(row, column_map, state)
        if rc.kind == ERA_METADATA:
            diagnostics.metadata_rows += 1
            album = EraName(rc.era_name, state.alternate_names)
            builder.add_metadata(album, rc.stats_text, row)
        elif rc.kind == TRACK:
            diagnostics.track_rows += 1
            if not builder.add_track(rc.era_name, rc.name_text, row, state.alternate_names):
                diagnostics.merged_rows += 1
        elif rc.reason == "orphan":
            diagnostics.orphan_rows += 1
            if verbose:
                print(f"  Orphan row {i} (no era yet): {rc.name_text}")
        else:
            diagnostics.noise_rows += 1

    eras = builder.finish()
    if last_updated is None:
        last_updated = datetime.now(timezone.utc).isoformat()
    artist = Artist(
        name=artist_name,
        eras=tuple(eras),
        last_updated=last_updated,
        diagnostics=diagnostics,
    )
    if verbose:
        print(f"  Parsed {len(eras)} eras, {artist.track_count()} tracks "
              f"({diagnostics.merged_rows} merged rows, "
              f"{diagnostics.orphan_rows} orphans)")
    return artist
