"""Record model for parsed trackers: Artist → Era → Track.

TrackTitle, Link and Artist are frozen; Era and Track are filled in by
the builder while the sheet is being read and are not touched after
parse() returns.
"""

from dataclasses import asdict, dataclass, field, fields
from typing import Optional


@dataclass(frozen=True)
class Link:
    url: str
    platform: str = "unknown"
    type: str = "unknown"
    is_valid: bool = False
    file_id: Optional[str] = None   # pillowcase 32-hex file id


@dataclass(frozen=True)
class TrackTitle:
    main: str
    is_unknown: bool = False
    features: tuple = ()
    producers: tuple = ()
    alternate_names: tuple = ()


@dataclass
class QualityCounters:
    og: int = 0
    full: int = 0
    tagged: int = 0
    partial: int = 0
    snippet: int = 0
    stem_bounce: int = 0
    unavailable: int = 0

    def increment(self, bucket):
        setattr(self, bucket, getattr(self, bucket) + 1)

    def total(self):
        return sum(getattr(self, f.name) for f in fields(self))


@dataclass
class Track:
    era: str                      # name of the owning Era
    title: TrackTitle
    raw_name: str
    notes: str = ""
    track_length: str = ""
    file_date: str = ""
    leak_date: str = ""
    available_length: str = ""
    quality: str = ""
    links: list = field(default_factory=list)
    quality_bucket: str = ""
    discord_link: Optional[str] = None
    special_type: Optional[str] = None
    wanted_type: Optional[str] = None

    @property
    def display_name(self):
        """Decomposed main title, or the raw name when nothing is left."""
        return self.title.main or self.raw_name


@dataclass
class Era:
    name: str
    alternate_names: tuple = ()
    tracks: list = field(default_factory=list)
    counters: QualityCounters = field(default_factory=QualityCounters)
    reported: QualityCounters = field(default_factory=QualityCounters)
    notes: str = ""
    description: str = ""
    image: str = ""
    year: Optional[int] = None


@dataclass
class ParseDiagnostics:
    header_index: int = -1
    rows_seen: int = 0
    metadata_rows: int = 0
    track_rows: int = 0
    merged_rows: int = 0
    noise_rows: int = 0
    orphan_rows: int = 0
    footer_index: Optional[int] = None


@dataclass(frozen=True)
class Artist:
    name: str
    eras: tuple = ()
    last_updated: str = ""
    diagnostics: ParseDiagnostics = field(default_factory=ParseDiagnostics)

    def track_count(self):
        return sum(len(era.tracks) for era in self.eras)

    def to_dict(self):
        return asdict(self)
