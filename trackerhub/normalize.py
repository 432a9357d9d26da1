"""Text cleanup, era-name cleaning, and track-title decomposition.

Title decomposition pipeline (each stage strips its match before the next):
1. Flag unknown titles ("???")
2. Strip a trailing feature credit: "(feat. A, B)", "ft. A & B"
3. Strip a trailing producer credit: "(prod. X)", "produced by X"
   (2 and 3 repeat until neither matches, feature first)
4. Collect remaining (...) / [...] groups as alternate names
5. Strip decorative emoji, collapse whitespace → main title
"""

import re
import unicodedata
from collections import namedtuple

from trackerhub.config import UNKNOWN_ERA
from trackerhub.models import TrackTitle

EraName = namedtuple("EraName", ["main_name", "alternate_names"])

# U+FFFD replacement chars plus the halves of emoji sequences that survive
# a lossy export (variation selector-16, zero-width joiner).
_BROKEN_CHARS = re.compile("[\ufffd\ufe0f\u200d]")

# Decorative emoji that trackers prefix or suffix to titles.
_DECORATIVE_EMOJI = re.compile(
    "[\U0001F3B5\U0001F3B6\U0001F3A4\U0001F3A7\U0001F525\U0001F48E"
    "\u2b50\u2728\U0001F3C6\U0001F916\ufffd]"
)

# "(Alt)" or "[Alt]", content captured in group 1 or 2.
_BRACKET_GROUP = re.compile(r"\s*(?:\(([^)]*)\)|\[([^\]]*)\])")

_FEATURE_MARKER = r"(?:\b(?:ft|feat)\b\.?|\bfeaturing\b)"
_PRODUCER_MARKER = r"(?:\bprod\b\.?|\bproduced\s+by\b)"

# Credits anchored at the end of the title: either a whole bracket group,
# "(feat. A)", or bare text after whitespace, "ft. A". A credit inside a
# larger group such as "(Remix feat. A)" is left to the bracket pass.
_TRAILING_CREDIT = (
    r"\s*(?:[(\[]\s*{marker}\s*([^()\[\]]+?)\s*[)\]]"
    r"|(?:^|\s){marker}\s*([^()\[\]]+?))\s*$"
)
_TRAILING_FEATURE = re.compile(
    _TRAILING_CREDIT.format(marker=_FEATURE_MARKER), re.IGNORECASE)
_TRAILING_PRODUCER = re.compile(
    _TRAILING_CREDIT.format(marker=_PRODUCER_MARKER), re.IGNORECASE)
_LEADING_FEATURE = re.compile(r"^" + _FEATURE_MARKER + r"\s*", re.IGNORECASE)
_LEADING_PRODUCER = re.compile(r"^" + _PRODUCER_MARKER + r"\s*", re.IGNORECASE)


def normalize_text(s):
    """NFC-normalize, drop broken emoji fragments, and collapse whitespace.

    None is treated as the empty string. The result is stable under a
    second application.
    """
    if s is None:
        return ""
    s = _BROKEN_CHARS.sub("", str(s))
    s = unicodedata.normalize("NFC", s)
    return re.sub(r"\s+", " ", s).strip()


def _dedupe(names, exclude=()):
    """Drop blanks and case-insensitive repeats, keeping first occurrence."""
    seen = {e.lower() for e in exclude}
    out = []
    for name in names:
        name = name.strip()
        if not name or name.lower() in seen:
            continue
        seen.add(name.lower())
        out.append(name)
    return tuple(out)


def _split_credits(text):
    return [p.strip() for p in re.split(r"[,&]", text) if p.strip()]


# ── Era names ──────────────────────────────────────────────────────────

def clean_era_name(raw):
    """Split a raw era label into its main name and bracketed alternates.

    "My Era (Alt1) [Alt2]" → EraName("My Era", ("Alt1", "Alt2")).
    Purely numeric groups such as "(2019)" are dropped, not collected.
    """
    s = normalize_text(raw)
    alternates = []
    for m in _BRACKET_GROUP.finditer(s):
        content = (m.group(1) if m.group(1) is not None else m.group(2)).strip()
        if content and not content.isdigit():
            alternates.append(content)
    main = _BRACKET_GROUP.sub(" ", s)

    # Unbalanced brackets: keep only what precedes the first one
    stray = re.search(r"[(\[]", main)
    if stray:
        main = main[:stray.start()]
    main = re.sub(r"[)\]]", " ", main)
    main = re.sub(r"\s+", " ", main).strip()

    if not main:
        main = UNKNOWN_ERA
    return EraName(main, _dedupe(alternates, exclude=(main,)))


# ── Track titles ───────────────────────────────────────────────────────

def decompose_title(raw_title):
    """Decompose a raw track name into a TrackTitle.

    >>> decompose_title("Song (feat. Artist A, Artist B) (prod. Producer X)").main
    'Song'

    An empty main title is left empty; callers display the raw name.
    """
    s = normalize_text(raw_title)
    is_unknown = "???" in s
    features = []
    producers = []

    # Trailing credits; "Song (feat. A) (prod. B)" needs two passes
    while True:
        m = _TRAILING_FEATURE.search(s)
        if m:
            features.extend(_split_credits(m.group(1) or m.group(2)))
            s = s[:m.start()].strip()
            continue
        m = _TRAILING_PRODUCER.search(s)
        if m:
            producers.extend(_split_credits(m.group(1) or m.group(2)))
            s = s[:m.start()].strip()
            continue
        break

    alternates = []
    for m in _BRACKET_GROUP.finditer(s):
        content = (m.group(1) if m.group(1) is not None else m.group(2)).strip()
        if not content or content.isdigit():
            continue
        # Mid-title credits, e.g. "Song (feat. A) [V2]"
        if _LEADING_FEATURE.match(content):
            features.extend(_split_credits(_LEADING_FEATURE.sub("", content)))
        elif _LEADING_PRODUCER.match(content):
            producers.extend(_split_credits(_LEADING_PRODUCER.sub("", content)))
        else:
            alternates.append(content)
    s = _BRACKET_GROUP.sub(" ", s)

    main = _DECORATIVE_EMOJI.sub("", s)
    main = re.sub(r"\s+", " ", main).strip()
    main = unicodedata.normalize("NFC", main)

    return TrackTitle(
        main=main,
        is_unknown=is_unknown,
        features=_dedupe(features),
        producers=_dedupe(producers),
        alternate_names=_dedupe(alternates),
    )
