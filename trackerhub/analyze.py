"""Summary statistics over a parsed Artist."""

from collections import Counter

from trackerhub.config import QUALITY_BUCKETS


def artist_summary(artist):
    """Totals for an Artist.

    Returns a dict with ``eras``, ``tracks``, ``links``, ``unknown_titles``,
    ``quality`` (bucket → count, every bucket present) and ``platforms``
    (platform → link count, most common first).
    """
    quality = {bucket: 0 for bucket in QUALITY_BUCKETS}
    platforms = Counter()
    links = 0
    unknown = 0
    for era in artist.eras:
        for bucket in QUALITY_BUCKETS:
            quality[bucket] += getattr(era.counters, bucket)
        for track in era.tracks:
            links += len(track.links)
            platforms.update(link.platform for link in track.links)
            if track.title.is_unknown:
                unknown += 1
    return {
        "eras": len(artist.eras),
        "tracks": artist.track_count(),
        "links": links,
        "unknown_titles": unknown,
        "quality": quality,
        "platforms": dict(platforms.most_common()),
    }


def print_artist_summary(artist):
    """Print totals and a per-era quality table."""
    summary = artist_summary(artist)
    print(f"\n  {artist.name}")
    print(f"  Eras:           {summary['eras']}")
    print(f"  Tracks:         {summary['tracks']}")
    print(f"  Links:          {summary['links']}")
    print(f"  Unknown titles: {summary['unknown_titles']}")

    if not artist.eras:
        print("  No eras with tracks.")
        return

    heads = ["OG", "Full", "Tag", "Part", "Snip", "Stem", "N/A"]
    print(f"\n  {'Era':<32} {'Tracks':>6} " + " ".join(f"{h:>5}" for h in heads))
    print(f"  {'-'*32} {'-'*6} " + " ".join("-" * 5 for _ in heads))
    for era in artist.eras:
        counts = " ".join(f"{getattr(era.counters, b):>5}" for b in QUALITY_BUCKETS)
        print(f"  {era.name[:32]:<32} {len(era.tracks):>6} {counts}")

    if summary["platforms"]:
        print("\n  Links by platform:")
        for platform, n in summary["platforms"].items():
            print(f"    {platform:15s} {n}")
