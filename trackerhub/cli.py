"""CLI with subcommands for parsing music trackers."""

import argparse
import csv
import json
import sys
from pathlib import Path

import requests

from trackerhub.analyze import print_artist_summary
from trackerhub.builder import parse
from trackerhub.cache import Cache
from trackerhub.config import CACHE_DIR, CACHE_MAX_AGE, SHEETS_API_KEY, SHEETS_RATE_LIMIT
from trackerhub.errors import TrackerError
from trackerhub.http_utils import RateLimiter
from trackerhub.sheets import (
    SheetsClient,
    artist_name_from_title,
    gid_from_url,
    spreadsheet_id_from_url,
)


def _make_client(args):
    cache = None if args.no_cache else Cache(CACHE_DIR, max_age_seconds=args.max_age)
    return SheetsClient(SHEETS_API_KEY, rate_limiter=RateLimiter(SHEETS_RATE_LIMIT),
                        cache=cache)


def _output(artist, as_json):
    if as_json:
        json.dump(artist.to_dict(), sys.stdout, indent=2, ensure_ascii=False)
        print()
    else:
        print_artist_summary(artist)


def cmd_parse(args):
    """Fetch a tracker from Google Sheets and parse it."""
    source_id = spreadsheet_id_from_url(args.source)
    client = _make_client(args)

    sheet = args.sheet
    if sheet is None:
        gid = gid_from_url(args.source)
        if gid is not None:
            sheet = client.sheet_name_for_gid(source_id, gid)

    if args.verbose:
        print(f"Fetching {source_id} ({sheet or 'first tab'})...")
    rows = client.fetch_rows(source_id, sheet)
    name = artist_name_from_title(client.fetch_title(source_id))
    artist = parse(rows, artist_name=name, verbose=args.verbose)
    _output(artist, args.json)


def cmd_sheets(args):
    """List the tabs of a tracker spreadsheet."""
    source_id = spreadsheet_id_from_url(args.source)
    client = _make_client(args)
    sheets = client.fetch_available_sheets(source_id)
    if not sheets:
        print("  No sheets found.")
        return
    print(f"  {len(sheets)} sheets:")
    for sheet in sheets:
        print(f"    {sheet['tab_id']!s:>12}  {sheet['title']}")


def cmd_file(args):
    """Parse a local CSV export of a tracker."""
    path = Path(args.path)
    with open(path, newline="", encoding="utf-8-sig") as f:
        rows = list(csv.reader(f))
    name = args.name or artist_name_from_title(path.stem)
    artist = parse(rows, artist_name=name, verbose=args.verbose)
    _output(artist, args.json)


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="trackerhub",
        description="Parse community music trackers into eras and tracks",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # parse
    p_parse = subparsers.add_parser("parse", help="Fetch and parse a Google Sheets tracker")
    p_parse.add_argument("source", help="Spreadsheet URL or id")
    p_parse.add_argument("--sheet", default=None,
                         help="Tab name (default: tab from the URL, else the first tab)")
    p_parse.add_argument("--json", action="store_true",
                         help="Print the parsed artist as JSON")
    p_parse.add_argument("--no-cache", action="store_true",
                         help="Disable the local JSON cache")
    p_parse.add_argument("--max-age", type=int, default=CACHE_MAX_AGE,
                         help=f"Max cache age in seconds (default: {CACHE_MAX_AGE})")
    p_parse.add_argument("--verbose", action="store_true",
                         help="Print era transitions and merges")
    p_parse.set_defaults(func=cmd_parse)

    # sheets
    p_sheets = subparsers.add_parser("sheets", help="List the tabs of a spreadsheet")
    p_sheets.add_argument("source", help="Spreadsheet URL or id")
    p_sheets.add_argument("--no-cache", action="store_true",
                          help="Disable the local JSON cache")
    p_sheets.add_argument("--max-age", type=int, default=CACHE_MAX_AGE,
                          help=f"Max cache age in seconds (default: {CACHE_MAX_AGE})")
    p_sheets.set_defaults(func=cmd_sheets)

    # file
    p_file = subparsers.add_parser("file", help="Parse a local CSV export")
    p_file.add_argument("path", help="CSV file")
    p_file.add_argument("--name", default=None,
                        help="Artist name (default: derived from the file name)")
    p_file.add_argument("--json", action="store_true",
                        help="Print the parsed artist as JSON")
    p_file.add_argument("--verbose", action="store_true",
                        help="Print era transitions and merges")
    p_file.set_defaults(func=cmd_file)

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        args.func(args)
    except (TrackerError, requests.RequestException, ValueError, OSError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
