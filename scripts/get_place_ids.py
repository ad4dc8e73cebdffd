#!/usr/bin/env python3
"""
Look up Google Place IDs for a CSV of campsites.
Requires GOOGLE_API_KEY environment variable.

Usage:
    python scripts/get_place_ids.py INPUT.csv [OUTPUT.csv] [--region REGION] [--any-type]

Input rows need a `name` column and optionally `town_or_area` (any case).
Output rows are the input rows plus Google_Place_ID, Google_Address and
Verified_Types (blank when no campground/RV park match was found).
"""

import os
import sys
import csv
import time
import argparse

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import GOOGLE_API_KEY, DEFAULT_SEARCH_REGION
from utils.google_places import find_place, CAMPSITE_TYPES

RATE_DELAY_SECONDS = 0.3
OUTPUT_COLUMNS = ["Google_Place_ID", "Google_Address", "Verified_Types"]


def find_column(row: dict, name: str) -> str | None:
    """Case-insensitive column lookup."""
    for key in row:
        if key and key.lower() == name:
            return key
    return None


def lookup_row(row: dict, region: str, require_types=CAMPSITE_TYPES) -> dict | None:
    """Return the row with Google columns added, or None if it has no name."""
    name_key = find_column(row, "name")
    town_key = find_column(row, "town_or_area")
    name = (row.get(name_key) or "").strip() if name_key else ""
    town = (row.get(town_key) or "").strip() if town_key else ""

    if not name:
        return None

    info = find_place(name, town, region, require_types) or {}
    return {
        **row,
        "Google_Place_ID": info.get("place_id", ""),
        "Google_Address": info.get("formatted_address", ""),
        "Verified_Types": ", ".join(info.get("types", [])),
    }


def main():
    parser = argparse.ArgumentParser(description='Find Google Place IDs for a CSV of places')
    parser.add_argument('input', help='Input CSV file')
    parser.add_argument('output', nargs='?', default='campsites_with_place_ids.csv',
                        help='Output CSV file')
    parser.add_argument('--region', default=DEFAULT_SEARCH_REGION, help='Region appended to searches')
    parser.add_argument('--any-type', action='store_true',
                        help='Accept matches that are not campgrounds/RV parks')
    args = parser.parse_args()

    if not GOOGLE_API_KEY:
        print("ERROR: GOOGLE_API_KEY environment variable not set")
        sys.exit(1)

    if not os.path.exists(args.input):
        print(f"ERROR: File not found: {args.input}")
        sys.exit(1)

    with open(args.input, newline='', encoding='utf-8') as f:
        rows = list(csv.DictReader(f))

    print(f"Loaded {len(rows)} rows from {args.input}")

    require_types = () if args.any_type else CAMPSITE_TYPES
    results = []

    for row in rows:
        result = lookup_row(row, args.region, require_types)
        if result is None:
            continue

        results.append(result)
        if len(results) % 5 == 0:
            print(f"Processed {len(results)}/{len(rows)}...")

        time.sleep(RATE_DELAY_SECONDS)

    if not results:
        print("No rows with a name found.")
        return

    fieldnames = list(results[0].keys())
    with open(args.output, 'w', newline='', encoding='utf-8') as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames, extrasaction='ignore')
        writer.writeheader()
        writer.writerows(results)

    found = sum(1 for r in results if r["Google_Place_ID"])
    print(f"Done! Saved {len(results)} rows ({found} matched) to {args.output}")


if __name__ == "__main__":
    main()
