#!/usr/bin/env python3
"""
Harvest a single Google place into the Places folder.

Usage:
    python scripts/harvest_place.py PLACE_ID [--out DIR]
"""

import os
import sys
import argparse

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import GOOGLE_API_KEY, PLACES_DIR
from etl.harvest import harvest_place


def main():
    parser = argparse.ArgumentParser(description='Harvest a place from Google Places')
    parser.add_argument('place_id', help='Google Place ID')
    parser.add_argument('--out', default=PLACES_DIR, help=f'Output root (default: {PLACES_DIR})')
    args = parser.parse_args()

    if not GOOGLE_API_KEY:
        print("ERROR: GOOGLE_API_KEY environment variable not set")
        sys.exit(1)

    try:
        folder = harvest_place(args.place_id, args.out)
    except Exception as e:
        print(f"[ERROR] Harvest failed: {e}")
        sys.exit(1)

    print(folder)


if __name__ == "__main__":
    main()
