#!/usr/bin/env python3
"""
Push one harvested place folder into Strapi.

Usage:
    python scripts/sync_place.py Places/swartberg_wilds
"""

import os
import sys
import argparse

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import ConfigError, print_mode_banner
from etl.sync import sync_place
from utils.strapi import get_client


def main():
    parser = argparse.ArgumentParser(description='Sync a harvested place folder to Strapi')
    parser.add_argument('folder', help='Folder containing place.json')
    args = parser.parse_args()

    try:
        client = get_client()
    except ConfigError as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    print_mode_banner()

    try:
        sync_place(args.folder, client)
    except Exception as e:
        print(f"[ERROR] Sync failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
