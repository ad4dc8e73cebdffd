#!/usr/bin/env python3
"""
Enrich Strapi places from an enrichment JSON file.

Usage:
    python scripts/enrich_places.py documentsEnrichment.json [--folder Places/swartberg_wilds]

Options:
    --folder DIR    Harvested place folder; its slug fills in a missing one
"""

import os
import sys
import argparse

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import ConfigError, print_mode_banner
from etl.enrich import enrich_documents
from utils.strapi import get_client


def main():
    parser = argparse.ArgumentParser(description='Enrich Strapi places from JSON')
    parser.add_argument('file', help='Enrichment JSON file')
    parser.add_argument('--folder', help='Harvested place folder')
    args = parser.parse_args()

    try:
        client = get_client()
    except ConfigError as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    print_mode_banner()

    try:
        updated = enrich_documents(args.file, client, args.folder)
    except Exception as e:
        print(f"[ERROR] Enrichment failed: {e}")
        sys.exit(1)

    print(f"Updated {len(updated)} place(s)")


if __name__ == "__main__":
    main()
