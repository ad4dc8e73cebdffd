#!/usr/bin/env python3
"""
One-command workflow for adding and enriching a single place in Strapi.

Usage:
    python run_add_place.py [--place-id PLACE_ID]

Harvests the place from Google, opens $EDITOR on an enrichment template,
then syncs, enriches and prints a field checklist.
"""

import argparse
import json
import os
import subprocess
import sys
import tempfile

from config import ConfigError, print_mode_banner
from etl.enrich import enrich_documents, final_checklist, inject_slug
from etl.harvest import harvest_place
from etl.sync import sync_place
from utils.strapi import get_client

ENRICHMENT_TEMPLATE = {
    "places": [
        {
            "description": "",
            "the_vibe": "",
            "need_to_know": "",
            "rates": [],
            "tags": [],
            "amenities": [],
            "highlight": [],
            "unexpected": [],
        }
    ]
}


def editor_command(file_path: str, editor: str = None) -> list[str]:
    """Command line that opens file_path and blocks until the editor closes."""
    editor = editor or os.getenv("EDITOR", "code")
    if "code" in editor:
        return [editor, "-w", file_path]
    return [editor, file_path]


def open_editor(file_path: str) -> None:
    cmd = editor_command(file_path)
    exit_code = subprocess.call(cmd)
    if exit_code != 0:
        raise RuntimeError(f"{cmd[0]} exited with code {exit_code}")


def read_enrichment(file_path: str) -> dict:
    with open(file_path, encoding="utf-8") as f:
        content = f.read()
    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in enrichment file: {e}")


def main():
    parser = argparse.ArgumentParser(description="Add a new place to Strapi")
    parser.add_argument("--place-id", help="Google Place ID (prompted if omitted)")
    args = parser.parse_args()

    try:
        client = get_client()
    except ConfigError as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    print_mode_banner()

    try:
        print("Add a new place to Strapi")
        client.wait_until_ready()

        place_id = (args.place_id or input("Enter Google Place ID: ")).strip()
        if not place_id:
            raise ValueError("No Google Place ID entered.")

        print("Harvesting place data from Google...")
        folder = harvest_place(place_id)
        print(f"Data saved in: {folder}")

        with tempfile.NamedTemporaryFile("w", suffix=".json", prefix="enrichment-",
                                         delete=False, encoding="utf-8") as f:
            json.dump(ENRICHMENT_TEMPLATE, f, indent=2)
            tmp_file = f.name

        print(f"\nOpening {os.getenv('EDITOR', 'code')}... Fill in enrichment JSON and save/close.\n")
        open_editor(tmp_file)
        enrichment = read_enrichment(tmp_file)

        inject_slug(enrichment, folder)
        places = enrichment.get("places") or [{}]
        slug = places[0].get("slug")

        print("\nStep 1: Syncing harvested data to Strapi...")
        print("-" * 60)
        sync_place(folder, client)

        print("\nStep 2: Running enrichment...")
        print("-" * 60)
        enrich_documents(enrichment, client, folder)

        final_checklist(enrichment)

        if slug:
            backup_path = os.path.join(folder, "enrichment.json")
            with open(backup_path, "w", encoding="utf-8") as f:
                json.dump(enrichment, f, indent=2)
            print(f"Enrichment backup saved -> {backup_path}")

        print("\nDone! Place successfully added and enriched.")

    except Exception as e:
        print(f"\n[ERROR] Add place workflow failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
