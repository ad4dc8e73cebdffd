#!/usr/bin/env python3
"""
Batch add/enrich places from a file of multiple {"places": [...]} JSON blocks.

Usage:
    python run_batch_add.py ./batch/myCampsites.json [--delay-ms N]

For each place:
    1) harvest_place(google_place_id)
       - harvest failure or no downloaded photos -> skipped and logged
    2) sync_place(folder)
    3) enrich_documents({"places": [place]}, folder)
"""

import argparse
import os
import sys

from config import BATCH_DELAY_MS, BATCH_LOG_FILE, ConfigError, print_mode_banner
from etl.batch import BatchLog, BatchResult, parse_places_blocks, has_downloaded_photos, sleep_ms
from etl.enrich import enrich_documents
from etl.harvest import harvest_place
from etl.sync import sync_place
from utils.merge import norm_str
from utils.strapi import StrapiClient, get_client


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Harvest, sync and enrich a batch of places"
    )
    parser.add_argument("file", help="Batch file with {\"places\": [...]} blocks")
    parser.add_argument(
        "--delay-ms",
        type=int,
        default=BATCH_DELAY_MS,
        help=f"Delay between places in ms (default: {BATCH_DELAY_MS})"
    )
    return parser.parse_args()


def process_place(place: dict, google_place_id: str, client: StrapiClient) -> str | None:
    """
    Run harvest -> sync -> enrich for one place.

    Returns:
        Failure reason, or None on success
    """
    try:
        folder = harvest_place(google_place_id)
    except Exception as e:
        return f"invalid google_place_id or harvest failed ({e})"

    if not folder or not has_downloaded_photos(folder):
        return "no photos downloaded during harvest"

    try:
        sync_place(folder, client)
    except Exception as e:
        return f"sync failed ({e})"

    try:
        enrich_documents({"places": [place]}, client, folder)
    except Exception as e:
        return f"enrich failed ({e})"

    return None


def run_batch_add(places: list[dict], client: StrapiClient, log: BatchLog,
                  delay_ms: int = BATCH_DELAY_MS) -> BatchResult:
    """Process every place in order; failures are recorded, never raised."""
    result = BatchResult(total=len(places))
    seen_slugs = set()

    for idx, place in enumerate(places, 1):
        slug = norm_str(place.get("slug"))
        google_place_id = norm_str(place.get("google_place_id"))

        print(f"Processing {idx}/{result.total}: {slug or '(no-slug)'} ...")

        if not slug:
            log("[Batch] Skipping entry (no slug).")
            result.fail("(unknown)", "missing slug")
            continue
        if slug in seen_slugs:
            log(f"[Batch] Skipping duplicate slug in batch: {slug}")
            continue
        seen_slugs.add(slug)

        if not google_place_id:
            log(f"[Batch] {slug}: missing google_place_id")
            result.fail(slug, "missing google_place_id")
            continue

        reason = process_place(place, google_place_id, client)
        if reason:
            log(f"[Batch] {slug}: {reason}")
            result.fail(slug, reason)
        else:
            result.success += 1
            log(f"[Batch] Completed {slug}")

        sleep_ms(delay_ms)

    return result


def print_summary(result: BatchResult, log: BatchLog) -> None:
    print()
    log(result.summary())

    if result.failures:
        print("\nFailures:")
        for failure in result.failures:
            print(f" - {failure['slug']}: {failure['reason']}")
            log(f"FAILED {failure['slug']}: {failure['reason']}")
        print(f"\nFull details appended to: {log.path}")
    else:
        log("All places processed successfully.")


def main():
    args = parse_args()
    input_file = os.path.abspath(args.file)
    if not os.path.exists(input_file):
        print(f"ERROR: File not found: {input_file}")
        sys.exit(1)

    log = BatchLog(BATCH_LOG_FILE)

    try:
        client = get_client()

        print_mode_banner()
        print(f"Reading: {input_file}")
        print(f"Delay between places: {args.delay_ms}ms\n")

        client.wait_until_ready()

        places = parse_places_blocks(input_file, log)
        if not places:
            print("No places found in the input file.")
            return

        print(f"{'='*60}")
        print("Batch Upload")
        print(f"{'='*60}")
        print(f"Found {len(places)} place(s)\n")

        result = run_batch_add(places, client, log, args.delay_ms)
        print_summary(result, log)

    except ConfigError as e:
        print(f"ERROR: {e}")
        sys.exit(1)
    except Exception as e:
        log(f"[Batch] Batch error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
