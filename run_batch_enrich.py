#!/usr/bin/env python3
"""
Update enrichment fields of existing places (no photos, no Google sync).

Usage:
    MODE=cloud python run_batch_enrich.py myCampsites.json [--delay-ms N]

Each entry is matched by google_place_id (or place_id), falling back to
slug. Lookups and updates are retried; items are paced to avoid
overloading Strapi.
"""

import argparse
import json
import os
import sys

import requests
from tenacity import (
    Retrying,
    stop_after_attempt,
    wait_fixed,
    retry_if_exception_type,
    retry_if_result,
)

from config import BATCH_DELAY_MS, UPDATE_TIMEOUT, ConfigError, print_mode_banner
from etl.batch import BatchResult, parse_places_blocks, sleep_ms
from etl.enrich import PLACE_FIELDS, PLACE_POPULATE, build_enrichment_payload
from utils.strapi import StrapiClient, StrapiError, entry_attributes, entry_document_id, get_client

RETRY_ATTEMPTS = 3
LOOKUP_RETRY_SECONDS = 2
UPDATE_RETRY_SECONDS = 4

# Enrichment updates leave amenity relations alone
ENRICH_POPULATE = {k: v for k, v in PLACE_POPULATE.items() if k != "amenities"}

TRANSIENT_ERRORS = (StrapiError, requests.exceptions.RequestException)


def _log_retry(label: str):
    def log(retry_state):
        outcome = retry_state.outcome
        reason = outcome.exception() if outcome.failed else "no result"
        print(f"[Batch] {label} failed ({retry_state.attempt_number}/{RETRY_ATTEMPTS}): {reason}")
    return log


def find_place_with_retry(client: StrapiClient, field: str, value: str,
                          wait_seconds: float = LOOKUP_RETRY_SECONDS) -> dict | None:
    """Look a place up, retrying on errors and empty results. None if never found."""
    retrying = Retrying(
        stop=stop_after_attempt(RETRY_ATTEMPTS),
        wait=wait_fixed(wait_seconds),
        retry=retry_if_exception_type(TRANSIENT_ERRORS) | retry_if_result(lambda place: place is None),
        retry_error_callback=lambda retry_state: None,
        before_sleep=_log_retry("Fetch"),
    )
    return retrying(client.find_place, field, value, fields=PLACE_FIELDS, populate=ENRICH_POPULATE)


def update_with_retry(client: StrapiClient, document_id, payload: dict,
                      wait_seconds: float = UPDATE_RETRY_SECONDS) -> dict:
    """
    Update a place, retrying transient failures.

    Raises:
        StrapiError / requests.exceptions.RequestException after the last attempt
    """
    retrying = Retrying(
        stop=stop_after_attempt(RETRY_ATTEMPTS),
        wait=wait_fixed(wait_seconds),
        retry=retry_if_exception_type(TRANSIENT_ERRORS),
        before_sleep=_log_retry("Update"),
        reraise=True,
    )
    return retrying(client.update, "places", document_id, payload, timeout=UPDATE_TIMEOUT)


def enrich_item(item: dict, client: StrapiClient, result: BatchResult,
                lookup_wait: float = LOOKUP_RETRY_SECONDS,
                update_wait: float = UPDATE_RETRY_SECONDS) -> bool:
    """
    Enrich one existing place. Failures are recorded on `result`.

    Returns:
        True if the place was updated
    """
    google_id = item.get("google_place_id") or item.get("place_id")
    slug = item.get("slug")

    if not google_id and not slug:
        print("[Batch] Skipping item (no slug or google_place_id).")
        result.fail("unknown", "missing identifier")
        return False

    field, value = ("place_id", google_id) if google_id else ("slug", slug)
    place = find_place_with_retry(client, field, value, lookup_wait)
    if not place:
        print(f"[Batch] Place not found for {field}={value}")
        result.fail(slug or value, "place not found")
        return False

    attrs = entry_attributes(place)
    doc_id = entry_document_id(place)
    name = place.get("name") or attrs.get("name") or slug or "(unnamed)"

    payload = build_enrichment_payload(item, attrs).payload
    if not payload:
        print(f"[Batch] No enrichment data for {name}, skipping.")
        return False

    size_kb = len(json.dumps(payload)) / 1024
    print(f"[Batch] Payload size: {size_kb:.1f} KB")

    try:
        update_with_retry(client, doc_id, payload, update_wait)
    except TRANSIENT_ERRORS as e:
        print(f'[Batch] Failed to update "{name}": {e}')
        result.fail(slug or value, "update failed")
        return False

    print(f'[Batch] Updated enrichment for "{name}" ({slug})')
    result.success += 1
    return True


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Update enrichment fields for existing Strapi places"
    )
    parser.add_argument("file", help="JSON file with {\"places\": [...]} blocks")
    parser.add_argument(
        "--delay-ms",
        type=int,
        default=BATCH_DELAY_MS,
        help=f"Delay between places in ms (default: {BATCH_DELAY_MS})"
    )
    return parser.parse_args()


def main():
    args = parse_args()
    file_path = os.path.abspath(args.file)
    if not os.path.exists(file_path):
        print(f"ERROR: File not found: {file_path}")
        sys.exit(1)

    items = parse_places_blocks(file_path)
    if not items:
        print("ERROR: No valid places found in file.")
        sys.exit(1)

    try:
        client = get_client()
    except ConfigError as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    print_mode_banner()
    print(f"Loaded {len(items)} place entries for enrichment.\n")

    result = BatchResult(total=len(items))

    for i, item in enumerate(items, 1):
        print(f"\nProcessing {i}/{len(items)}: {item.get('slug') or item.get('google_place_id')}")
        enrich_item(item, client, result)
        sleep_ms(args.delay_ms)

    print(f"\n{'='*60}")
    print("Enrichment Update Complete")
    print(f"{'='*60}")
    print(f"Updated: {result.success}")
    print(f"Failed: {len(result.failures)}")

    if result.failures:
        print("\nFailed items:")
        for failure in result.failures:
            print(f" - {failure['slug']}: {failure['reason']}")


if __name__ == "__main__":
    main()
