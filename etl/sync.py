"""
Push a harvested place folder into Strapi.
Uploads photos, then creates or updates the place matched by slug.
"""

import json
import os
from datetime import datetime, timezone
from typing import Optional

import requests

from utils.merge import norm_str
from utils.strapi import StrapiClient, StrapiError, entry_document_id

EMPTY_VIBE_PROFILE = {
    "comfort_rustic": None,
    "peaceful_social": None,
    "accessible_remote": None,
    "active_relaxed": None,
    "family_couple": None,
    "wild_managed": None,
}

EMPTY_SEASONAL_GUIDE = {
    "best_season": None,
    "avoid_season": None,
    "seasonal_notes": None,
    "long_stay_friendly": False,
}


def load_place_json(folder: str) -> dict:
    place_file = os.path.join(folder, "place.json")
    if not os.path.exists(place_file):
        raise FileNotFoundError(f"place.json not found in folder: {folder}")

    with open(place_file, encoding="utf-8") as f:
        return json.load(f)


def upload_photos(client: StrapiClient, folder: str, photos: list[dict]) -> tuple[list[dict], Optional[int]]:
    """
    Upload the harvested photos listed in place.json.

    Returns:
        (photo component rows, cover photo id or None)
    """
    rows = []
    cover_photo_id = None

    for index, photo in enumerate(photos):
        file_path = os.path.join(folder, photo["file"])
        if not os.path.exists(file_path):
            print(f"[Sync] Missing photo file: {file_path}")
            continue

        print(f"[Sync] Uploading photo {index + 1}/{len(photos)}: {photo['file']}")
        try:
            file_id = client.upload_file(file_path)
        except (StrapiError, requests.exceptions.RequestException) as e:
            print(f"[Sync] Failed to upload {photo['file']}: {e}")
            continue

        if cover_photo_id is None:
            cover_photo_id = file_id
        rows.append({
            "image": file_id,
            "attribution": photo.get("attribution_text") or None,
        })

    return rows, cover_photo_id


def build_place_payload(harvested: dict, photos: list[dict],
                        cover_photo_id: Optional[int] = None,
                        published_at: str = None) -> dict:
    """Map a place.json record to the Strapi place `data` object."""
    reviews = [
        {
            "author_name": r.get("author_name") or None,
            "rating": r.get("rating") or None,
            "text": r.get("text") or None,
            "review_time": r.get("review_time") or None,
            "author_photo": None,
        }
        for r in harvested.get("reviews") or []
    ]

    contact = harvested.get("contact")
    if isinstance(contact, list):
        contacts = contact
    elif contact:
        contacts = [contact]
    else:
        contacts = []

    data = {
        "name": harvested.get("name"),
        "slug": harvested.get("slug"),
        "place_id": harvested.get("place_id"),
        "province": harvested.get("province") or None,
        "town": harvested.get("town") or None,
        "address": harvested.get("address") or None,
        "opening_hours": harvested.get("opening_hours") or None,
        "rating": harvested.get("rating") or None,
        "total_reviews": harvested.get("total_reviews") or 0,
        "latitude": harvested.get("latitude") or None,
        "longitude": harvested.get("longitude") or None,
        "photos": photos,
        "reviews": reviews,
        "contact": contacts,
        "vibeprofile": dict(EMPTY_VIBE_PROFILE),
        "seasonalguide": dict(EMPTY_SEASONAL_GUIDE),
        "publishedAt": published_at or datetime.now(timezone.utc).isoformat(),
    }

    if cover_photo_id:
        data["cover_photo"] = cover_photo_id

    return data


def sync_place(folder: str, client: StrapiClient) -> dict:
    """
    Upsert a harvested place (matched by slug) into Strapi.

    Returns:
        Strapi response body

    Raises:
        FileNotFoundError: if the folder has no place.json
        ValueError: if place.json has no slug
        StrapiError: if the create/update is rejected
    """
    harvested = load_place_json(folder)

    slug = norm_str(harvested.get("slug"))
    if not slug:
        raise ValueError(f"place.json in {folder} has no slug")

    photos, cover_photo_id = upload_photos(client, folder, harvested.get("photos") or [])
    data = build_place_payload(harvested, photos, cover_photo_id)

    print("[Sync] Checking for existing place in Strapi...")
    existing = client.find_place("slug", slug)

    print(f"[Sync] Payload preview: {json.dumps({'data': data}, indent=2)[:600]}")

    if existing:
        doc_id = entry_document_id(existing) or existing.get("id")
        print(f"[Sync] Place exists (documentId={doc_id}), updating...")
        result = client.update("places", doc_id, data)
    else:
        print("[Sync] Creating new place...")
        result = client.create("places", data)

    print(f"[Sync] Synced to Strapi: {json.dumps(result, indent=2)[:1000]}")
    return result
