"""
Google Places harvester.
Fetches place details, downloads photos and writes a Strapi-ready place.json
into a per-place folder.
"""

import json
import os
from datetime import datetime, timezone
from typing import Optional

import requests

from config import PLACES_DIR, MAX_PHOTOS, SAVE_REVIEWER_PHOTOS
from utils.google_places import get_place_details, photo_url, download_file
from utils.normalize import slug_folder, slug_kebab, strip_html, clean_field, first_component


def google_maps_url(result: dict, place_id: str) -> str:
    """Google's own URL for the place, or a maps search URL built from its location."""
    if result.get("url"):
        return result["url"]

    location = (result.get("geometry") or {}).get("location") or {}
    lat = location.get("lat")
    lng = location.get("lng")
    return (
        "https://www.google.com/maps/search/?api=1"
        f"&query={lat},{lng}&query_place_id={place_id}"
    )


def download_photos(photos: list[dict], folder: str) -> list[dict]:
    """
    Download up to MAX_PHOTOS photos as photo_1.jpg, photo_2.jpg, ...
    Failed downloads are logged and left out.
    """
    saved = []

    for i, photo in enumerate(photos[:MAX_PHOTOS], 1):
        file_path = os.path.join(folder, f"photo_{i}.jpg")
        try:
            download_file(photo_url(photo["photo_reference"]), file_path)
        except (requests.exceptions.RequestException, KeyError, OSError) as e:
            print(f"[Harvest] Failed photo_{i}: {e}")
            continue

        print(f"[Harvest] Saved {file_path}")
        attribution = (photo.get("html_attributions") or [""])[0]
        saved.append({
            "file": os.path.basename(file_path),
            "width": photo.get("width"),
            "height": photo.get("height"),
            "attribution_html": attribution,
            "attribution_text": strip_html(attribution),
        })

    return saved


def build_reviews(reviews: list[dict], folder: Optional[str] = None,
                  save_photos: bool = SAVE_REVIEWER_PHOTOS) -> list[dict]:
    """Map Google reviews to review rows, optionally saving reviewer avatars."""
    rows = []

    for i, review in enumerate(reviews, 1):
        avatar_local = None
        avatar_url = review.get("profile_photo_url")

        if save_photos and folder and avatar_url:
            file_path = os.path.join(folder, f"reviewer_{i}.jpg")
            try:
                download_file(avatar_url, file_path)
                avatar_local = os.path.basename(file_path)
                print(f"[Harvest] Saved {file_path}")
            except (requests.exceptions.RequestException, OSError):
                avatar_local = None

        rows.append({
            "author_name": review.get("author_name") or "",
            "rating": review.get("rating"),
            "text": review.get("text") or "",
            "review_time": review.get("relative_time_description") or "",
            "author_photo_url": avatar_url or "",
            "author_photo_local": avatar_local,
        })

    return rows


def build_place_record(result: dict, place_id: str, photos: list[dict],
                       reviews: list[dict], now: datetime = None) -> dict:
    """
    Build the place.json record from a Google Details `result`.

    Region is left blank; it is filled in during enrichment.
    """
    now = now or datetime.now(timezone.utc)
    name = result.get("name") or "unknown_place"

    location = (result.get("geometry") or {}).get("location") or {}
    components = result.get("address_components") or []
    province = (first_component(components, "administrative_area_level_1") or {}).get("long_name", "")
    town = (first_component(components, "locality") or {}).get("long_name", "")

    weekday_text = (result.get("opening_hours") or {}).get("weekday_text")
    opening_hours = "; ".join(weekday_text) if isinstance(weekday_text, list) else ""

    description = (result.get("editorial_summary") or {}).get("overview") or (
        f"Auto imported from Google Places on {now.date().isoformat()} for {name}."
    )

    google_url = google_maps_url(result, place_id)

    return {
        "place_id": result.get("place_id") or place_id,
        "name": name,
        "slug": slug_kebab(name),
        "province": province,
        "region": "",
        "town": town,
        "address": result.get("formatted_address") or "",
        "opening_hours": opening_hours,
        "rating": result.get("rating"),
        "total_reviews": result.get("user_ratings_total") or 0,
        "description": description,
        "latitude": location.get("lat"),
        "longitude": location.get("lng"),
        "contact": {
            "phone": clean_field(result.get("formatted_phone_number")
                                 or result.get("international_phone_number")),
            "email": None,  # not provided by Google Places
            "website": clean_field(result.get("website")),
            "booking_url": clean_field(result.get("website")),
            "google_info": google_url,
            "whatsapp": None,
        },
        "photos": photos,
        "reviews": reviews,
        "source": {
            "types": result.get("types") or [],
            "opening_hours": result.get("opening_hours"),
            "google_place_url": google_url,
            "harvested_at": now.isoformat(),
        },
    }


def harvest_place(place_id: str, places_dir: str = PLACES_DIR) -> str:
    """
    Harvest a Google place into places_dir/<slug_folder(name)>/.

    Writes google_raw.json, photo_N.jpg files and place.json.

    Returns:
        Path of the place folder

    Raises:
        GooglePlacesError: if Google returns no place data
    """
    data = get_place_details(place_id)
    result = data["result"]

    name = result.get("name") or "unknown_place"
    folder = os.path.join(places_dir, slug_folder(name))
    os.makedirs(folder, exist_ok=True)

    with open(os.path.join(folder, "google_raw.json"), "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)

    photos = download_photos(result.get("photos") or [], folder)
    reviews = build_reviews(result.get("reviews") or [], folder)

    record = build_place_record(result, place_id, photos, reviews)

    with open(os.path.join(folder, "place.json"), "w", encoding="utf-8") as f:
        json.dump(record, f, indent=2)

    print(f"[Harvest] Harvested {name} -> {folder}")
    return folder
