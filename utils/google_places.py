"""
Google Places API integration.
Finds place IDs by text search, fetches place details and downloads photos.
"""

import re
import requests
from typing import Optional, Sequence
from tenacity import retry, stop_after_attempt, wait_incrementing, retry_if_exception_type

from config import (
    GOOGLE_API_KEY,
    GOOGLE_PLACES_ENDPOINT,
    DEFAULT_SEARCH_REGION,
    PHOTO_MAX_WIDTH,
    REQUEST_TIMEOUT,
)

DETAIL_FIELDS = [
    "name",
    "place_id",
    "formatted_address",
    "address_component",
    "geometry/location",
    "url",
    "website",
    "formatted_phone_number",
    "international_phone_number",
    "rating",
    "user_ratings_total",
    "photos",
    "reviews",
    "opening_hours",
    "type",
    "editorial_summary",
]

CAMPSITE_TYPES = ("campground", "rv_park")


class GooglePlacesError(Exception):
    """Raised when Google returns no usable place data."""


def build_search_query(name: str, town: str = "", region: str = DEFAULT_SEARCH_REGION) -> str:
    """Join the non-empty parts of a text search, e.g. "Name,Town,Western Cape"."""
    parts = [p.strip() for p in (name, town, region) if p and p.strip()]
    return re.sub(r",\s+", ",", ",".join(parts))


@retry(
    stop=stop_after_attempt(3),
    wait=wait_incrementing(start=1, increment=1),
    retry=retry_if_exception_type(requests.exceptions.RequestException),
    reraise=True,
)
def _find_place_candidates(query: str) -> list[dict]:
    url = f"{GOOGLE_PLACES_ENDPOINT}/findplacefromtext/json"

    params = {
        "input": query,
        "inputtype": "textquery",
        "fields": "place_id,name,formatted_address,types",
        "key": GOOGLE_API_KEY
    }

    response = requests.get(url, params=params, timeout=8)
    response.raise_for_status()
    return response.json().get("candidates") or []


def find_place(name: str, town: str = "", region: str = DEFAULT_SEARCH_REGION,
               require_types: Sequence[str] = CAMPSITE_TYPES) -> Optional[dict]:
    """
    Find the Google Place for a named venue.

    The first candidate is only accepted when it carries one of
    `require_types` (pass an empty sequence to accept any type).

    Returns:
        {"place_id", "formatted_address", "types"} or None
    """
    query = build_search_query(name, town, region)

    try:
        candidates = _find_place_candidates(query)
    except requests.exceptions.RequestException as e:
        print(f"[Google] Error finding place for {name}: {e}")
        return None

    if not candidates:
        return None

    place = candidates[0]
    types = place.get("types") or []
    if require_types and not any(t in types for t in require_types):
        return None

    return {
        "place_id": place.get("place_id", ""),
        "formatted_address": place.get("formatted_address", ""),
        "types": types,
    }


def get_place_details(place_id: str) -> dict:
    """
    Get the full Details response for a Place ID.

    Raises:
        GooglePlacesError: when the response carries no `result`
        requests.exceptions.RequestException: on transport errors
    """
    url = f"{GOOGLE_PLACES_ENDPOINT}/details/json"

    params = {
        "place_id": place_id,
        "fields": ",".join(DETAIL_FIELDS),
        "key": GOOGLE_API_KEY
    }

    response = requests.get(url, params=params, timeout=REQUEST_TIMEOUT)
    data = response.json()

    if not data.get("result"):
        status = data.get("status", "UNKNOWN")
        message = data.get("error_message", "")
        print(f"[Google] No place data for {place_id}: {status} {message}".rstrip())
        raise GooglePlacesError(f"No place data returned from Google ({status})")

    return data


def photo_url(photo_reference: str, max_width: int = PHOTO_MAX_WIDTH) -> str:
    """URL of the Places Photo endpoint for a photo reference."""
    request = requests.Request(
        "GET",
        f"{GOOGLE_PLACES_ENDPOINT}/photo",
        params={
            "maxwidth": max_width,
            "photo_reference": photo_reference,
            "key": GOOGLE_API_KEY,
        },
    )
    return request.prepare().url


def download_file(url: str, out_path: str) -> str:
    """
    Download a binary file to out_path.

    Raises:
        requests.exceptions.RequestException: on transport or HTTP errors
    """
    response = requests.get(url, timeout=REQUEST_TIMEOUT)
    response.raise_for_status()

    with open(out_path, "wb") as f:
        f.write(response.content)

    return out_path
