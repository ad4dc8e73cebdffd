"""
Enrichment of existing Strapi places from enrichment JSON.

An enrichment file looks like {"places": [{"slug": ..., "description": ...,
"rates": [...], "tags": [...], "amenities": ["braai", ...], ...}]}.
Each entry is matched to a Strapi place by slug and only the fields that
actually change are sent back.
"""

import json
import math
import os
from dataclasses import dataclass, field
from typing import Optional, Union

from utils.merge import norm_num, norm_str, merge_rates, merge_tags, merge_repeatable, deep_equal
from utils.strapi import StrapiClient, entry_attributes, entry_document_id

TEXT_FIELDS = [
    "description",
    "the_vibe",
    "need_to_know",
    "meta_title",
    "meta_description",
    "facilities_summary",
    "ai_summary",
    "raw_data",
    "experiences_raw",
]

VIBE_AXES = [
    "comfort_rustic",
    "peaceful_social",
    "accessible_remote",
    "active_relaxed",
    "family_couple",
    "wild_managed",
]

NOTE_FIELDS = ("title", "description")

# Fields expected in a complete enrichment entry
REQUIRED_FIELDS = [
    "description",
    "province",
    "region",
    "the_vibe",
    "need_to_know",
    "rates",
    "price_pp",
    "tags",
    "amenities",
    "highlight",
    "unexpected",
    "meta_title",
    "meta_description",
    "facilities_summary",
    "ai_summary",
    "raw_data",
    "experiences_raw",
]

PLACE_FIELDS = ["id", "documentId", "slug", "name", "province", "region", "price_pp"]

PLACE_POPULATE = {
    "amenities": ["id", "documentId", "slug"],
    "rates": "*",
    "tag": "*",
    "highlight": "*",
    "unexpected": "*",
    "vibeprofile": "*",
    "seasonalguide": "*",
}


@dataclass
class EnrichmentPlan:
    """Update payload for one place plus the amenity bookkeeping behind it."""
    payload: dict = field(default_factory=dict)
    missing_amenities: list = field(default_factory=list)
    connect_document_ids: list = field(default_factory=list)
    legacy_amenity_ids: list = field(default_factory=list)


def load_enrichment(source: Union[str, dict]) -> dict:
    """Return enrichment data from a dict or a JSON file path."""
    if isinstance(source, dict):
        return source

    if not os.path.exists(source):
        raise FileNotFoundError(f"Enrichment file not found: {source}")

    with open(source, encoding="utf-8") as f:
        return json.load(f)


def inject_slug(enrichment: dict, folder: Optional[str]) -> Optional[str]:
    """
    Copy the slug from folder/place.json into the first enrichment entry
    when that entry has none.

    Returns:
        The injected slug, or None if nothing was injected
    """
    if not folder:
        return None

    place_path = os.path.join(folder, "place.json")
    if not os.path.exists(place_path):
        return None

    with open(place_path, encoding="utf-8") as f:
        slug = json.load(f).get("slug")
    if not slug:
        return None

    places = enrichment.get("places")
    if not isinstance(places, list) or not places:
        places = [{}]
        enrichment["places"] = places

    if places[0].get("slug"):
        return None

    places[0]["slug"] = slug
    print(f"[Enrich] Injected slug from place.json: {slug}")
    return slug


def build_vibe_profile(vibe: dict) -> dict:
    return {axis: norm_num(vibe.get(axis)) for axis in VIBE_AXES}


def build_seasonal_guide(guide: dict) -> dict:
    return {
        "best_season": norm_str(guide.get("best_season")),
        "avoid_season": norm_str(guide.get("avoid_season")),
        "seasonal_notes": norm_str(guide.get("seasonal_notes")),
        "long_stay_friendly": guide.get("long_stay_friendly") is True
        or guide.get("long_stay_friendly") == "true",
    }


def _relation_entries(value) -> list[dict]:
    # v4 wraps populated relations in {"data": [...]}
    if isinstance(value, dict):
        value = value.get("data")
    return [v for v in value or [] if isinstance(v, dict)]


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def resolve_amenities(requested: list, current: list[dict], amenity_map: dict,
                      plan: EnrichmentPlan) -> None:
    """Work out which requested amenity slugs still need connecting."""
    current_doc_ids = [entry_document_id(a) for a in current if entry_document_id(a)]
    current_ids = [a.get("id") for a in current if isinstance(a.get("id"), int)]

    target_doc_ids = []
    target_ids = []
    for slug in requested:
        amenity = amenity_map.get(slug)
        if not amenity:
            plan.missing_amenities.append(slug)
            continue
        if amenity.get("documentId"):
            target_doc_ids.append(amenity["documentId"])
        if isinstance(amenity.get("id"), int):
            target_ids.append(amenity["id"])

    plan.connect_document_ids = [d for d in target_doc_ids if d not in current_doc_ids]
    new_ids = [i for i in target_ids if i not in current_ids]
    plan.legacy_amenity_ids = list(dict.fromkeys(current_ids + new_ids))

    if plan.connect_document_ids:
        plan.payload["amenities"] = {"connect": plan.connect_document_ids}


def build_enrichment_payload(item: dict, current: Optional[dict] = None,
                             amenity_map: Optional[dict] = None) -> EnrichmentPlan:
    """
    Build the update payload for one enrichment entry.

    Args:
        item: one entry of the enrichment "places" list
        current: the place's current attributes from Strapi
        amenity_map: slug -> amenity, from StrapiClient.list_amenities();
            amenities are left alone when None

    Returns:
        EnrichmentPlan whose payload holds only the fields to write
    """
    current = current or {}
    plan = EnrichmentPlan()
    payload = plan.payload

    for key in TEXT_FIELDS:
        if isinstance(item.get(key), str):
            payload[key] = item[key]

    if isinstance(item.get("featured"), bool):
        payload["featured"] = item["featured"]

    # Province and region are only filled in, never overwritten
    if isinstance(item.get("province"), str) and not current.get("province"):
        payload["province"] = item["province"]
    if isinstance(item.get("region"), str) and not current.get("region"):
        payload["region"] = item["region"]

    price_pp = item.get("price_pp")
    if _is_number(price_pp) and not (isinstance(price_pp, float) and math.isnan(price_pp)):
        if price_pp != current.get("price_pp"):
            payload["price_pp"] = price_pp

    if isinstance(item.get("vibeprofile"), dict):
        payload["vibeprofile"] = build_vibe_profile(item["vibeprofile"])

    if isinstance(item.get("seasonalguide"), dict):
        payload["seasonalguide"] = build_seasonal_guide(item["seasonalguide"])

    current_rates = current.get("rates") or []
    if isinstance(item.get("rates"), list):
        merged = merge_rates(current_rates, item["rates"])
        if not deep_equal(merged, merge_rates(current_rates)):
            payload["rates"] = merged

    if isinstance(item.get("tags"), list):
        incoming_tags = item["tags"]
    elif isinstance(item.get("tag"), list):
        incoming_tags = item["tag"]
    else:
        incoming_tags = []

    current_tags = current.get("tag") or []
    if incoming_tags:
        merged = merge_tags(current_tags, incoming_tags)
        if not deep_equal(merged, merge_tags(current_tags)):
            payload["tag"] = merged

    for key in ("highlight", "unexpected"):
        if isinstance(item.get(key), list):
            existing = current.get(key) or []
            merged = merge_repeatable(existing, item[key], NOTE_FIELDS)
            if not deep_equal(merged, merge_repeatable(existing, [], NOTE_FIELDS)):
                payload[key] = merged

    if amenity_map is not None and isinstance(item.get("amenities"), list):
        resolve_amenities(item["amenities"],
                          _relation_entries(current.get("amenities")),
                          amenity_map, plan)

    return plan


def enrich_documents(enrichment: Union[str, dict], client: StrapiClient,
                     folder: Optional[str] = None) -> list[str]:
    """
    Enrich Strapi places from enrichment JSON.

    Args:
        enrichment: enrichment dict or path to an enrichment JSON file
        client: Strapi client
        folder: harvested place folder; its slug is injected when missing

    Returns:
        Slugs of the places that were updated
    """
    enrichment = load_enrichment(enrichment)
    inject_slug(enrichment, folder)

    amenity_map = client.list_amenities()

    items = enrichment.get("places") or []
    print(f"[Enrich] Enriching {len(items)} place(s)")
    updated = []

    for item in items:
        slug = item.get("slug")
        if not slug:
            print(f"[Enrich] Skipping place entry with no slug: {item}")
            continue

        place = client.find_place("slug", slug, fields=PLACE_FIELDS, populate=PLACE_POPULATE)
        if not place:
            print(f"[Enrich] Place not found for slug: {slug}")
            continue

        attrs = entry_attributes(place)
        doc_id = entry_document_id(place)
        name = place.get("name") or attrs.get("name") or slug

        plan = build_enrichment_payload(item, attrs, amenity_map)

        if plan.missing_amenities:
            print(f"[Enrich] Missing amenities (not found by slug): {', '.join(plan.missing_amenities)}")

        if not plan.payload:
            print(f"[Enrich] {name}: nothing to update")
            continue

        print(f'[Enrich] Updating "{name}" ({slug}) with fields: {", ".join(plan.payload)}')

        if "amenities" in plan.payload:
            client.update_with_relation_fallback("places", doc_id, plan.payload,
                                                 "amenities", plan.legacy_amenity_ids)
        else:
            client.update("places", doc_id, plan.payload)

        print(f"[Enrich] Updated place {doc_id}")
        updated.append(slug)

    print("[Enrich] Enrichment done")
    return updated


def field_is_filled(value) -> bool:
    if isinstance(value, list):
        return len(value) > 0
    if isinstance(value, str):
        return value.strip() != ""
    if _is_number(value):
        return not (isinstance(value, float) and math.isnan(value))
    return False


def final_checklist(enrichment: dict) -> bool:
    """
    Print a tick list of REQUIRED_FIELDS for the first enrichment entry.

    Returns:
        True if every required field is filled
    """
    places = enrichment.get("places") or [{}]
    item = places[0]

    all_good = True
    print("\nFinal Field Checklist:")
    for key in REQUIRED_FIELDS:
        ok = field_is_filled(item.get(key))
        print(f"  [{'x' if ok else ' '}] {key}")
        all_good = all_good and ok

    if all_good:
        print("\nALL GREEN: Place uploaded and enriched successfully!\n")
    else:
        print("\nSome fields are missing - check enrichment JSON.\n")

    return all_good
