"""
Normalization utilities for turning Google Places data into Strapi fields.
"""

import re
from typing import Optional


def slug_folder(name: str | None) -> str:
    """
    Folder name for a harvested place.
    - Lowercase
    - Runs of anything but letters/digits become "_"
    - No leading/trailing "_"
    """
    if not name:
        return ""

    s = re.sub(r"[^a-z0-9]+", "_", name.lower())
    return s.strip("_")


def slug_kebab(name: str | None) -> str:
    """
    URL slug for a place, e.g. "Swartberg Wilds!" -> "swartberg-wilds".
    """
    if not name:
        return ""

    s = re.sub(r"[^a-z0-9]+", "-", name.lower())
    return s.strip("-")


def strip_html(html: str | None) -> str:
    """Remove tags from an attribution snippet."""
    if not html:
        return ""
    return re.sub(r"<[^>]*>", "", html).strip()


def clean_field(value) -> Optional[str]:
    """Empty or whitespace-only values become None."""
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def first_component(components: list[dict] | None, component_type: str) -> Optional[dict]:
    """
    First Google address component carrying the given type
    (e.g. "locality", "administrative_area_level_1").
    """
    for component in components or []:
        if component_type in component.get("types", []):
            return component
    return None
