"""
Merge helpers for repeatable Strapi components.

Existing component rows come straight from a Strapi query (with their `id`
fields and untrimmed strings); incoming rows come from enrichment JSON.
Each helper returns a fresh, normalized collection suitable for the update
payload. None of them raise: missing collections behave as empty and
malformed entries are skipped.
"""

import math
from typing import Any, Iterable, Optional, Sequence, Union

Number = Union[int, float]

DEFAULT_NOTE_FIELDS = ("title", "description")


def norm_str(value: Any) -> str:
    """None -> '', anything else -> stripped string."""
    if value is None:
        return ""
    return str(value).strip()


def norm_num(value: Any) -> Optional[Number]:
    """
    Coerce a numeric-like value to a number.

    Empty, non-numeric and non-finite values become None. Integral values
    are returned as int so that 150, 150.0 and "150" all compare equal.
    """
    if value is None or isinstance(value, (list, dict)):
        return None
    if isinstance(value, bool):
        return int(value)

    if not isinstance(value, (int, float)):
        value = str(value).strip()
        if not value:
            return None

    try:
        number = float(value)
    except (ValueError, OverflowError):
        return None

    if not math.isfinite(number):
        return None
    if number.is_integer():
        return int(number)
    return number


def _entries(collection: Optional[Iterable]) -> list[dict]:
    if not collection:
        return []
    return [entry for entry in collection if isinstance(entry, dict)]


def _normalize_rate(entry: dict) -> Optional[dict]:
    amount = norm_num(entry.get("amount"))
    unit = norm_str(entry.get("unit"))
    if amount is None and not unit:
        return None
    return {"amount": amount, "unit": unit}


def _rate_key(rate: dict) -> str:
    amount = "null" if rate["amount"] is None else repr(rate["amount"])
    return f"{amount}|{rate['unit'].lower()}"


def merge_rates(existing: Optional[Sequence] = None,
                incoming: Optional[Sequence] = None) -> list[dict]:
    """
    Merge rate rows keyed by (amount, lowercased unit).

    Existing rows seed the result in order; incoming rows overwrite rows with
    the same key (keeping the incoming casing) or are appended. Rows with no
    amount and no unit are dropped.
    """
    merged: dict[str, dict] = {}
    for entry in _entries(existing) + _entries(incoming):
        rate = _normalize_rate(entry)
        if rate is not None:
            merged[_rate_key(rate)] = rate
    return list(merged.values())


def merge_tags(existing: Optional[Sequence] = None,
               incoming: Optional[Sequence] = None) -> list[dict]:
    """Merge tag rows keyed by lowercased label; empty labels are dropped."""
    merged: dict[str, dict] = {}
    for entry in _entries(existing) + _entries(incoming):
        label = norm_str(entry.get("label"))
        if label:
            merged[label.lower()] = {"label": label}
    return list(merged.values())


def _normalize_note(entry: dict, key_fields: Sequence[str]) -> dict:
    return {field: norm_str(entry[field]) for field in key_fields if field in entry}


def merge_repeatable(existing: Optional[Sequence] = None,
                     incoming: Optional[Sequence] = None,
                     key_fields: Sequence[str] = DEFAULT_NOTE_FIELDS) -> list[dict]:
    """
    Merge keyless repeatable rows such as highlights and unexpected facts.

    Non-empty incoming rows replace the existing collection entirely;
    otherwise the existing rows are returned, normalized to `key_fields`.
    """
    incoming_rows = [_normalize_note(entry, key_fields) for entry in _entries(incoming)]
    incoming_rows = [row for row in incoming_rows if any(row.values())]
    if incoming_rows:
        return incoming_rows
    return [_normalize_note(entry, key_fields) for entry in _entries(existing)]


def deep_equal(a: Any, b: Any) -> bool:
    """Structural equality for JSON-like values."""
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b

    if isinstance(a, dict) and isinstance(b, dict):
        if a.keys() != b.keys():
            return False
        return all(deep_equal(a[key], b[key]) for key in a)

    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        if len(a) != len(b):
            return False
        return all(deep_equal(x, y) for x, y in zip(a, b))

    if isinstance(a, (dict, list, tuple)) or isinstance(b, (dict, list, tuple)):
        return False

    return a == b
