"""
Helpers shared by the batch runners.

Batch files hold several standalone JSON objects one after another:

    { "places": [ {...}, {...} ] }
    { "places": [ {...} ] }
"""

import json
import os
import re
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

PHOTO_FILE_RE = re.compile(r"^photo_\d+\.(jpg|jpeg|png)$", re.IGNORECASE)


class BatchLog:
    """Appends timestamped lines to a log file and echoes them to the console."""

    def __init__(self, path: str):
        self.path = path

    def __call__(self, line: str) -> None:
        stamp = datetime.now(timezone.utc).isoformat()
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(f"[{stamp}] {line}\n")
        print(line)


@dataclass
class BatchResult:
    total: int = 0
    success: int = 0
    failures: list = field(default_factory=list)

    def fail(self, slug: str, reason: str) -> None:
        self.failures.append({"slug": slug, "reason": reason})

    def summary(self) -> str:
        return (f"Done! {self.total} total "
                f"({self.success} success, {len(self.failures)} failed)")


def split_json_blocks(text: str) -> list[str]:
    """
    Split text into its top-level JSON objects by brace matching.
    Braces inside strings (including escaped quotes) are ignored.
    """
    parts = []
    depth = 0
    in_string = False
    escape = False
    start = -1

    for i, ch in enumerate(text):
        if in_string:
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch == "{":
            if depth == 0:
                start = i
            depth += 1
        elif ch == "}" and depth > 0:
            depth -= 1
            if depth == 0 and start != -1:
                parts.append(text[start:i + 1])
                start = -1

    return parts


def parse_places_blocks(file_path: str, log: Optional[BatchLog] = None) -> list[dict]:
    """
    Read every {"places": [...]} block in a batch file and flatten the places.
    Malformed blocks are skipped with a warning.
    """
    with open(file_path, encoding="utf-8") as f:
        raw = f.read().strip()
    if not raw:
        return []

    warn = log or print
    places = []

    for block in split_json_blocks(raw):
        try:
            obj = json.loads(block)
        except json.JSONDecodeError as e:
            warn(f"[Batch] Skipping malformed JSON block: {e}")
            continue

        block_places = obj.get("places")
        if isinstance(block_places, list):
            places.extend(p for p in block_places if isinstance(p, dict))

    return places


def has_downloaded_photos(folder: str) -> bool:
    """True if the harvest saved at least one photo_N image in folder."""
    try:
        return any(PHOTO_FILE_RE.match(name) for name in os.listdir(folder))
    except OSError:
        return False


def sleep_ms(ms: int) -> None:
    if ms > 0:
        time.sleep(ms / 1000)
