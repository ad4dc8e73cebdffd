"""
Strapi REST API client.
Wraps authentication, Strapi's bracketed query parameters, uploads and
health checks. Every call raises StrapiError on a non-2xx or non-JSON reply.
"""

import json
import os
import time
from typing import Any, Optional

import requests

from config import StrapiSettings, STRAPI_WAIT_TIMEOUT, STRAPI_WAIT_INTERVAL, get_strapi_settings


class StrapiError(Exception):
    """Strapi error with status code and decoded body."""

    def __init__(self, message: str, status_code: int = None, payload: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


def build_query(filters: Optional[dict] = None,
                fields: Optional[list[str]] = None,
                populate: Optional[dict] = None,
                page_size: Optional[int] = None) -> dict:
    """
    Build Strapi query parameters.

    Args:
        filters: {"slug": "swartberg-wilds"} -> filters[slug][$eq]=swartberg-wilds
        fields: ["id", "slug"] -> fields[0]=id&fields[1]=slug
        populate: {"rates": "*", "amenities": ["id", "slug"]} ->
            populate[rates]=*&populate[amenities][fields][0]=id&...
        page_size: pagination[pageSize]

    Returns:
        Flat dict of query parameters for requests

    Raises:
        ValueError: if a filter value is None or blank. requests drops None
            params, which would turn the lookup into an unfiltered listing.
    """
    params = {}

    for field, value in (filters or {}).items():
        if value is None or not str(value).strip():
            raise ValueError(f"Empty filter value for {field}")
        params[f"filters[{field}][$eq]"] = value

    for i, field in enumerate(fields or []):
        params[f"fields[{i}]"] = field

    for relation, target in (populate or {}).items():
        if isinstance(target, (list, tuple)):
            for i, field in enumerate(target):
                params[f"populate[{relation}][fields][{i}]"] = field
        else:
            params[f"populate[{relation}]"] = target

    if page_size:
        params["pagination[pageSize]"] = page_size

    return params


def entry_attributes(entry: dict) -> dict:
    """Strapi v4 nests fields under `attributes`; v5 returns them flat."""
    return entry.get("attributes") or entry


def entry_document_id(entry: dict):
    return entry.get("documentId") or entry_attributes(entry).get("documentId")


class StrapiClient:
    """Thin client over the Strapi REST API."""

    def __init__(self, settings: StrapiSettings, session: requests.Session = None):
        self.settings = settings
        self.session = session or requests.Session()

    @property
    def auth_headers(self) -> dict:
        return {"Authorization": f"Bearer {self.settings.token}"}

    def _url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.settings.api_url}/{path.lstrip('/')}"

    def _request(self, method: str, path: str, timeout: int = None, **kwargs) -> Any:
        response = self.session.request(
            method,
            self._url(path),
            headers=self.auth_headers,
            timeout=timeout or self.settings.timeout,
            **kwargs
        )

        try:
            body = response.json()
        except ValueError:
            raise StrapiError(
                f"Strapi response not JSON (status {response.status_code})",
                status_code=response.status_code,
            )

        if not response.ok:
            raise StrapiError(
                f"{response.status_code} {response.reason}: {json.dumps(body)}",
                status_code=response.status_code,
                payload=body,
            )

        return body

    def get(self, path: str, params: Optional[dict] = None, timeout: int = None) -> Any:
        return self._request("GET", path, params=params, timeout=timeout)

    def create(self, endpoint: str, data: dict) -> dict:
        return self._request("POST", endpoint, json={"data": data})

    def update(self, endpoint: str, document_id, data: dict, timeout: int = None) -> dict:
        return self._request("PUT", f"{endpoint}/{document_id}", json={"data": data},
                             timeout=timeout)

    def find_places(self, filters: dict, fields: Optional[list[str]] = None,
                    populate: Optional[dict] = None) -> list[dict]:
        params = build_query(filters=filters, fields=fields, populate=populate)
        return self.get("places", params=params).get("data") or []

    def find_place(self, field: str, value: str, fields: Optional[list[str]] = None,
                   populate: Optional[dict] = None) -> Optional[dict]:
        """First place whose `field` equals `value`, or None."""
        places = self.find_places({field: value}, fields=fields, populate=populate)
        return places[0] if places else None

    def upload_file(self, file_path: str) -> int:
        """
        Upload a file to the media library.

        Returns:
            Id of the created media entry
        """
        print(f"[Strapi] Preparing upload: {file_path}")
        with open(file_path, "rb") as f:
            body = self._request(
                "POST",
                "upload",
                files={"files": (os.path.basename(file_path), f)},
            )

        if not body:
            raise StrapiError(f"Upload returned no files for {file_path}")

        file_id = body[0]["id"]
        print(f"[Strapi] Uploaded {os.path.basename(file_path)} -> ID {file_id}")
        return file_id

    def list_amenities(self, page_size: int = 200) -> dict[str, dict]:
        """
        Map amenity slug -> {"id", "documentId", "slug"}.
        """
        params = build_query(fields=["id", "documentId", "slug"], page_size=page_size)
        body = self.get("amenities", params=params)

        amenities = {}
        for entry in body.get("data") or []:
            attrs = entry_attributes(entry)
            slug = entry.get("slug") or attrs.get("slug")
            if not slug:
                continue
            amenities[slug] = {
                "id": entry.get("id", attrs.get("id")),
                "documentId": entry_document_id(entry),
                "slug": slug,
            }
        return amenities

    def is_healthy(self) -> bool:
        """True when Strapi answers its health endpoint. Never raises."""
        try:
            response = self.session.get(f"{self.settings.base_url}/_health",
                                        timeout=self.settings.timeout)
            return response.ok
        except requests.exceptions.RequestException:
            return False

    def wait_until_ready(self, timeout: float = STRAPI_WAIT_TIMEOUT,
                         interval: float = STRAPI_WAIT_INTERVAL) -> None:
        """
        Poll the health endpoint until Strapi is up.

        Raises:
            StrapiError: if Strapi is not up within `timeout` seconds
        """
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if self.is_healthy():
                print("[Strapi] Strapi is up!")
                return
            print("[Strapi] Waiting for Strapi to be ready...")
            time.sleep(interval)

        raise StrapiError("Strapi did not start within timeout")

    def update_with_relation_fallback(self, endpoint: str, document_id, payload: dict,
                                      relation: str, legacy_ids: list) -> dict:
        """
        Update an entry whose payload connects a relation.

        The payload is sent as-is first (`{"connect": [documentIds]}`). If
        Strapi rejects that with a 400 validation error, the update is retried
        once with the relation as a plain list of numeric ids, which is the
        form older Strapi versions accept.
        """
        try:
            return self.update(endpoint, document_id, payload)
        except StrapiError as e:
            if relation not in payload or e.status_code != 400:
                raise
            print(f"[Strapi] Connect failed, trying fallback. Reason: {e}")

        fallback = dict(payload)
        fallback[relation] = list(legacy_ids)
        result = self.update(endpoint, document_id, fallback)
        print(f"[Strapi] Updated {endpoint}/{document_id} (fallback)")
        return result


def get_client() -> StrapiClient:
    """
    Client for the Strapi instance selected by MODE.

    Raises:
        ConfigError: if the Strapi URL or token is missing
    """
    return StrapiClient(get_strapi_settings())
