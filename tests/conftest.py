"""Pytest configuration and fixtures for the Strapi Places tests."""

import json
import os

import pytest

# Set test environment variables before importing config
os.environ.setdefault("MODE", "local")
os.environ.setdefault("LOCAL_STRAPI_URL", "http://strapi.test")
os.environ.setdefault("LOCAL_STRAPI_TOKEN", "test-token")
os.environ.setdefault("GOOGLE_API_KEY", "test-google-key")


@pytest.fixture
def settings():
    """Strapi settings pointing at a fake host."""
    from config import StrapiSettings
    return StrapiSettings(base_url="http://strapi.test", token="test-token", timeout=30)


@pytest.fixture
def make_response(mocker):
    """Factory for fake requests.Response objects."""
    def make(status_code: int = 200, body=None, reason: str = "OK", json_error: bool = False):
        response = mocker.MagicMock()
        response.status_code = status_code
        response.ok = status_code < 400
        response.reason = reason
        if json_error:
            response.json.side_effect = ValueError("No JSON object could be decoded")
        else:
            response.json.return_value = body
        return response
    return make


@pytest.fixture
def mock_session(mocker):
    """Mocked requests.Session."""
    return mocker.MagicMock()


@pytest.fixture
def strapi_client(settings, mock_session):
    """StrapiClient whose HTTP session is mocked."""
    from utils.strapi import StrapiClient
    return StrapiClient(settings, session=mock_session)


@pytest.fixture
def sample_google_result() -> dict:
    """A Google Places Details `result`."""
    return {
        "name": "Swartberg Wilds",
        "place_id": "ChIJqVeWhyG9eB4RttkoLwb_xKQ",
        "formatted_address": "R407, Prince Albert, 6930, South Africa",
        "address_components": [
            {"long_name": "Prince Albert", "short_name": "Prince Albert",
             "types": ["locality", "political"]},
            {"long_name": "Western Cape", "short_name": "WC",
             "types": ["administrative_area_level_1", "political"]},
        ],
        "geometry": {"location": {"lat": -33.22, "lng": 22.03}},
        "url": "https://maps.google.com/?cid=123",
        "website": "https://swartbergwilds.co.za/ ",
        "formatted_phone_number": "082 123 4567",
        "rating": 4.7,
        "user_ratings_total": 58,
        "types": ["campground", "lodging"],
        "opening_hours": {"weekday_text": ["Monday: Open 24 hours", "Tuesday: Open 24 hours"]},
        "editorial_summary": {"overview": "Remote mountain campsite."},
        "photos": [
            {"photo_reference": "ref-1", "width": 1600, "height": 1200,
             "html_attributions": ['<a href="https://maps.google.com/maps/contrib/1">Jane Doe</a>']},
            {"photo_reference": "ref-2", "width": 800, "height": 600, "html_attributions": []},
        ],
        "reviews": [
            {"author_name": "Sam", "rating": 5, "text": "Stunning.",
             "relative_time_description": "a month ago",
             "profile_photo_url": "https://lh3.googleusercontent.com/a/sam"},
        ],
    }


@pytest.fixture
def place_folder(tmp_path):
    """A harvested place folder with place.json and one photo on disk."""
    folder = tmp_path / "swartberg_wilds"
    folder.mkdir()
    place = {
        "place_id": "ChIJqVeWhyG9eB4RttkoLwb_xKQ",
        "name": "Swartberg Wilds",
        "slug": "swartberg-wilds",
        "province": "Western Cape",
        "region": "",
        "town": "Prince Albert",
        "address": "R407, Prince Albert",
        "opening_hours": "",
        "rating": 4.7,
        "total_reviews": 58,
        "latitude": -33.22,
        "longitude": 22.03,
        "contact": {"phone": "082 123 4567", "email": None, "website": None,
                    "booking_url": None, "google_info": "https://maps.google.com/?cid=123",
                    "whatsapp": None},
        "photos": [
            {"file": "photo_1.jpg", "attribution_text": "Jane Doe"},
            {"file": "photo_2.jpg", "attribution_text": ""},
        ],
        "reviews": [{"author_name": "Sam", "rating": 5, "text": "Stunning.",
                     "review_time": "a month ago"}],
    }
    (folder / "place.json").write_text(json.dumps(place), encoding="utf-8")
    (folder / "photo_1.jpg").write_bytes(b"\xff\xd8\xff")
    return folder
