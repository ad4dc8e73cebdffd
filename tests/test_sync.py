"""Tests for syncing harvested places into Strapi."""

import pytest

from etl.sync import build_place_payload, load_place_json, sync_place
from utils.strapi import StrapiError


class TestBuildPlacePayload:
    """Test the Strapi place payload."""

    def test_payload(self, place_folder):
        harvested = load_place_json(str(place_folder))
        photos = [{"image": 11, "attribution": "Jane Doe"}]

        data = build_place_payload(harvested, photos, 11, "2025-03-01T12:00:00+00:00")

        assert data["slug"] == "swartberg-wilds"
        assert data["cover_photo"] == 11
        assert data["photos"] == photos
        assert data["opening_hours"] is None
        assert data["contact"] == [harvested["contact"]]
        assert data["reviews"] == [{
            "author_name": "Sam",
            "rating": 5,
            "text": "Stunning.",
            "review_time": "a month ago",
            "author_photo": None,
        }]
        assert data["vibeprofile"]["comfort_rustic"] is None
        assert data["seasonalguide"]["long_stay_friendly"] is False
        assert data["publishedAt"] == "2025-03-01T12:00:00+00:00"

    def test_no_cover_photo(self):
        data = build_place_payload({"name": "X", "slug": "x"}, [])

        assert "cover_photo" not in data
        assert data["contact"] == []
        assert data["total_reviews"] == 0


class TestSyncPlace:
    """Test the sync workflow against a mocked client."""

    def test_creates_new_place(self, mocker, place_folder):
        client = mocker.MagicMock()
        client.upload_file.return_value = 11
        client.find_place.return_value = None
        client.create.return_value = {"data": {"id": 1}}

        result = sync_place(str(place_folder), client)

        assert result == {"data": {"id": 1}}
        # photo_2.jpg is listed but missing on disk
        client.upload_file.assert_called_once_with(str(place_folder / "photo_1.jpg"))
        endpoint, data = client.create.call_args.args
        assert endpoint == "places"
        assert data["cover_photo"] == 11
        assert data["photos"] == [{"image": 11, "attribution": "Jane Doe"}]

    def test_updates_existing_place(self, mocker, place_folder):
        client = mocker.MagicMock()
        client.upload_file.return_value = 11
        client.find_place.return_value = {"id": 3, "documentId": "doc3"}
        client.update.return_value = {"data": {"id": 3}}

        sync_place(str(place_folder), client)

        client.find_place.assert_called_once_with("slug", "swartberg-wilds")
        assert client.update.call_args.args[:2] == ("places", "doc3")
        client.create.assert_not_called()

    def test_failed_upload_is_skipped(self, mocker, place_folder):
        client = mocker.MagicMock()
        client.upload_file.side_effect = StrapiError("upload failed", 500)
        client.find_place.return_value = None
        client.create.return_value = {"data": {}}

        sync_place(str(place_folder), client)

        data = client.create.call_args.args[1]
        assert data["photos"] == []
        assert "cover_photo" not in data

    def test_missing_place_json(self, mocker, tmp_path):
        with pytest.raises(FileNotFoundError):
            sync_place(str(tmp_path), mocker.MagicMock())

    def test_updates_v4_nested_place(self, mocker, place_folder):
        client = mocker.MagicMock()
        client.upload_file.return_value = 11
        client.find_place.return_value = {"id": 3, "attributes": {"documentId": "doc3"}}
        client.update.return_value = {"data": {"id": 3}}

        sync_place(str(place_folder), client)

        assert client.update.call_args.args[:2] == ("places", "doc3")

    def test_missing_slug_touches_nothing(self, strapi_client, mock_session, tmp_path):
        (tmp_path / "place.json").write_text('{"name": "Camp", "photos": []}', encoding="utf-8")

        with pytest.raises(ValueError):
            sync_place(str(tmp_path), strapi_client)

        mock_session.request.assert_not_called()

    def test_blank_slug_touches_nothing(self, mocker, tmp_path):
        (tmp_path / "place.json").write_text('{"name": "Camp", "slug": "  "}', encoding="utf-8")
        client = mocker.MagicMock()

        with pytest.raises(ValueError):
            sync_place(str(tmp_path), client)

        client.upload_file.assert_not_called()
        client.find_place.assert_not_called()
        client.update.assert_not_called()
        client.create.assert_not_called()
