# =============================================================================
# tests/test_storage_service.py - Object Storage Tests
# =============================================================================

import base64
import re

import httpx
import pytest

from app.exceptions import StorageUploadError
from core.services.storage_service import StorageService, create_unique_filename, get_content_type

UUID_RE = r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}"


@pytest.fixture
def storage(fake_db):
    return StorageService(fake_db, bucket="uploads")


class TestCreateUniqueFilename:
    def test_slugifies_and_appends_uuid(self):
        name = create_unique_filename("My Report (final).PDF")

        assert re.fullmatch(rf"my-report-final-{UUID_RE}\.PDF", name)

    def test_long_names_are_truncated(self):
        name = create_unique_filename("x" * 200 + ".txt")

        stem = name[: -len(".txt")].rsplit("-", 5)[0]
        assert len(stem) <= 50

    def test_unsluggable_name_falls_back(self):
        assert re.fullmatch(rf"file-{UUID_RE}\.png", create_unique_filename("???.png"))

    def test_names_are_unique(self):
        assert create_unique_filename("a.txt") != create_unique_filename("a.txt")


class TestGetContentType:
    def test_known_extension(self):
        assert get_content_type("photo.png") == "image/png"

    def test_unknown_extension(self):
        assert get_content_type("blob.zzz") == "application/octet-stream"


class TestUploads:
    """Tests for writing into the bucket."""

    def test_upload_file(self, fake_db, storage):
        result = storage.upload_file(b"hello", "notes.txt", folder="uploads", content_type="text/plain")

        assert result["key"].startswith("uploads/notes-")
        assert result["size"] == 5
        assert result["public_url"].endswith(f"/uploads/{result['key']}")
        stored = fake_db.storage.objects[("uploads", result["key"])]
        assert stored == {"content": b"hello", "content_type": "text/plain"}

    def test_content_type_guessed_from_filename(self, fake_db, storage):
        result = storage.upload_file(b"%PDF", "doc.pdf")

        assert fake_db.storage.objects[("uploads", result["key"])]["content_type"] == "application/pdf"

    def test_upload_failure_raises(self, fake_db, storage):
        fake_db.storage.fail_with = RuntimeError("bucket not found")

        with pytest.raises(StorageUploadError):
            storage.upload_file(b"x", "a.txt")

    def test_upload_base64_with_data_url(self, fake_db, storage):
        data = "data:text/plain;base64," + base64.b64encode(b"hi there").decode()

        result = storage.upload_base64_file(data, "greeting.txt")

        assert fake_db.storage.objects[("uploads", result["key"])]["content"] == b"hi there"

    def test_upload_from_url(self, fake_db, storage, monkeypatch):
        def fake_get(url, **kwargs):
            return httpx.Response(
                200,
                content=b"\x89PNG",
                headers={"content-type": "image/png"},
                request=httpx.Request("GET", url),
            )

        monkeypatch.setattr(httpx, "get", fake_get)

        result = storage.upload_from_url("https://cdn.example.com/path/cat.png", folder="generated-images")

        assert re.fullmatch(rf"generated-images/cat-{UUID_RE}\.png", result["key"])
        assert fake_db.storage.objects[("uploads", result["key"])]["content_type"] == "image/png"

    def test_upload_from_url_fetch_failure(self, storage, monkeypatch):
        def fake_get(url, **kwargs):
            return httpx.Response(404, request=httpx.Request("GET", url))

        monkeypatch.setattr(httpx, "get", fake_get)

        with pytest.raises(StorageUploadError, match="Failed to fetch"):
            storage.upload_from_url("https://cdn.example.com/missing.png")

    def test_delete_file(self, fake_db, storage):
        result = storage.upload_file(b"x", "a.txt")

        storage.delete_file(result["key"])

        assert fake_db.storage.objects == {}
