"""
Admin gallery integration tests.

Verifies:
- Every admin gallery route requires an admin token
- Listing is newest first with the hotel category joined
- JSON and multipart creation, metadata validated before upload
- Single and bulk deletion keep rows whose Cloudinary asset survived
"""
from datetime import datetime, timedelta, timezone

import pytest
from cloudinary.exceptions import Error as CloudinaryError
from fastapi.testclient import TestClient

from app.config import settings
from app.models import GalleryImage, HotelCategory
from app.utils.jwt_auth import create_access_token


def _image(public_id: str, minutes_ago: int = 0, **kwargs) -> GalleryImage:
    created = datetime.now(timezone.utc) - timedelta(minutes=minutes_ago)
    return GalleryImage(
        url=f"https://res.cloudinary.com/test-cloud/image/upload/v1/{public_id}.jpg",
        public_id=public_id,
        category=kwargs.pop("category", "rooms"),
        created_at=created,
        **kwargs,
    )


class TestAuthorization:
    """Requests without a valid admin token are 401 regardless of payload."""

    @pytest.mark.parametrize("method,path,kwargs", [
        ("get", "/api/admin/gallery", {}),
        ("post", "/api/admin/gallery", {"json": {"category": "rooms", "url": "https://x/y.jpg", "publicId": "y"}}),
        ("post", "/api/admin/gallery", {"json": {"category": ""}}),
        ("post", "/api/admin/gallery", {"files": {"file": ("a.txt", b"nope", "text/plain")}}),
        ("delete", "/api/admin/gallery/1", {}),
        ("post", "/api/admin/gallery/bulk-delete", {"json": {"ids": []}}),
        ("post", "/api/admin/gallery/bulk-delete", {
            "content": b"{not json", "headers": {"content-type": "application/json"},
        }),
        ("post", "/api/admin/gallery", {
            "content": b"{not json", "headers": {"content-type": "application/json"},
        }),
    ])
    def test_missing_token(self, client: TestClient, fake_cloudinary, method, path, kwargs):
        response = getattr(client, method)(path, **kwargs)

        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}
        assert fake_cloudinary.uploads == []
        assert fake_cloudinary.destroys == []

    def test_invalid_token(self, client: TestClient):
        response = client.get("/api/admin/gallery", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}

    def test_non_admin_token(self, client: TestClient):
        token = create_access_token({"role": "guest", "sub": "someone"})

        response = client.get("/api/admin/gallery", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    def test_expired_token(self, client: TestClient):
        token = create_access_token({"role": "admin", "sub": "hotel_admin"}, expires_delta=timedelta(seconds=-10))

        response = client.get("/api/admin/gallery", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    def test_cookie_token(self, client: TestClient, admin_token: str):
        client.cookies.set("admin_token", admin_token)

        response = client.get("/api/admin/gallery")

        assert response.status_code == 200


class TestListGallery:
    """GET /api/admin/gallery"""

    def test_empty(self, admin_client: TestClient):
        response = admin_client.get("/api/admin/gallery")

        assert response.status_code == 200
        assert response.json() == {"success": True, "data": []}

    def test_newest_first_with_category(self, admin_client: TestClient, seed):
        category, = seed(HotelCategory(title="Deluxe AC Room", slug="deluxe-ac"))
        seed(
            _image("dolly-hotel/oldest", minutes_ago=30),
            _image("dolly-hotel/newest", minutes_ago=1, category_id=category.id, caption="Bed"),
            _image("dolly-hotel/middle", minutes_ago=10),
        )

        response = admin_client.get("/api/admin/gallery")

        assert response.status_code == 200
        data = response.json()["data"]
        assert [img["publicId"] for img in data] == [
            "dolly-hotel/newest", "dolly-hotel/middle", "dolly-hotel/oldest",
        ]
        assert data[0]["caption"] == "Bed"
        assert data[0]["categoryId"] == category.id
        assert data[0]["hotelCategory"] == {"id": category.id, "title": "Deluxe AC Room", "slug": "deluxe-ac"}
        assert data[1]["hotelCategory"] is None
        assert "createdAt" in data[0]


class TestCreateFromJson:
    """POST /api/admin/gallery with an already uploaded asset"""

    def test_creates_record_without_upload(self, admin_client: TestClient, fake_cloudinary, seed):
        category, = seed(HotelCategory(title="Suite", slug="suite"))

        response = admin_client.post("/api/admin/gallery", json={
            "category": "rooms",
            "caption": "  Sea view  ",
            "url": "https://res.cloudinary.com/test-cloud/image/upload/v1/dolly-hotel/suite.jpg",
            "publicId": "dolly-hotel/suite",
            "categoryId": str(category.id),
        })

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["publicId"] == "dolly-hotel/suite"
        assert body["data"]["caption"] == "Sea view"
        assert body["data"]["hotelCategory"]["slug"] == "suite"
        assert fake_cloudinary.uploads == []

        listed = admin_client.get("/api/admin/gallery").json()["data"]
        assert [img["id"] for img in listed] == [body["data"]["id"]]

    def test_blank_caption_becomes_null(self, admin_client: TestClient):
        response = admin_client.post("/api/admin/gallery", json={
            "category": "lobby",
            "caption": "   ",
            "url": "https://res.cloudinary.com/test-cloud/image/upload/v1/lobby.jpg",
            "publicId": "lobby",
        })

        assert response.status_code == 200
        assert response.json()["data"]["caption"] is None

    @pytest.mark.parametrize("payload", [
        {"category": "rooms", "publicId": "x"},
        {"category": "rooms", "url": "https://x/y.jpg"},
        {"category": "rooms", "url": "", "publicId": ""},
    ])
    def test_requires_url_and_public_id(self, admin_client: TestClient, count_rows, payload):
        response = admin_client.post("/api/admin/gallery", json=payload)

        assert response.status_code == 400
        assert response.json() == {"error": "URL and public ID are required"}
        assert count_rows(GalleryImage) == 0

    @pytest.mark.parametrize("payload", [
        {"category": "", "url": "https://x/y.jpg", "publicId": "y"},
        {"category": "r" * 101, "url": "https://x/y.jpg", "publicId": "y"},
        {"category": "rooms", "caption": "c" * 501, "url": "https://x/y.jpg", "publicId": "y"},
        {"category": "rooms", "categoryId": "abc", "url": "https://x/y.jpg", "publicId": "y"},
        {"category": "rooms", "categoryId": -3, "url": "https://x/y.jpg", "publicId": "y"},
        {"category": "rooms", "url": 123, "publicId": "y"},
        {"category": "rooms", "url": "https://x/y.jpg", "publicId": ["y"]},
        {"category": "rooms", "url": "   ", "publicId": "y"},
    ])
    def test_invalid_metadata(self, admin_client: TestClient, count_rows, payload):
        response = admin_client.post("/api/admin/gallery", json=payload)

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Validation error"
        assert body["detail"]
        assert count_rows(GalleryImage) == 0

    def test_unknown_category(self, admin_client: TestClient, count_rows):
        response = admin_client.post("/api/admin/gallery", json={
            "category": "rooms", "url": "https://x/y.jpg", "publicId": "y", "categoryId": 999,
        })

        assert response.status_code == 400
        assert "999" in response.json()["error"]
        assert count_rows(GalleryImage) == 0


class TestCreateFromUpload:
    """POST /api/admin/gallery with a multipart file"""

    def test_uploads_then_persists(self, admin_client: TestClient, fake_cloudinary, image_bytes):
        response = admin_client.post(
            "/api/admin/gallery",
            data={"category": "rooms", "caption": "Twin beds"},
            files={"file": ("twin.jpg", image_bytes, "image/jpeg")},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert len(fake_cloudinary.uploads) == 1
        assert fake_cloudinary.uploads[0]["resource_type"] == "image"
        assert data["publicId"] == "dolly-hotel/asset1"
        assert data["url"].startswith("https://res.cloudinary.com/test-cloud/image/upload/")
        assert data["caption"] == "Twin beds"

    def test_upload_without_webp_conversion(self, admin_client: TestClient, fake_cloudinary, image_bytes, monkeypatch):
        monkeypatch.setattr(settings, "GALLERY_WEBP_CONVERSION", False)

        response = admin_client.post(
            "/api/admin/gallery",
            data={"category": "rooms"},
            files={"file": ("twin.jpg", image_bytes, "image/jpeg")},
        )

        assert response.status_code == 200
        assert fake_cloudinary.uploads[0]["file"] == image_bytes

    def test_missing_file(self, admin_client: TestClient, fake_cloudinary):
        response = admin_client.post(
            "/api/admin/gallery",
            data={"category": "rooms"},
            files={"other": ("x.jpg", b"x", "image/jpeg")},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "No file provided"
        assert fake_cloudinary.uploads == []

    def test_rejects_video(self, admin_client: TestClient, fake_cloudinary):
        response = admin_client.post(
            "/api/admin/gallery",
            data={"category": "rooms"},
            files={"file": ("tour.mp4", b"video", "video/mp4")},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Only image files are allowed"
        assert fake_cloudinary.uploads == []

    def test_metadata_validated_before_upload(self, admin_client: TestClient, fake_cloudinary, image_bytes, count_rows):
        response = admin_client.post(
            "/api/admin/gallery",
            data={"category": "rooms", "categoryId": "not-a-number"},
            files={"file": ("twin.jpg", image_bytes, "image/jpeg")},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Validation error"
        assert fake_cloudinary.uploads == []
        assert count_rows(GalleryImage) == 0

    def test_missing_category(self, admin_client: TestClient, fake_cloudinary, image_bytes):
        response = admin_client.post(
            "/api/admin/gallery",
            files={"file": ("twin.jpg", image_bytes, "image/jpeg")},
        )

        assert response.status_code == 400
        assert fake_cloudinary.uploads == []

    def test_upstream_failure_persists_nothing(self, admin_client: TestClient, fake_cloudinary, image_bytes, count_rows):
        fake_cloudinary.upload_error = CloudinaryError("Invalid API key")

        response = admin_client.post(
            "/api/admin/gallery",
            data={"category": "rooms"},
            files={"file": ("twin.jpg", image_bytes, "image/jpeg")},
        )

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Failed to upload image"
        assert body["detail"] == "Invalid API key"
        assert count_rows(GalleryImage) == 0

    def test_missing_credentials(self, admin_client: TestClient, fake_cloudinary, image_bytes, monkeypatch):
        monkeypatch.setattr(settings, "CLOUDINARY_API_SECRET", "")

        response = admin_client.post(
            "/api/admin/gallery",
            data={"category": "rooms"},
            files={"file": ("twin.jpg", image_bytes, "image/jpeg")},
        )

        assert response.status_code == 500
        assert response.json()["missing"] == ["CLOUDINARY_API_SECRET"]
        assert fake_cloudinary.uploads == []


class TestDeleteImage:
    """DELETE /api/admin/gallery/{id}"""

    def test_deletes_asset_and_row(self, admin_client: TestClient, fake_cloudinary, seed, count_rows):
        image, = seed(_image("dolly-hotel/room1"))

        response = admin_client.delete(f"/api/admin/gallery/{image.id}")

        assert response.status_code == 200
        assert response.json()["id"] == image.id
        assert fake_cloudinary.destroys[0]["public_id"] == "dolly-hotel/room1"
        assert fake_cloudinary.destroys[0]["resource_type"] == "image"
        assert count_rows(GalleryImage) == 0

    def test_asset_already_gone_removes_row(self, admin_client: TestClient, fake_cloudinary, seed, count_rows):
        image, = seed(_image("dolly-hotel/room1"))
        fake_cloudinary.destroy_results["dolly-hotel/room1"] = "not found"

        response = admin_client.delete(f"/api/admin/gallery/{image.id}")

        assert response.status_code == 200
        assert count_rows(GalleryImage) == 0

    def test_unexpected_result_keeps_row(self, admin_client: TestClient, fake_cloudinary, seed, count_rows):
        image, = seed(_image("dolly-hotel/room1"))
        fake_cloudinary.destroy_results["dolly-hotel/room1"] = "error"

        response = admin_client.delete(f"/api/admin/gallery/{image.id}")

        assert response.status_code == 502
        assert response.json()["result"] == "error"
        assert count_rows(GalleryImage) == 1

    def test_transport_failure_keeps_row(self, admin_client: TestClient, fake_cloudinary, seed, count_rows):
        image, = seed(_image("dolly-hotel/room1"))
        fake_cloudinary.destroy_error = CloudinaryError("timeout")

        response = admin_client.delete(f"/api/admin/gallery/{image.id}")

        assert response.status_code == 500
        assert count_rows(GalleryImage) == 1

    def test_unknown_id(self, admin_client: TestClient, fake_cloudinary):
        response = admin_client.delete("/api/admin/gallery/4242")

        assert response.status_code == 404
        assert fake_cloudinary.destroys == []


class TestBulkDelete:
    """POST /api/admin/gallery/bulk-delete"""

    def test_partial_failure(self, admin_client: TestClient, fake_cloudinary, seed, count_rows):
        kept, gone = seed(_image("dolly-hotel/kept"), _image("dolly-hotel/gone"))
        fake_cloudinary.destroy_results["dolly-hotel/kept"] = "error"

        response = admin_client.post(
            "/api/admin/gallery/bulk-delete",
            json={"ids": [kept.id, gone.id, 999]},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is False
        assert body["deleted_ids"] == [gone.id]
        failed = {item["id"]: item for item in body["failed"]}
        assert failed[999]["error"] == "Image not found"
        assert failed[kept.id]["result"] == "error"
        assert count_rows(GalleryImage) == 1

    def test_all_deleted(self, admin_client: TestClient, fake_cloudinary, seed, count_rows):
        images = seed(_image("dolly-hotel/a"), _image("dolly-hotel/b"))

        response = admin_client.post(
            "/api/admin/gallery/bulk-delete",
            json={"ids": [img.id for img in images]},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert sorted(body["deleted_ids"]) == sorted(img.id for img in images)
        assert body["failed"] == []
        assert len(fake_cloudinary.destroys) == 2
        assert count_rows(GalleryImage) == 0

    @pytest.mark.parametrize("payload", [{"ids": []}, {"ids": [1, 1]}, {}])
    def test_invalid_payload(self, admin_client: TestClient, payload):
        response = admin_client.post("/api/admin/gallery/bulk-delete", json=payload)

        assert response.status_code == 400
        assert response.json()["error"] == "Validation error"

    @pytest.mark.parametrize("content,error", [
        (b"{not json", "Request body is not valid JSON"),
        (b"[1, 2]", "Request body must be a JSON object"),
    ])
    def test_malformed_body(self, admin_client: TestClient, fake_cloudinary, content, error):
        response = admin_client.post(
            "/api/admin/gallery/bulk-delete",
            content=content,
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json() == {"error": error}
        assert fake_cloudinary.destroys == []
