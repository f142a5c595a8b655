"""Tests for the single-angle generation function."""
from storefront.errors import (
    DatabaseWriteError,
    QuotaError,
    RateLimitError,
    StorageError,
)
from storefront.models.gallery_image import GalleryImage
from storefront.services import gallery_service

DATA_URL = "data:image/jpeg;base64,/9j/4AAQSkZJRg=="

URL = "/functions/v1/generate-product-images"


def _payload(**overrides):
    data = {
        "productId": "velocity-pro",
        "productName": "Velocity Pro",
        "category": "Shoes",
        "angle": "side",
        "existingImageUrl": DATA_URL,
    }
    data.update(overrides)
    return data


def test_existing_record_returned_without_generation(client, db, fake_backends):
    db.session.add(
        GalleryImage(product_id="velocity-pro", angle="side", image_url="https://cdn.test/old.png")
    )
    db.session.commit()

    resp = client.post(URL, json=_payload())
    assert resp.status_code == 200
    data = resp.get_json()
    assert data == {"imageUrl": "https://cdn.test/old.png", "angle": "side", "cached": True}
    assert fake_backends["generate"] == []
    assert fake_backends["upload"] == []


def test_generates_uploads_and_records(client, db, fake_backends):
    resp = client.post(URL, json=_payload(angle="back"))
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["imageUrl"] == "https://cdn.test/product-gallery/velocity-pro/back.png"
    assert data["angle"] == "back"
    assert "cached" not in data

    assert fake_backends["generate"] == [("Shoes", "back")]
    assert fake_backends["upload"] == ["velocity-pro/back.png"]
    row = gallery_service.find_existing("velocity-pro", "back")
    assert row.image_url == data["imageUrl"]

    # Second call is served from the record
    resp = client.post(URL, json=_payload(angle="back"))
    assert resp.get_json()["cached"] is True
    assert len(fake_backends["generate"]) == 1


def test_missing_fields_rejected(client, fake_backends):
    resp = client.post(URL, json={"productId": "velocity-pro", "angle": "side"})
    assert resp.status_code == 400
    assert "productName" in resp.get_json()["error"]
    assert fake_backends["generate"] == []


def test_front_angle_rejected(client, fake_backends):
    resp = client.post(URL, json=_payload(angle="front"))
    assert resp.status_code == 400
    assert "Invalid angle" in resp.get_json()["error"]


def test_invalid_json_rejected(client):
    resp = client.post(URL, data="not json", content_type="application/json")
    assert resp.status_code == 400


def test_rate_limit_surfaced(client, db, fake_backends, monkeypatch):
    def limited(*args):
        raise RateLimitError("Rate limit exceeded. Please try again later.")

    monkeypatch.setattr(gallery_service.ai_service, "generate_image", limited)
    resp = client.post(URL, json=_payload())
    assert resp.status_code == 429
    assert resp.get_json()["error"].startswith("Rate limit exceeded")
    assert fake_backends["upload"] == []


def test_quota_surfaced(client, db, fake_backends, monkeypatch):
    def no_credits(*args):
        raise QuotaError("Payment required. Please add credits.")

    monkeypatch.setattr(gallery_service.ai_service, "generate_image", no_credits)
    resp = client.post(URL, json=_payload())
    assert resp.status_code == 402


def test_missing_api_key_is_configuration_error(client, app, db, monkeypatch):
    monkeypatch.setitem(app.config, "AI_GATEWAY_API_KEY", "")
    resp = client.post(URL, json=_payload())
    assert resp.status_code == 500
    assert resp.get_json()["error"] == "API key not configured"


def test_storage_failure_skips_record(client, db, fake_backends, monkeypatch):
    def broken_upload(*args, **kwargs):
        raise StorageError("bucket unavailable")

    monkeypatch.setattr(gallery_service.storage_service, "upload", broken_upload)
    resp = client.post(URL, json=_payload(angle="detail"))
    assert resp.status_code == 500
    assert gallery_service.find_existing("velocity-pro", "detail") is None


def test_record_failure_still_returns_url(client, db, fake_backends, monkeypatch):
    def broken_insert(*args):
        raise DatabaseWriteError("insert failed")

    monkeypatch.setattr(gallery_service, "record_image", broken_insert)
    resp = client.post(URL, json=_payload())
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["imageUrl"].endswith("velocity-pro/side.png")
    assert data["warning"] == "insert failed"


def test_preflight_has_cors_and_no_body(client):
    resp = client.open(URL, method="OPTIONS")
    assert resp.status_code == 200
    assert resp.data == b""
    assert resp.headers["Access-Control-Allow-Origin"] == "*"
    assert "content-type" in resp.headers["Access-Control-Allow-Headers"]


def test_error_responses_carry_cors(client):
    resp = client.post(URL, json={})
    assert resp.status_code == 400
    assert resp.headers["Access-Control-Allow-Origin"] == "*"


def test_product_gallery_lists_recorded_angles(client, db):
    db.session.add(GalleryImage(product_id="trail-cap", angle="side", image_url="u-side"))
    db.session.add(GalleryImage(product_id="trail-cap", angle="detail", image_url="u-detail"))
    db.session.commit()

    resp = client.get("/functions/v1/product-gallery/trail-cap")
    assert resp.status_code == 200
    assert resp.get_json() == {
        "productId": "trail-cap",
        "images": {"side": "u-side", "detail": "u-detail"},
    }


def test_non_string_fields_rejected(client, fake_backends):
    resp = client.post(URL, json=_payload(category=7, productName=["Velocity"]))
    assert resp.status_code == 400
    error = resp.get_json()["error"]
    assert "category" in error
    assert "productName" in error
    assert fake_backends["generate"] == []
