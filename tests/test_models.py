"""Tests for the gallery record model and record keeping."""
import pytest
from sqlalchemy.exc import IntegrityError

from storefront.models.gallery_image import GalleryImage
from storefront.services import gallery_service


def test_gallery_image_creation(db):
    img = GalleryImage(product_id="runner-vest", angle="side", image_url="https://cdn.test/a.png")
    db.session.add(img)
    db.session.flush()

    assert img.id is not None
    assert img.to_dict() == {
        "productId": "runner-vest",
        "angle": "side",
        "imageUrl": "https://cdn.test/a.png",
    }


def test_one_row_per_product_angle(db):
    db.session.add(GalleryImage(product_id="runner-vest", angle="back", image_url="a"))
    db.session.commit()

    db.session.add(GalleryImage(product_id="runner-vest", angle="back", image_url="b"))
    with pytest.raises(IntegrityError):
        db.session.commit()
    db.session.rollback()


def test_record_image_keeps_existing_row_on_conflict(db):
    first = gallery_service.record_image("sport-goggles", "detail", "https://cdn.test/first.png")
    second = gallery_service.record_image("sport-goggles", "detail", "https://cdn.test/second.png")

    assert second.id == first.id
    assert second.image_url == "https://cdn.test/first.png"
    assert GalleryImage.query.filter_by(product_id="sport-goggles").count() == 1


def test_storage_key_is_deterministic():
    assert gallery_service.storage_key("trail-pack", "side") == "trail-pack/side.png"
