"""Angle image generation, storage and record keeping.

The ``product_gallery_images`` table is the authoritative de-duplication
point: once a (product, angle) row exists it is returned as-is and the
generation gateway is never called for that pair again.
"""
import logging
import time
from collections import namedtuple
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from flask import current_app

from storefront.catalog import PRODUCTS
from storefront.errors import (
    DatabaseWriteError,
    GalleryError,
    RateLimitError,
    ValidationError,
)
from storefront.extensions import db
from storefront.models.gallery_image import GalleryImage
from storefront.services import ai_service, storage_service

logger = logging.getLogger(__name__)

GENERATED_ANGLES = GalleryImage.GENERATED_ANGLES

GenerationResult = namedtuple("GenerationResult", "image_url angle cached warning")


class BatchReport:
    """Tally of a batch run, one status per attempted (product, angle)."""

    def __init__(self):
        self.generated = 0
        self.skipped = 0
        self.failed = 0
        self.results = []

    def add(self, product_id, angle, status):
        setattr(self, status, getattr(self, status) + 1)
        self.results.append({"productId": product_id, "angle": angle, "status": status})

    def to_dict(self):
        return {
            "success": True,
            "generated": self.generated,
            "skipped": self.skipped,
            "failed": self.failed,
            "results": self.results,
        }


def storage_key(product_id, angle):
    return f"{product_id}/{angle}.png"


def find_existing(product_id, angle):
    return GalleryImage.query.filter_by(product_id=product_id, angle=angle).first()


def get_gallery(product_id):
    """Map of angle -> URL for every recorded angle of a product."""
    rows = GalleryImage.query.filter_by(product_id=product_id).all()
    return {row.angle: row.image_url for row in rows}


def record_image(product_id, angle, image_url):
    """Insert a gallery record, keeping the existing row on conflict.

    Raises:
        DatabaseWriteError when the insert fails for any other reason
    """
    row = GalleryImage(product_id=product_id, angle=angle, image_url=image_url)
    try:
        db.session.add(row)
        db.session.commit()
        return row
    except IntegrityError:
        db.session.rollback()
        logger.info("Record for %s/%s written concurrently, keeping it", product_id, angle)
        existing = find_existing(product_id, angle)
        if existing is None:
            raise DatabaseWriteError(f"Failed to record {product_id}/{angle}")
        return existing
    except SQLAlchemyError as e:
        db.session.rollback()
        raise DatabaseWriteError(f"Failed to record {product_id}/{angle}: {e}")


def _generate_and_upload(product_id, category, angle, existing_image_url):
    image_bytes = ai_service.generate_image(category, angle, existing_image_url)
    key = storage_key(product_id, angle)
    storage_service.upload(key, image_bytes, content_type="image/png")
    return storage_service.get_public_url(key)


def validate_request(data):
    """Check a single-generation request body and return its fields."""
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    fields = ("productId", "productName", "category", "angle", "existingImageUrl")
    missing = [f for f in fields if not data.get(f)]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")
    not_text = [f for f in fields if not isinstance(data[f], str)]
    if not_text:
        raise ValidationError(f"Fields must be strings: {', '.join(not_text)}")
    if data["angle"] not in GENERATED_ANGLES:
        raise ValidationError(
            f"Invalid angle '{data['angle']}', expected one of: {', '.join(GENERATED_ANGLES)}"
        )
    return {f: data[f] for f in fields}


def generate_angle(product_id, product_name, category, angle, existing_image_url):
    """Return the gallery image for one angle, generating it if needed.

    A failed record insert does not fail the call: the uploaded URL is
    returned with a warning, and the deterministic storage key makes a
    later regeneration overwrite the same object.
    """
    existing = find_existing(product_id, angle)
    if existing:
        logger.info("Using cached %s image for %s", angle, product_id)
        return GenerationResult(existing.image_url, angle, True, None)

    logger.info("Generating %s image for %s (%s)", angle, product_name, product_id)
    public_url = _generate_and_upload(product_id, category, angle, existing_image_url)

    warning = None
    try:
        record_image(product_id, angle, public_url)
    except DatabaseWriteError as e:
        logger.error("Uploaded %s but could not record it: %s", public_url, e)
        warning = e.message

    logger.info("Generated %s image for %s", angle, product_name)
    return GenerationResult(public_url, angle, False, warning)


def run_batch(existing_image_urls, sleep=time.sleep):
    """Generate every missing angle of every catalog product, in sequence.

    Per-item failures are tallied and never raised.
    """
    if not isinstance(existing_image_urls, dict):
        raise ValidationError("existingImageUrls object is required")
    ai_service.ensure_configured()

    delay = current_app.config["BATCH_DELAY_SECONDS"]
    rate_limit_delay = current_app.config["BATCH_RATE_LIMIT_DELAY_SECONDS"]
    report = BatchReport()

    for product in PRODUCTS:
        existing_image_url = existing_image_urls.get(product.id)
        if not existing_image_url:
            logger.info("No image provided for %s, skipping", product.name)
            continue

        for angle in GENERATED_ANGLES:
            pause = delay
            try:
                if find_existing(product.id, angle):
                    logger.info("%s - %s already exists, skipping", product.name, angle)
                    report.add(product.id, angle, "skipped")
                    continue

                logger.info("Generating %s for %s...", angle, product.name)
                public_url = _generate_and_upload(
                    product.id, product.category, angle, existing_image_url
                )
                record_image(product.id, angle, public_url)
                report.add(product.id, angle, "generated")
            except RateLimitError:
                logger.warning("Rate limited on %s - %s, waiting %ss", product.name, angle, rate_limit_delay)
                report.add(product.id, angle, "failed")
                pause = rate_limit_delay
            except GalleryError as e:
                logger.error("Failed %s - %s: %s", product.name, angle, e.message)
                report.add(product.id, angle, "failed")
            except SQLAlchemyError:
                db.session.rollback()
                logger.exception("Database error for %s - %s", product.name, angle)
                report.add(product.id, angle, "failed")
            except Exception:
                logger.exception("Unexpected error for %s - %s", product.name, angle)
                report.add(product.id, angle, "failed")

            sleep(pause)

    logger.info(
        "Batch generation complete: generated=%d skipped=%d failed=%d",
        report.generated,
        report.skipped,
        report.failed,
    )
    return report
