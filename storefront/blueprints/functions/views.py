"""HTTP functions for gallery image generation."""
import logging
from flask import jsonify, request
from werkzeug.exceptions import HTTPException

from storefront.blueprints.functions import CORS_HEADERS, functions_bp
from storefront.errors import GalleryError, ValidationError
from storefront.services import gallery_service

logger = logging.getLogger(__name__)


@functions_bp.before_request
def preflight():
    """Answer CORS pre-flight requests with an empty body."""
    if request.method == "OPTIONS":
        return "", 200


@functions_bp.after_request
def add_cors_headers(response):
    response.headers.update(CORS_HEADERS)
    return response


@functions_bp.errorhandler(GalleryError)
def handle_gallery_error(e):
    return jsonify({"error": e.message}), e.status_code


@functions_bp.errorhandler(Exception)
def handle_unexpected_error(e):
    if isinstance(e, HTTPException):
        return e
    logger.exception("Unhandled error in %s", request.path)
    return jsonify({"error": "Internal server error"}), 500


def _json_body():
    data = request.get_json(silent=True)
    if data is None:
        raise ValidationError("Request body must be valid JSON")
    return data


@functions_bp.route("/generate-product-images", methods=["POST", "OPTIONS"])
def generate_product_images():
    """Generate (or return the cached) image for one product angle."""
    fields = gallery_service.validate_request(_json_body())

    result = gallery_service.generate_angle(
        product_id=fields["productId"],
        product_name=fields["productName"],
        category=fields["category"],
        angle=fields["angle"],
        existing_image_url=fields["existingImageUrl"],
    )

    body = {"imageUrl": result.image_url, "angle": result.angle}
    if result.cached:
        body["cached"] = True
    if result.warning:
        body["warning"] = result.warning
    return jsonify(body)


@functions_bp.route("/batch-generate-gallery", methods=["POST", "OPTIONS"])
def batch_generate_gallery():
    """Generate every missing gallery angle for the catalog.

    Always 200 once the input is valid; per-item failures are reported in
    the counts and results.
    """
    data = _json_body()
    existing = data.get("existingImageUrls") if isinstance(data, dict) else None
    report = gallery_service.run_batch(existing)
    return jsonify(report.to_dict())


@functions_bp.route("/product-gallery/<product_id>", methods=["GET", "OPTIONS"])
def product_gallery(product_id):
    """Recorded angle URLs for a product."""
    return jsonify(
        {"productId": product_id, "images": gallery_service.get_gallery(product_id)}
    )
