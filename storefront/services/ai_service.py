import logging
import httpx
from flask import current_app

from storefront.errors import (
    ConfigurationError,
    GenerationError,
    QuotaError,
    RateLimitError,
)
from storefront.services import image_service

logger = logging.getLogger(__name__)


STUDIO_STYLE = (
    "Professional product photography, studio lighting, white background, "
    "high quality."
)

ANGLE_PROMPTS = {
    "side": (
        "Show this exact same {category} product from a side angle view. "
        "Keep the exact same design, colors, materials, and style. "
    ),
    "back": (
        "Show this exact same {category} product from the back/rear view. "
        "Maintain the exact same design, colors, materials, and style. "
    ),
    "detail": (
        "Show a close-up detail shot of this exact same {category} product, "
        "focusing on the texture, materials, and craftsmanship. "
        "Keep the same design and colors. "
    ),
}


def build_prompt(category, angle):
    """Compose the edit instruction for one angle of a product category."""
    template = ANGLE_PROMPTS.get(angle)
    if template is None:
        return "Show this product from a different angle."
    return template.format(category=category.lower()) + STUDIO_STYLE


def _api_key():
    key = current_app.config.get("AI_GATEWAY_API_KEY")
    if not key:
        logger.error("AI_GATEWAY_API_KEY is not configured")
        raise ConfigurationError("API key not configured")
    return key


def ensure_configured():
    """Fail fast when the gateway credential is missing."""
    _api_key()


def _extract_image(data):
    """Pull the first embedded image data URL out of a completion response."""
    try:
        return data["choices"][0]["message"]["images"][0]["image_url"]["url"]
    except (KeyError, IndexError, TypeError):
        return None


def generate_image(category, angle, existing_image_url):
    """Generate a new angle of a product from its canonical image.

    Args:
        category: product category, e.g. "Shoes"
        angle: one of side, back, detail
        existing_image_url: data URL of the canonical image

    Returns:
        bytes of the generated image (PNG)

    Raises:
        ConfigurationError, RateLimitError, QuotaError, GenerationError
    """
    api_key = _api_key()
    prompt = build_prompt(category, angle)

    payload = {
        "model": current_app.config["AI_IMAGE_MODEL"],
        "messages": [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt},
                    {"type": "image_url", "image_url": {"url": existing_image_url}},
                ],
            }
        ],
        "modalities": ["image", "text"],
    }

    try:
        resp = httpx.post(
            current_app.config["AI_GATEWAY_URL"],
            json=payload,
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=current_app.config["AI_GATEWAY_TIMEOUT"],
        )
    except httpx.HTTPError as e:
        logger.error("AI gateway request failed: %s", e)
        raise GenerationError("Failed to generate image")

    if resp.status_code == 429:
        logger.warning("AI gateway rate limited the %s request", angle)
        raise RateLimitError("Rate limit exceeded. Please try again later.")
    if resp.status_code == 402:
        logger.warning("AI gateway reports exhausted credits")
        raise QuotaError("Payment required. Please add credits.")
    if not resp.is_success:
        logger.error("AI gateway error: %s %s", resp.status_code, resp.text[:500])
        raise GenerationError("Failed to generate image")

    try:
        body = resp.json()
    except ValueError:
        logger.error("AI gateway returned a non-JSON body: %s", resp.text[:500])
        raise GenerationError("No image generated")

    data_url = _extract_image(body)
    if not data_url:
        logger.error("No image in AI gateway response for %s view", angle)
        raise GenerationError("No image generated")

    try:
        return image_service.to_png(image_service.decode_data_url(data_url))
    except ValueError as e:
        logger.error("AI gateway returned an unusable image: %s", e)
        raise GenerationError("No image generated")
