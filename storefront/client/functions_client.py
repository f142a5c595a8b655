import logging
import mimetypes
import httpx

from storefront.services import image_service

logger = logging.getLogger(__name__)


class FunctionCallError(Exception):
    """A function call failed in transport or answered non-2xx."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class FunctionsClient:
    """HTTP client for the deployed gallery functions."""

    def __init__(self, base_url, timeout=120.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _url(self, name):
        return f"{self.base_url}/{name}"

    @staticmethod
    def _check(resp, name):
        if resp.is_success:
            try:
                data = resp.json()
            except ValueError:
                data = None
            if not isinstance(data, dict):
                logger.error("Function %s returned a non-object body: %s", name, resp.text[:200])
                raise FunctionCallError(f"{name} returned an invalid response", status_code=resp.status_code)
            return data
        try:
            body = resp.json()
        except ValueError:
            body = None
        message = (body.get("error") if isinstance(body, dict) else None) or resp.text
        logger.error("Function %s failed: %s %s", name, resp.status_code, message)
        raise FunctionCallError(message, status_code=resp.status_code)

    def _post(self, name, payload):
        try:
            resp = httpx.post(self._url(name), json=payload, timeout=self.timeout)
        except httpx.HTTPError as e:
            raise FunctionCallError(f"{name} request failed: {e}")
        return self._check(resp, name)

    def _get(self, name):
        try:
            resp = httpx.get(self._url(name), timeout=self.timeout)
        except httpx.HTTPError as e:
            raise FunctionCallError(f"{name} request failed: {e}")
        return self._check(resp, name)

    def fetch_image_data_url(self, source):
        """Load an image (URL, data URL or local path) as a base64 data URL."""
        if image_service.is_data_url(source):
            return source
        if source.startswith(("http://", "https://")):
            try:
                resp = httpx.get(source, timeout=self.timeout, follow_redirects=True)
                resp.raise_for_status()
            except httpx.HTTPError as e:
                raise FunctionCallError(f"Failed to fetch image {source}: {e}")
            content_type = resp.headers.get("content-type", "image/jpeg").split(";")[0]
            return image_service.to_data_url(resp.content, content_type)
        try:
            with open(source, "rb") as f:
                data = f.read()
        except OSError as e:
            raise FunctionCallError(f"Failed to read image {source}: {e}")
        content_type = mimetypes.guess_type(source)[0] or "image/jpeg"
        return image_service.to_data_url(data, content_type)

    def fetch_gallery(self, product_id):
        """Recorded angle URLs for a product, as ``{angle: url}``."""
        images = self._get(f"product-gallery/{product_id}").get("images")
        return images if isinstance(images, dict) else {}

    def generate_image(self, product_id, product_name, category, angle, existing_image_url):
        data = self._post(
            "generate-product-images",
            {
                "productId": product_id,
                "productName": product_name,
                "category": category,
                "angle": angle,
                "existingImageUrl": existing_image_url,
            },
        )
        image_url = data.get("imageUrl")
        if not image_url:
            raise FunctionCallError(f"No imageUrl returned for {angle}")
        return image_url

    def run_batch(self, existing_image_urls):
        return self._post("batch-generate-gallery", {"existingImageUrls": existing_image_urls})
