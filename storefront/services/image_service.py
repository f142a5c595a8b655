import base64
import binascii
import io
import re
from PIL import Image as PILImage


MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MB

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w/+.-]+)?(?:;[\w=-]+)*;base64,", re.I)


def to_data_url(image_bytes, content_type="image/jpeg"):
    """Encode raw image bytes as a base64 data URL."""
    encoded = base64.b64encode(image_bytes).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


def is_data_url(value):
    return isinstance(value, str) and bool(_DATA_URL_RE.match(value))


def decode_data_url(data_url):
    """Return the bytes carried by a base64 data URL.

    A bare base64 string (no ``data:`` prefix) is accepted too.

    Raises:
        ValueError on malformed input
    """
    payload = data_url.split(",", 1)[1] if "," in data_url else data_url
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise ValueError("Invalid base64 image data")


def to_png(image_bytes):
    """Validate image bytes and re-encode them as PNG.

    - Checks file size
    - Verifies it's a real image via Pillow
    - Strips metadata by re-encoding

    Raises:
        ValueError on invalid input
    """
    if len(image_bytes) > MAX_FILE_SIZE:
        raise ValueError(f"Image too large: {len(image_bytes)} bytes (max {MAX_FILE_SIZE})")

    try:
        img = PILImage.open(io.BytesIO(image_bytes))
        img.verify()  # verify it's a real image
    except Exception:
        raise ValueError("Invalid image file")

    # Re-open (verify() closes the file) and re-encode
    img = PILImage.open(io.BytesIO(image_bytes))
    if img.mode not in ("RGB", "RGBA", "L"):
        img = img.convert("RGBA")

    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()
