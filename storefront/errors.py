"""Error taxonomy for the gallery pipeline.

Each error carries the HTTP status the functions blueprint responds with.
"""


class GalleryError(Exception):
    status_code = 500

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(GalleryError):
    """Bad or missing request input."""

    status_code = 400


class ConfigurationError(GalleryError):
    """A required secret or setting is missing from the deployment."""

    status_code = 500


class RateLimitError(GalleryError):
    """The generation gateway answered 429."""

    status_code = 429


class QuotaError(GalleryError):
    """The generation gateway answered 402 (credits exhausted)."""

    status_code = 402


class GenerationError(GalleryError):
    """The gateway failed or returned no usable image."""

    status_code = 500


class StorageError(GalleryError):
    status_code = 500


class DatabaseWriteError(GalleryError):
    """Recording a generated image failed. Non-fatal for single generation."""

    status_code = 500
