"""RQ worker job: run gallery batch generation off the request path."""
import logging
from flask import current_app, has_app_context
from redis.exceptions import LockError

from storefront import create_app, extensions
from storefront.services import gallery_service

logger = logging.getLogger(__name__)

LOCK_KEY = "gallery_batch"

_worker_app = None


def _get_app():
    """Return an app instance for worker execution.

    Reuse the current app when already inside an app context (tests/CLI),
    otherwise lazily create the worker app once.
    """
    global _worker_app
    if has_app_context():
        return current_app._get_current_object()
    if _worker_app is None:
        _worker_app = create_app()
    return _worker_app


def run_batch_job(existing_image_urls):
    """Generate all missing catalog gallery images.

    Distributed lock: only one batch runs at a time, since every run walks
    the same catalog and would race on the same (product, angle) pairs.

    Returns the batch report dict, or None when another batch holds the lock.
    """
    app = _get_app()
    with app.app_context():
        lock = None
        if extensions.redis_client is not None:
            lock = extensions.redis_client.lock(LOCK_KEY, timeout=3600)
            if not lock.acquire(blocking=False):
                logger.info("Gallery batch already running, skipping")
                return None

        try:
            report = gallery_service.run_batch(existing_image_urls)
            return report.to_dict()
        finally:
            if lock is not None:
                try:
                    lock.release()
                except LockError:
                    logger.warning("Gallery batch lock expired before release")
