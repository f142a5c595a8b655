import json
import logging
import threading
import time
import redis

logger = logging.getLogger(__name__)

CACHE_PREFIX = "product_gallery_"
CACHE_EXPIRY = 24 * 60 * 60  # 24 hours


class MemoryStore:
    """In-process key/value store for running without Redis."""

    def __init__(self):
        self._data = {}
        self._lock = threading.Lock()

    def get(self, key):
        with self._lock:
            return self._data.get(key)

    def set(self, key, value, ex=None):
        # expiry is enforced from the entry timestamp on read
        with self._lock:
            self._data[key] = value

    def delete(self, key):
        with self._lock:
            self._data.pop(key, None)


class LocalGalleryCache:
    """Time-bounded cache of full galleries keyed by (product, color).

    ``store`` is anything with Redis-style ``get``/``set``/``delete``.
    Entries hold the four URLs (front, side, back, detail) and a write
    timestamp in milliseconds; stale or unreadable entries are dropped.
    """

    def __init__(self, store=None, ttl=CACHE_EXPIRY, clock=time.time):
        self.store = store if store is not None else MemoryStore()
        self.ttl = ttl
        self.clock = clock

    @staticmethod
    def key(product_id, color):
        return f"{CACHE_PREFIX}{product_id}_{color}"

    def get(self, product_id, color):
        key = self.key(product_id, color)
        try:
            raw = self.store.get(key)
            if raw is None:
                return None
            entry = json.loads(raw)
            images = entry["images"]
            age_ms = self.clock() * 1000 - entry["timestamp"]
            if age_ms < self.ttl * 1000 and isinstance(images, list) and len(images) == 4:
                return images
        except redis.RedisError as e:
            logger.warning("Gallery cache read failed for %s: %s", key, e)
            return None
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("Discarding unreadable gallery cache entry %s: %s", key, e)
        try:
            self.store.delete(key)
        except redis.RedisError as e:
            logger.warning("Gallery cache delete failed for %s: %s", key, e)
        return None

    def put(self, product_id, color, images):
        entry = {"images": list(images), "timestamp": int(self.clock() * 1000)}
        try:
            self.store.set(self.key(product_id, color), json.dumps(entry), ex=int(self.ttl))
        except redis.RedisError as e:
            logger.warning("Gallery cache write failed for %s: %s", product_id, e)


_memory_store = MemoryStore()


def default_cache():
    """Cache backed by the app's Redis, or a process-wide memory store."""
    from flask import current_app
    from storefront import extensions

    store = extensions.redis_client if extensions.redis_client is not None else _memory_store
    return LocalGalleryCache(store, ttl=current_app.config["GALLERY_CACHE_TTL"])
