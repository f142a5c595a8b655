"""Product gallery orchestration.

A ``ProductGallery`` owns four angle slots for one product. The first is
always the canonical image; the other three come from the local cache, the
remote records, or (on a miss) from sequential calls to the single-angle
generation function.
"""
import enum
import logging
import threading

from storefront.client.functions_client import FunctionCallError

logger = logging.getLogger(__name__)

ANGLES = ("front", "side", "back", "detail")
GENERATED_ANGLES = ANGLES[1:]


class GalleryState(enum.Enum):
    IDLE = "idle"
    PROBING = "probing"
    GENERATING = "generating"
    DONE = "done"
    FAILED = "failed"


class GallerySlot:
    def __init__(self, angle, url, is_loading=False, error=None):
        self.angle = angle
        self.url = url
        self.is_loading = is_loading
        self.error = error

    def to_dict(self):
        data = {"angle": self.angle, "url": self.url, "isLoading": self.is_loading}
        if self.error:
            data["error"] = self.error
        return data

    def __repr__(self):
        flag = " loading" if self.is_loading else ""
        return f"<GallerySlot {self.angle}{flag}: {self.url}>"


class ProductGallery:
    def __init__(
        self,
        product_id,
        product_name,
        category,
        main_image,
        client,
        cache,
        color="black",
        auto_generate=False,
        on_change=None,
    ):
        self.product_id = product_id
        self.product_name = product_name
        self.category = category
        self.main_image = main_image
        self.color = color
        self.auto_generate = auto_generate
        self.client = client
        self.cache = cache
        self.on_change = on_change

        self.slots = [
            GallerySlot(angle, main_image, is_loading=auto_generate and angle != "front")
            for angle in ANGLES
        ]
        self.selected_image = main_image
        self.state = GalleryState.IDLE
        self._lock = threading.Lock()

    @property
    def is_generating(self):
        return self.state in (GalleryState.PROBING, GalleryState.GENERATING)

    @property
    def has_generated(self):
        return self.state == GalleryState.DONE

    def slot(self, angle):
        for slot in self.slots:
            if slot.angle == angle:
                return slot
        raise KeyError(angle)

    def urls(self):
        return [slot.url for slot in self.slots]

    def _notify(self):
        if self.on_change:
            self.on_change(self)

    def _adopt(self, urls):
        for slot, url in zip(self.slots, urls):
            slot.url = url
            slot.is_loading = False
            slot.error = None
        self._notify()

    def _update_slot(self, angle, url, error=None):
        slot = self.slot(angle)
        slot.url = url
        slot.is_loading = False
        slot.error = error
        self._notify()

    def mount(self):
        """Adopt a cached gallery, or start generation when auto-generating."""
        cached = self.cache.get(self.product_id, self.color)
        if cached:
            with self._lock:
                if self.state == GalleryState.IDLE:
                    self.state = GalleryState.DONE
            self._adopt(cached)
            return
        if self.auto_generate:
            self.generate_all()

    def select(self, angle):
        """Show a slot's image. Loading slots cannot be selected."""
        slot = self.slot(angle)
        if slot.is_loading:
            return False
        self.selected_image = slot.url
        self._notify()
        return True

    def generate_all(self):
        """Fill the gallery, generating missing angles one at a time.

        Returns False without doing anything when a pass is already running
        or has completed for this gallery.
        """
        with self._lock:
            if self.state in (GalleryState.PROBING, GalleryState.GENERATING, GalleryState.DONE):
                return False
            self.state = GalleryState.PROBING

        try:
            self.state = self._run()
        except Exception:
            self.state = GalleryState.FAILED
            raise
        return True

    def _run(self):
        cached = self.cache.get(self.product_id, self.color)
        if cached:
            self._adopt(cached)
            return GalleryState.DONE

        try:
            remote = self.client.fetch_gallery(self.product_id)
        except FunctionCallError as e:
            logger.warning("Remote gallery lookup failed for %s: %s", self.product_id, e.message)
            remote = {}
        if all(remote.get(angle) for angle in GENERATED_ANGLES):
            urls = [self.main_image] + [remote[angle] for angle in GENERATED_ANGLES]
            self._adopt(urls)
            self.cache.put(self.product_id, self.color, urls)
            return GalleryState.DONE

        self.state = GalleryState.GENERATING
        for slot in self.slots:
            slot.url = self.main_image
            slot.is_loading = slot.angle != "front"
            slot.error = None
        self._notify()

        try:
            existing_image = self.client.fetch_image_data_url(self.main_image)
        except FunctionCallError as e:
            logger.error("Failed to load base image for %s: %s", self.product_id, e.message)
            for angle in GENERATED_ANGLES:
                self._update_slot(angle, self.main_image, error="Failed to load base image")
            return GalleryState.FAILED

        # One request at a time keeps us under the gateway's rate limit
        urls = [self.main_image]
        for angle in GENERATED_ANGLES:
            try:
                image_url = self.client.generate_image(
                    self.product_id, self.product_name, self.category, angle, existing_image
                )
            except FunctionCallError as e:
                logger.warning("Failed to generate %s image for %s: %s", angle, self.product_id, e.message)
                self._update_slot(angle, self.main_image, error="Failed to generate")
                urls.append(self.main_image)
            else:
                self._update_slot(angle, image_url)
                urls.append(image_url)

        self.cache.put(self.product_id, self.color, urls)
        return GalleryState.DONE
