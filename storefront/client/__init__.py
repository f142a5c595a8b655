from storefront.client.functions_client import FunctionCallError, FunctionsClient  # noqa: F401
from storefront.client.gallery import GalleryState, ProductGallery  # noqa: F401
from storefront.client.local_cache import LocalGalleryCache, MemoryStore  # noqa: F401
