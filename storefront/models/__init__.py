from storefront.models.gallery_image import GalleryImage  # noqa: F401
