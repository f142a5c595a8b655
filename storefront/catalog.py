"""Static storefront catalog.

Products are read-only to the gallery pipeline; the batch generator walks
this list in order.
"""
from collections import namedtuple
from flask import current_app

Product = namedtuple("Product", "id name category image price colors")

PRODUCTS = [
    Product("cloud-runner", "Cloud Runner", "Shoes", "product-1.jpg", 189, ["White", "Black", "Grey"]),
    Product("velocity-pro", "Velocity Pro", "Shoes", "product-2.jpg", 219, ["Black", "Red", "Blue"]),
    Product("swift-elite", "Swift Elite", "Shoes", "product-3.jpg", 198, ["Grey", "Navy", "White"]),
    Product("tech-performance-tee", "Tech Performance Tee", "Tops", "product-4.jpg", 78, ["Black", "White", "Navy"]),
    Product("runner-vest", "Runner Vest", "Tops", "product-5.jpg", 98, ["Black", "Grey", "Blue"]),
    Product("trail-cap", "Trail Cap", "Accessories", "product-6.jpg", 48, ["Black", "White", "Khaki"]),
    Product("sport-goggles", "Sport Goggles", "Accessories", "product-7.jpg", 158, ["Black", "Blue", "Clear"]),
    Product("trail-pack", "Trail Pack", "Accessories", "product-8.jpg", 128, ["Black", "Grey", "Green"]),
]


def get_product(product_id):
    for product in PRODUCTS:
        if product.id == product_id:
            return product
    return None


def image_url(product):
    """Absolute URL of a product's canonical image."""
    base = current_app.config["CATALOG_IMAGE_BASE_URL"].rstrip("/")
    return f"{base}/{product.image}"
