from datetime import datetime, timezone
from storefront.extensions import db


class GalleryImage(db.Model):
    """Pointer to a generated angle image for a catalog product."""

    __tablename__ = "product_gallery_images"

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.String(100), nullable=False, index=True)
    angle = db.Column(db.String(20), nullable=False)  # side, back, detail
    image_url = db.Column(db.String(1024), nullable=False)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        db.UniqueConstraint("product_id", "angle", name="uq_gallery_product_angle"),
    )

    GENERATED_ANGLES = ("side", "back", "detail")

    def to_dict(self):
        return {
            "productId": self.product_id,
            "angle": self.angle,
            "imageUrl": self.image_url,
        }

    def __repr__(self):
        return f"<GalleryImage {self.product_id}/{self.angle}>"
