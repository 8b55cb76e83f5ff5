from datetime import datetime, timezone
from storefront.extensions import db


class ColorImageSet(db.Model):
    """Images shared by every size of one product color."""

    __tablename__ = "color_images"

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(
        db.Integer,
        db.ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    color = db.Column(db.String(50), nullable=False)
    images = db.Column(db.JSON, nullable=False, default=list)  # ordered URLs
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        db.UniqueConstraint("product_id", "color", name="uq_color_images"),
    )

    @property
    def principal_image(self):
        return self.images[0] if self.images else None

    def to_dict(self):
        return {
            "producto_id": self.product_id,
            "color": self.color,
            "imagen_principal": self.principal_image,
            "imagenes": list(self.images or []),
        }

    def __repr__(self):
        return f"<ColorImageSet {self.color} ({len(self.images or [])})>"
