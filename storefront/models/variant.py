from datetime import datetime, timezone
from storefront.extensions import db


class Variant(db.Model):
    __tablename__ = "variants"

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(
        db.Integer,
        db.ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    color = db.Column(db.String(50), nullable=False)  # "Negro"
    size = db.Column(db.String(20), nullable=False)  # "M", "38"
    stock = db.Column(db.Integer, nullable=False, default=0)
    sku = db.Column(db.String(100))
    image_url = db.Column(db.String(1024))
    active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    # Only active rows take part in the color/size uniqueness rule
    __table_args__ = (
        db.Index(
            "uq_active_variant",
            "product_id",
            "color",
            "size",
            unique=True,
            postgresql_where=db.text("active"),
            sqlite_where=db.text("active = 1"),
        ),
        db.CheckConstraint("stock >= 0", name="ck_variant_stock_non_negative"),
    )

    @property
    def in_stock(self):
        return self.active and self.stock > 0

    def to_dict(self):
        return {
            "id": self.id,
            "producto_id": self.product_id,
            "color": self.color,
            "talla": self.size,
            "stock": self.stock,
            "sku": self.sku,
            "imagen_url": self.image_url,
            "activo": self.active,
            "fecha_creacion": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Variant {self.color}/{self.size} x{self.stock}>"
