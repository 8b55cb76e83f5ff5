from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from storefront.extensions import db

CURRENCIES = ("PEN", "USD", "EUR")


def amount_to_cents(value):
    """Convert a currency amount (e.g. 89.90) to integer cents."""
    if value is None or value == "":
        return None
    try:
        return int((Decimal(str(value)) * 100).quantize(Decimal("1")))
    except (InvalidOperation, ValueError):
        raise ValueError(f"Invalid amount: {value!r}")


def cents_to_amount(cents):
    if cents is None:
        return None
    return cents / 100


class Product(db.Model):
    __tablename__ = "products"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, default="")
    category_id = db.Column(
        db.Integer,
        db.ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    # Prices in cents
    price_pen = db.Column(db.Integer, nullable=False)
    price_usd = db.Column(db.Integer)
    price_eur = db.Column(db.Integer)
    sale_price_pen = db.Column(db.Integer)
    sale_price_usd = db.Column(db.Integer)
    sale_price_eur = db.Column(db.Integer)
    on_sale = db.Column(db.Boolean, nullable=False, default=False)

    stock = db.Column(db.Integer, nullable=False, default=0)
    stock_minimum = db.Column(db.Integer, nullable=False, default=5)
    gender = db.Column(db.String(20), nullable=False, default="unisex")
    image_url = db.Column(db.String(1024))
    featured = db.Column(db.Boolean, nullable=False, default=False)
    status = db.Column(
        db.String(20), nullable=False, default="ACTIVE", index=True
    )
    deleted_at = db.Column(db.DateTime(timezone=True))
    purged_at = db.Column(db.DateTime(timezone=True))
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    category = db.relationship("Category", back_populates="products")
    variants = db.relationship(
        "Variant",
        backref="product",
        lazy="select",
        cascade="all, delete-orphan",
        order_by="Variant.id",
    )
    color_images = db.relationship(
        "ColorImageSet",
        backref="product",
        lazy="select",
        cascade="all, delete-orphan",
        order_by="ColorImageSet.color",
    )

    VALID_STATUSES = {"ACTIVE", "INACTIVE", "DELETED"}
    VALID_GENDERS = {"masculino", "femenino", "unisex"}
    STATUS_LABELS = {"ACTIVE": "activo", "INACTIVE": "inactivo", "DELETED": "eliminado"}

    @property
    def is_visible(self):
        return self.status == "ACTIVE"

    @property
    def is_purged(self):
        return self.purged_at is not None

    @property
    def is_low_stock(self):
        return self.status == "ACTIVE" and self.stock <= self.stock_minimum

    def price_cents(self, currency):
        return getattr(self, f"price_{currency.lower()}")

    def sale_price_cents(self, currency):
        return getattr(self, f"sale_price_{currency.lower()}")

    def to_dict(self):
        data = {
            "id": self.id,
            "nombre": self.name,
            "descripcion": self.description or "",
            "categoria_id": self.category_id,
            "categoria_nombre": self.category.name if self.category else None,
            "en_oferta": self.on_sale,
            "stock": self.stock,
            "stock_minimo": self.stock_minimum,
            "genero": self.gender,
            "imagen_url": self.image_url,
            "destacado": self.featured,
            "estado": self.STATUS_LABELS.get(self.status, self.status.lower()),
            "fecha_eliminacion": _iso(self.deleted_at),
            "fecha_creacion": _iso(self.created_at),
            "fecha_actualizacion": _iso(self.updated_at),
        }
        for currency in CURRENCIES:
            code = currency.lower()
            data[f"precio_{code}"] = cents_to_amount(self.price_cents(currency))
            data[f"precio_oferta_{code}"] = cents_to_amount(
                self.sale_price_cents(currency)
            )
        return data

    def __repr__(self):
        return f"<Product {self.id}: {self.name} [{self.status}]>"


def _iso(value):
    return value.isoformat() if value else None
