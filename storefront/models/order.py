from datetime import datetime, timezone
from storefront.extensions import db
from storefront.models.product import cents_to_amount


class Order(db.Model):
    __tablename__ = "orders"

    id = db.Column(db.Integer, primary_key=True)
    order_number = db.Column(db.String(20), unique=True, index=True)
    user_id = db.Column(db.Integer, nullable=False, index=True)
    customer_email = db.Column(db.String(255))
    customer_name = db.Column(db.String(255))
    customer_phone = db.Column(db.String(30))
    status = db.Column(db.String(20), nullable=False, default="PENDING", index=True)
    currency = db.Column(db.String(3), nullable=False, default="PEN")
    subtotal = db.Column(db.Integer, nullable=False, default=0)  # cents
    shipping_cost = db.Column(db.Integer, nullable=False, default=0)
    total = db.Column(db.Integer, nullable=False, default=0)
    payment_method = db.Column(db.String(20), nullable=False, default="efectivo")
    shipping_address = db.Column(db.Text, nullable=False)
    notes = db.Column(db.Text, default="")
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )

    lines = db.relationship(
        "OrderLine",
        backref="order",
        lazy="select",
        cascade="all, delete-orphan",
        order_by="OrderLine.id",
    )

    VALID_STATUSES = {"PENDING", "CONFIRMED", "SHIPPED", "DELIVERED", "CANCELLED"}
    STATUS_LABELS = {
        "PENDING": "pendiente",
        "CONFIRMED": "confirmado",
        "SHIPPED": "enviado",
        "DELIVERED": "entregado",
        "CANCELLED": "cancelado",
    }
    PAYMENT_METHODS = {"tarjeta", "transferencia", "efectivo", "yape", "plin"}

    def to_dict(self, with_lines=True):
        data = {
            "id": self.id,
            "numero_pedido": self.order_number,
            "usuario_id": self.user_id,
            "email_cliente": self.customer_email,
            "nombre_cliente": self.customer_name,
            "telefono_cliente": self.customer_phone,
            "estado": self.STATUS_LABELS.get(self.status, self.status.lower()),
            "moneda": self.currency,
            "subtotal": cents_to_amount(self.subtotal),
            "costo_envio": cents_to_amount(self.shipping_cost),
            "total": cents_to_amount(self.total),
            "metodo_pago": self.payment_method,
            "direccion_envio": self.shipping_address,
            "notas": self.notes or "",
            "fecha_pedido": self.created_at.isoformat() if self.created_at else None,
            "total_items": sum(line.quantity for line in self.lines),
        }
        if with_lines:
            data["items"] = [line.to_dict() for line in self.lines]
        return data

    def __repr__(self):
        return f"<Order {self.order_number} [{self.status}]>"


class OrderLine(db.Model):
    """Snapshot of what was bought; never reads the live product or variant."""

    __tablename__ = "order_lines"

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(
        db.Integer,
        db.ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id = db.Column(
        db.Integer,
        db.ForeignKey("products.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    product_name = db.Column(db.String(255), nullable=False)
    color = db.Column(db.String(50), nullable=False, default="")
    size = db.Column(db.String(20), nullable=False, default="")
    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Integer, nullable=False)  # cents
    line_total = db.Column(db.Integer, nullable=False)

    def to_dict(self):
        return {
            "producto_id": self.product_id,
            "nombre_producto": self.product_name,
            "color": self.color,
            "talla": self.size,
            "cantidad": self.quantity,
            "precio_unitario": cents_to_amount(self.unit_price),
            "subtotal": cents_to_amount(self.line_total),
        }

    def __repr__(self):
        return f"<OrderLine {self.product_name} {self.color}/{self.size} x{self.quantity}>"
