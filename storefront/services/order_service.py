"""Checkout and order management.

Order lines snapshot name, color, size and unit price so later product or
variant changes never alter a placed order.
"""
import logging
from storefront.extensions import db
from storefront.errors import NotFoundError, ValidationError
from storefront.models.audit_log import AuditLog
from storefront.models.order import Order, OrderLine
from storefront.models.product import amount_to_cents
from storefront.models.variant import Variant
from storefront.services import catalog_service, stock_service

logger = logging.getLogger(__name__)


def _label(value):
    if value is None or isinstance(value, (bool, dict, list)):
        return ""
    return str(value).strip()


def _parse_item(raw):
    if not isinstance(raw, dict):
        raise ValidationError("Items inválidos")
    product_id = raw.get("producto_id")
    quantity = raw.get("cantidad", 1)
    color = _label(raw.get("color"))
    size = _label(raw.get("talla"))
    if isinstance(product_id, bool) or not isinstance(product_id, int):
        raise ValidationError("producto_id inválido")
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise ValidationError("La cantidad debe ser un entero positivo")
    if not color or not size:
        raise ValidationError("Color y talla son requeridos para cada item")
    return product_id, color, size, quantity


def create_order(user, items, shipping_address, payment_method=None,
                 notes="", currency=None, customer=None, shipping_cost=0):
    """Place an order, decrementing variant stock in the same transaction."""
    if not items or not isinstance(items, list):
        raise ValidationError("Items requeridos")
    if not shipping_address or not str(shipping_address).strip():
        raise ValidationError("Dirección de envío requerida")
    payment_method = payment_method or "efectivo"
    if payment_method not in Order.PAYMENT_METHODS:
        raise ValidationError(f"Método de pago inválido: {payment_method}")
    currency = catalog_service.normalize_currency(currency)
    customer = customer or {}

    parsed = [_parse_item(raw) for raw in items]

    # Lock products in id order so concurrent checkouts cannot deadlock
    products = {}
    for product_id in sorted({p[0] for p in parsed}):
        product = stock_service.lock_product(product_id)
        if not product.is_visible:
            db.session.rollback()
            raise ValidationError(f"El producto {product_id} no está disponible")
        products[product_id] = product

    order = Order(
        user_id=user["id"],
        customer_email=customer.get("email") or user.get("email"),
        customer_name=customer.get("nombre"),
        customer_phone=customer.get("telefono"),
        status="PENDING",
        currency=currency,
        payment_method=payment_method,
        shipping_address=str(shipping_address).strip(),
        notes=notes or "",
    )
    subtotal = 0
    for product_id, color, size, quantity in parsed:
        product = products[product_id]
        variant = Variant.query.filter_by(
            product_id=product_id, color=color, size=size, active=True
        ).first()
        if not variant:
            db.session.rollback()
            raise ValidationError(
                f"{product.name} no está disponible en {color} / {size}"
            )
        if variant.stock < quantity:
            db.session.rollback()
            raise ValidationError(
                f"Stock insuficiente para {product.name} ({color} / {size}): "
                f"disponible {variant.stock}"
            )
        unit_price = catalog_service.effective_price_cents(product, currency)
        if unit_price is None:
            db.session.rollback()
            raise ValidationError(f"{product.name} no tiene precio en {currency}")
        variant.stock -= quantity
        line_total = unit_price * quantity
        subtotal += line_total
        order.lines.append(
            OrderLine(
                product_id=product.id,
                product_name=product.name,
                color=variant.color,
                size=variant.size,
                quantity=quantity,
                unit_price=unit_price,
                line_total=line_total,
            )
        )

    for product in products.values():
        stock_service.resync(product)

    order.subtotal = subtotal
    order.shipping_cost = amount_to_cents(shipping_cost) or 0
    order.total = order.subtotal + order.shipping_cost
    db.session.add(order)
    db.session.flush()
    order.order_number = f"SM-{order.id:06d}"
    db.session.commit()

    logger.info(
        "Order %s placed by user %s: %d lines, total %d",
        order.order_number, user["id"], len(order.lines), order.total,
    )
    return order


def get_orders_for_user(user_id):
    return (
        Order.query.filter_by(user_id=user_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )


def get_all_orders(status=None):
    query = Order.query
    if status:
        query = query.filter_by(status=status)
    return query.order_by(Order.created_at.desc(), Order.id.desc()).all()


def get_order(order_id):
    order = db.session.get(Order, order_id)
    if not order:
        raise NotFoundError("Pedido no encontrado")
    return order


def parse_status(value):
    """Accept either the internal status or its Spanish label."""
    if not value:
        raise ValidationError("Estado requerido")
    labels = {label: status for status, label in Order.STATUS_LABELS.items()}
    status = labels.get(str(value).lower(), str(value).upper())
    if status not in Order.VALID_STATUSES:
        raise ValidationError(f"Estado inválido: {value}")
    return status


def update_order_status(order_id, status, admin_id):
    order = get_order(order_id)
    old_status = order.status
    order.status = parse_status(status)
    db.session.add(
        AuditLog(
            admin_id=admin_id,
            action="SET_ORDER_STATUS",
            payload={"order_id": order.id, "old": old_status, "new": order.status},
        )
    )
    db.session.commit()
    return order
