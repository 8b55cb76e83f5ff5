"""Sales figures for the admin dashboard.

Only orders that went through (confirmed, shipped or delivered) count as
sales. Amounts are returned as currency units, not cents.
"""
from storefront.extensions import db
from storefront.models.order import Order, OrderLine
from storefront.models.product import Product, cents_to_amount

SOLD_STATUSES = ("CONFIRMED", "SHIPPED", "DELIVERED")


def best_sellers(limit=10):
    """Products ranked by units sold."""
    units = db.func.sum(OrderLine.quantity).label("units")
    rows = (
        db.session.query(
            Product,
            units,
            db.func.count(db.distinct(OrderLine.order_id)).label("orders"),
        )
        .join(OrderLine, OrderLine.product_id == Product.id)
        .join(Order, Order.id == OrderLine.order_id)
        .filter(Order.status.in_(SOLD_STATUSES))
        .group_by(Product.id)
        .order_by(units.desc(), Product.id)
        .limit(limit)
        .all()
    )
    return [
        {
            "id": product.id,
            "nombre": product.name,
            "precio_pen": cents_to_amount(product.price_pen),
            "stock": product.stock,
            "total_vendido": int(sold),
            "pedidos_count": int(orders),
        }
        for product, sold, orders in rows
    ]


def recent_orders(limit=10):
    orders = (
        Order.query.order_by(Order.created_at.desc(), Order.id.desc())
        .limit(limit)
        .all()
    )
    return [order.to_dict(with_lines=False) for order in orders]


def sales_by_month(year):
    """Order count, revenue and average ticket per month of `year`."""
    month = db.func.extract("month", Order.created_at)
    rows = (
        db.session.query(
            month.label("month"),
            db.func.count(Order.id),
            db.func.sum(Order.total),
        )
        .filter(
            db.func.extract("year", Order.created_at) == year,
            Order.status.in_(SOLD_STATUSES),
        )
        .group_by(month)
        .order_by(month)
        .all()
    )
    return [
        {
            "mes": int(m),
            "total_pedidos": count,
            "total_ventas": cents_to_amount(int(total or 0)),
            "promedio_venta": cents_to_amount(round((total or 0) / count)),
        }
        for m, count, total in rows
    ]
