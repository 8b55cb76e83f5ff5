"""Product stock derived from the stock of its active variants."""
import logging
from storefront.extensions import db
from storefront.errors import NotFoundError
from storefront.models.audit_log import AuditLog
from storefront.models.product import Product
from storefront.models.variant import Variant

logger = logging.getLogger(__name__)


def lock_product(product_id):
    """Load a product with its row locked for the rest of the transaction.

    SQLite ignores FOR UPDATE; Postgres serializes concurrent writers on the
    same product here.
    """
    product = (
        db.session.query(Product)
        .filter(Product.id == product_id)
        .with_for_update()
        .first()
    )
    if not product:
        raise NotFoundError("Producto no encontrado")
    return product


def variant_stock_sum(product_id):
    """Sum of stock over the active variants of a product."""
    total = (
        db.session.query(db.func.coalesce(db.func.sum(Variant.stock), 0))
        .filter(Variant.product_id == product_id, Variant.active.is_(True))
        .scalar()
    )
    return int(total or 0)


def resync(product):
    """Overwrite product.stock with the variant sum. Caller commits."""
    db.session.flush()
    previous = product.stock
    product.stock = variant_stock_sum(product.id)
    return previous, product.stock


def sync_product_stock(product_id, admin_id=None):
    """Recompute a product's stock from its variants and commit.

    Idempotent: a second call with no variant changes leaves stock as is.
    """
    product = lock_product(product_id)
    previous, new = resync(product)
    if admin_id is not None and previous != new:
        db.session.add(
            AuditLog(
                admin_id=admin_id,
                action="SYNC_STOCK",
                product_id=product.id,
                payload={"old": previous, "new": new},
            )
        )
    db.session.commit()
    if previous != new:
        logger.info("Product %d stock synced %d -> %d", product.id, previous, new)
    return {
        "producto_id": product.id,
        "stock_anterior": previous,
        "stock_nuevo": new,
        "mensaje": f"Stock sincronizado: {new} unidades",
    }


def stock_report(product):
    """Compare stored product stock with the variant sum without writing."""
    variants_total = variant_stock_sum(product.id)
    difference = product.stock - variants_total
    report = {
        "producto_id": product.id,
        "stock_producto": product.stock,
        "stock_variantes": variants_total,
        "diferencia": difference,
        "discrepancia": difference != 0,
    }
    if difference:
        report["advertencia"] = (
            f"El stock del producto ({product.stock}) no coincide con la suma "
            f"de sus variantes ({variants_total})"
        )
    return report


def get_stock_report(product_id):
    product = db.session.get(Product, product_id)
    if not product:
        raise NotFoundError("Producto no encontrado")
    return stock_report(product)


def find_discrepancies():
    """Products whose stored stock differs from the variant sum."""
    sums = (
        db.session.query(
            Variant.product_id.label("product_id"),
            db.func.sum(Variant.stock).label("total"),
        )
        .filter(Variant.active.is_(True))
        .group_by(Variant.product_id)
        .subquery()
    )
    rows = (
        db.session.query(Product, db.func.coalesce(sums.c.total, 0))
        .outerjoin(sums, sums.c.product_id == Product.id)
        .filter(Product.purged_at.is_(None))
        .filter(Product.stock != db.func.coalesce(sums.c.total, 0))
        .order_by(Product.id)
        .all()
    )
    return [
        {
            "producto_id": product.id,
            "nombre": product.name,
            "stock_producto": product.stock,
            "stock_variantes": int(total),
        }
        for product, total in rows
    ]
