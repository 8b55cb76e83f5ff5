"""Variant store: (product, color, size) rows with their own stock.

Each mutation locks the product row, applies the change and resyncs the
product's stock before a single commit.
"""
import logging
from sqlalchemy.exc import IntegrityError
from storefront.extensions import db
from storefront.errors import ConflictError, NotFoundError, ValidationError
from storefront.models.audit_log import AuditLog
from storefront.models.variant import Variant
from storefront.services import stock_service

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("color", "size", "stock", "sku", "image_url", "active")


def list_variants(product_id):
    """All variants of a product ordered by color then size."""
    return (
        Variant.query.filter_by(product_id=product_id)
        .order_by(Variant.color, Variant.size)
        .all()
    )


def get_variant(product_id, variant_id):
    variant = Variant.query.filter_by(id=variant_id, product_id=product_id).first()
    if not variant:
        raise NotFoundError("Variante no encontrada")
    return variant


def _clean_label(value, field):
    if value is None or not str(value).strip():
        raise ValidationError(f"{field} es requerido")
    return str(value).strip()


def _clean_stock(value):
    if value is None or value == "":
        return 0
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValidationError("El stock debe ser un número entero")
    try:
        stock = int(value)
    except (TypeError, ValueError):
        raise ValidationError("El stock debe ser un número entero")
    if stock < 0:
        raise ValidationError("El stock no puede ser negativo")
    return stock


def _optional(value):
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _find_active_duplicate(product_id, color, size, exclude_id=None):
    query = Variant.query.filter_by(
        product_id=product_id, color=color, size=size, active=True
    )
    if exclude_id is not None:
        query = query.filter(Variant.id != exclude_id)
    return query.first()


def _insert_variant(product, color, size, stock, sku, image_url):
    if _find_active_duplicate(product.id, color, size):
        raise ConflictError("Ya existe una variante con este color y talla")
    variant = Variant(
        product_id=product.id,
        color=color,
        size=size,
        stock=stock,
        sku=sku,
        image_url=image_url,
        active=True,
    )
    db.session.add(variant)
    db.session.flush()
    return variant


def create_variant(product_id, data, admin_id):
    """Create one active variant; Conflict if the color/size is taken."""
    color = _clean_label(data.get("color"), "Color")
    size = _clean_label(data.get("size"), "Talla")
    stock = _clean_stock(data.get("stock"))

    product = stock_service.lock_product(product_id)
    try:
        variant = _insert_variant(
            product, color, size, stock,
            _optional(data.get("sku")), _optional(data.get("image_url")),
        )
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Ya existe una variante con este color y talla")
    except ConflictError:
        db.session.rollback()
        raise

    stock_service.resync(product)
    db.session.add(
        AuditLog(
            admin_id=admin_id,
            action="CREATE_VARIANT",
            product_id=product.id,
            payload={"variant_id": variant.id, "color": color, "size": size, "stock": stock},
        )
    )
    db.session.commit()
    logger.info("Created variant %s/%s for product %d", color, size, product.id)
    return variant


def update_variant(product_id, variant_id, data, admin_id):
    """Partial update of a variant.

    The uniqueness rule is checked whenever the row ends up active with a
    color/size that another active variant already uses.
    """
    changes = {k: data[k] for k in UPDATABLE_FIELDS if k in data}
    if not changes:
        raise ValidationError("No hay campos para actualizar")

    product = stock_service.lock_product(product_id)
    try:
        variant = get_variant(product.id, variant_id)
    except NotFoundError:
        db.session.rollback()
        raise

    if "color" in changes:
        changes["color"] = _clean_label(changes["color"], "Color")
    if "size" in changes:
        changes["size"] = _clean_label(changes["size"], "Talla")
    if "stock" in changes:
        changes["stock"] = _clean_stock(changes["stock"])
    if "sku" in changes:
        changes["sku"] = _optional(changes["sku"])
    if "image_url" in changes:
        changes["image_url"] = _optional(changes["image_url"])
    if "active" in changes:
        if not isinstance(changes["active"], (bool, int)):
            raise ValidationError("activo debe ser booleano")
        changes["active"] = bool(changes["active"])

    color = changes.get("color", variant.color)
    size = changes.get("size", variant.size)
    active = changes.get("active", variant.active)
    reactivating = active and not variant.active
    relabelled = "color" in changes or "size" in changes
    if active and (relabelled or reactivating):
        if _find_active_duplicate(product.id, color, size, exclude_id=variant.id):
            db.session.rollback()
            raise ConflictError("Ya existe otra variante con este color y talla")

    for field, value in changes.items():
        setattr(variant, field, value)

    try:
        stock_service.resync(product)
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Ya existe otra variante con este color y talla")

    db.session.add(
        AuditLog(
            admin_id=admin_id,
            action="UPDATE_VARIANT",
            product_id=product.id,
            payload={"variant_id": variant.id, "changes": changes},
        )
    )
    db.session.commit()
    return variant


def delete_variant(product_id, variant_id, admin_id):
    """Hard delete. Orders keep their own color/size snapshot."""
    product = stock_service.lock_product(product_id)
    try:
        variant = get_variant(product.id, variant_id)
    except NotFoundError:
        db.session.rollback()
        raise

    payload = {"variant_id": variant.id, "color": variant.color, "size": variant.size}
    db.session.delete(variant)
    stock_service.resync(product)
    db.session.add(
        AuditLog(
            admin_id=admin_id,
            action="DELETE_VARIANT",
            product_id=product.id,
            payload=payload,
        )
    )
    db.session.commit()


def bulk_create(product_id, color, sizes, stock, image_url, admin_id):
    """Quick creation: one color across several sizes, best effort.

    Each size runs in its own savepoint so a duplicate only drops that size.
    Returns counts of created and failed sizes with the per-size errors.
    """
    color = _clean_label(color, "Color")
    if not isinstance(sizes, (list, tuple)) or not sizes:
        raise ValidationError("Selecciona al menos una talla")
    stock = _clean_stock(stock)
    image_url = _optional(image_url)

    product = stock_service.lock_product(product_id)
    created, errors = [], []

    for raw_size in sizes:
        try:
            size = _clean_label(raw_size, "Talla")
        except ValidationError as e:
            errors.append({"talla": raw_size, "error": e.message})
            continue

        sku = f"{product.id}-{color.lower()}-{size.lower()}"
        savepoint = db.session.begin_nested()
        try:
            variant = _insert_variant(product, color, size, stock, sku, image_url)
            savepoint.commit()
            created.append(variant)
        except (ConflictError, IntegrityError) as e:
            savepoint.rollback()
            message = e.message if isinstance(e, ConflictError) else "Combinación duplicada"
            errors.append({"talla": size, "error": message})

    if created:
        stock_service.resync(product)
        db.session.add(
            AuditLog(
                admin_id=admin_id,
                action="BULK_CREATE_VARIANTS",
                product_id=product.id,
                payload={
                    "color": color,
                    "created": [v.size for v in created],
                    "failed": [e["talla"] for e in errors],
                },
            )
        )
    db.session.commit()

    logger.info(
        "Quick creation for product %d color %s: %d created, %d failed",
        product.id, color, len(created), len(errors),
    )
    return {
        "creadas": len(created),
        "fallidas": len(errors),
        "variantes": [v.to_dict() for v in created],
        "errores": errors,
        "mensaje": (
            f"Se crearon {len(created)} variantes correctamente"
            + (f" ({len(errors)} errores)" if errors else "")
        ),
    }
