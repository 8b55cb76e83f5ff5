from datetime import datetime, timezone
from storefront.extensions import db
from storefront.errors import NotFoundError, ValidationError
from storefront.models.audit_log import AuditLog
from storefront.models.category import Category
from storefront.models.color_image import ColorImageSet
from storefront.models.order import Order
from storefront.models.product import CURRENCIES, Product, amount_to_cents
from storefront.models.variant import Variant
from storefront.services import stock_service

# wire field -> (model attribute, kind)
PRODUCT_FIELDS = {
    "nombre": ("name", "text"),
    "descripcion": ("description", "text"),
    "categoria_id": ("category_id", "category"),
    "en_oferta": ("on_sale", "bool"),
    "stock": ("stock", "count"),
    "stock_minimo": ("stock_minimum", "count"),
    "genero": ("gender", "gender"),
    "imagen_url": ("image_url", "text"),
    "destacado": ("featured", "bool"),
}
for _code in CURRENCIES:
    PRODUCT_FIELDS[f"precio_{_code.lower()}"] = (f"price_{_code.lower()}", "money")
    PRODUCT_FIELDS[f"precio_oferta_{_code.lower()}"] = (
        f"sale_price_{_code.lower()}", "money",
    )

ADMIN_STATUS_FILTERS = {
    "activos": ["ACTIVE"],
    "inactivos": ["INACTIVE"],
    "eliminados": ["DELETED"],
}


def _coerce(field, kind, value):
    if kind == "text":
        return value.strip() if isinstance(value, str) else value
    if kind == "bool":
        if not isinstance(value, bool):
            raise ValidationError(f"{field} debe ser booleano")
        return value
    if kind == "count":
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValidationError(f"{field} debe ser un entero no negativo")
        return value
    if kind == "gender":
        if value not in Product.VALID_GENDERS:
            raise ValidationError(f"{field} inválido")
        return value
    if kind == "money":
        try:
            cents = amount_to_cents(value)
        except ValueError:
            raise ValidationError(f"{field} debe ser un monto válido")
        if cents is not None and cents < 0:
            raise ValidationError(f"{field} no puede ser negativo")
        return cents
    if kind == "category":
        if value is None:
            return None
        category = db.session.get(Category, value) if isinstance(value, int) else None
        if not category or not category.active:
            raise ValidationError("Categoría no encontrada")
        return category.id
    raise ValueError(kind)


def _apply_fields(product, data):
    changed = {}
    for field, (attr, kind) in PRODUCT_FIELDS.items():
        if field in data:
            value = _coerce(field, kind, data[field])
            setattr(product, attr, value)
            changed[field] = data[field]
    return changed


def create_product(data, admin_id):
    """Create an ACTIVE product. Requires name, category and PEN price."""
    missing = [f for f in ("nombre", "categoria_id", "precio_pen") if not data.get(f)]
    if missing:
        raise ValidationError(f"Faltan campos requeridos: {', '.join(missing)}")

    product = Product(status="ACTIVE", stock=0)
    _apply_fields(product, data)
    if not product.name:
        raise ValidationError("nombre es requerido")
    db.session.add(product)
    db.session.flush()

    db.session.add(
        AuditLog(
            admin_id=admin_id,
            action="CREATE_PRODUCT",
            product_id=product.id,
            payload={"name": product.name},
        )
    )
    db.session.commit()
    return product


def get_product(product_id):
    product = db.session.get(Product, product_id)
    if not product:
        raise NotFoundError("Producto no encontrado")
    return product


def update_product(product_id, data, admin_id):
    product = get_product(product_id)
    if product.is_purged:
        raise ValidationError("El producto fue eliminado permanentemente")
    changed = _apply_fields(product, data)
    if not changed:
        raise ValidationError("No hay campos para actualizar")
    if not product.name:
        raise ValidationError("nombre es requerido")
    if product.price_pen is None:
        raise ValidationError("precio_pen es requerido")
    product.updated_at = datetime.now(timezone.utc)
    db.session.add(
        AuditLog(
            admin_id=admin_id,
            action="UPDATE_PRODUCT",
            product_id=product.id,
            payload={"fields": sorted(changed)},
        )
    )
    db.session.commit()
    return product


def _transition(product_id, admin_id, allowed_from, new_status, action):
    product = get_product(product_id)
    if product.status not in allowed_from or product.is_purged:
        raise ValidationError(
            f"No se puede cambiar el producto de {product.status.lower()} "
            f"a {new_status.lower()}"
        )
    product.status = new_status
    product.updated_at = datetime.now(timezone.utc)
    db.session.add(AuditLog(admin_id=admin_id, action=action, product_id=product.id))
    return product


def activate_product(product_id, admin_id):
    product = _transition(product_id, admin_id, {"INACTIVE", "ACTIVE"}, "ACTIVE", "ACTIVATE")
    db.session.commit()
    return product


def deactivate_product(product_id, admin_id):
    product = _transition(product_id, admin_id, {"ACTIVE", "INACTIVE"}, "INACTIVE", "DEACTIVATE")
    db.session.commit()
    return product


def soft_delete_product(product_id, admin_id):
    """Hide the product and flag it deleted; historical orders keep working."""
    product = _transition(
        product_id, admin_id, {"ACTIVE", "INACTIVE"}, "DELETED", "SOFT_DELETE"
    )
    product.deleted_at = datetime.now(timezone.utc)
    db.session.commit()
    return product


def restore_product(product_id, admin_id):
    """DELETED -> INACTIVE; the admin re-activates explicitly."""
    product = _transition(product_id, admin_id, {"DELETED"}, "INACTIVE", "RESTORE")
    product.deleted_at = None
    db.session.commit()
    return product


def purge_product(product_id, admin_id):
    """Permanently delete a soft-deleted product.

    Variants and color images go away; the product row stays (status DELETED,
    purged_at set) so order lines keep a valid reference.
    """
    product = stock_service.lock_product(product_id)
    if product.status != "DELETED" or product.is_purged:
        db.session.rollback()
        raise ValidationError(
            "Solo se pueden eliminar permanentemente productos eliminados"
        )
    Variant.query.filter_by(product_id=product.id).delete()
    ColorImageSet.query.filter_by(product_id=product.id).delete()
    product.stock = 0
    product.purged_at = datetime.now(timezone.utc)
    db.session.add(
        AuditLog(admin_id=admin_id, action="PURGE", product_id=product.id)
    )
    db.session.commit()
    db.session.refresh(product)
    return product


def get_active_products(
    category_id=None, gender=None, min_price=None, max_price=None,
    currency="PEN", featured=None, on_sale=None, search=None,
    sort="fecha", page=1, per_page=20,
):
    """Fetch ACTIVE products with filters for the catalog."""
    query = Product.query.filter_by(status="ACTIVE")
    price_col = getattr(Product, f"price_{currency.lower()}")

    if category_id:
        query = query.filter(Product.category_id == category_id)
    if gender:
        query = query.filter(Product.gender == gender)
    if featured is not None:
        query = query.filter(Product.featured.is_(featured))
    if on_sale is not None:
        query = query.filter(Product.on_sale.is_(on_sale))
    if min_price is not None:
        query = query.filter(price_col >= amount_to_cents(min_price))
    if max_price is not None:
        query = query.filter(price_col <= amount_to_cents(max_price))
    if search:
        pattern = f"%{search}%"
        query = query.filter(
            db.or_(Product.name.ilike(pattern), Product.description.ilike(pattern))
        )

    if sort == "precio_asc":
        query = query.order_by(price_col.asc())
    elif sort == "precio_desc":
        query = query.order_by(price_col.desc())
    elif sort == "nombre":
        query = query.order_by(Product.name.asc())
    else:
        query = query.order_by(Product.created_at.desc(), Product.id.desc())

    return query.paginate(page=page, per_page=per_page, error_out=False)


def get_admin_products(
    status="todos", category_id=None, search=None, sort="fecha", page=1, per_page=20,
):
    """All products regardless of status, for the back-office."""
    query = Product.query
    if status in ADMIN_STATUS_FILTERS:
        query = query.filter(Product.status.in_(ADMIN_STATUS_FILTERS[status]))
    elif status != "todos":
        raise ValidationError(f"Estado inválido: {status}")
    if category_id:
        query = query.filter(Product.category_id == category_id)
    if search:
        pattern = f"%{search}%"
        query = query.filter(
            db.or_(Product.name.ilike(pattern), Product.description.ilike(pattern))
        )

    if sort == "nombre":
        query = query.order_by(Product.name.asc())
    elif sort == "precio":
        query = query.order_by(Product.price_pen.asc())
    elif sort == "stock":
        query = query.order_by(Product.stock.desc())
    else:
        query = query.order_by(Product.created_at.desc(), Product.id.desc())

    return query.paginate(page=page, per_page=per_page, error_out=False)


def get_low_stock_products():
    return (
        Product.query.filter(
            Product.status == "ACTIVE", Product.stock <= Product.stock_minimum
        )
        .order_by(Product.stock.asc())
        .all()
    )


def get_stats():
    """Counts for the admin dashboard and the `stats` command."""
    by_status = dict(
        db.session.query(Product.status, db.func.count(Product.id))
        .group_by(Product.status)
        .all()
    )
    orders_by_status = dict(
        db.session.query(Order.status, db.func.count(Order.id))
        .group_by(Order.status)
        .all()
    )
    return {
        "productos_por_estado": by_status,
        "total_productos": sum(
            n for status, n in by_status.items() if status != "DELETED"
        ),
        "productos_stock_bajo": len(get_low_stock_products()),
        "discrepancias_stock": len(stock_service.find_discrepancies()),
        "total_pedidos": sum(orders_by_status.values()),
        "pedidos_pendientes": orders_by_status.get("PENDING", 0),
    }
