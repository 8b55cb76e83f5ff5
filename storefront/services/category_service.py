from storefront.extensions import db
from storefront.errors import NotFoundError, ValidationError
from storefront.models.category import Category
from storefront.models.product import Product


def get_categories(with_counts=False):
    """Active categories ordered by sort order then name."""
    categories = (
        Category.query.filter_by(active=True)
        .order_by(Category.sort_order.asc(), Category.name.asc())
        .all()
    )
    if not with_counts:
        return [c.to_dict() for c in categories]

    counts = dict(
        db.session.query(Product.category_id, db.func.count(Product.id))
        .filter(Product.status == "ACTIVE")
        .group_by(Product.category_id)
        .all()
    )
    result = []
    for category in categories:
        data = category.to_dict()
        data["productos_count"] = counts.get(category.id, 0)
        result.append(data)
    return result


def get_category(category_id):
    category = db.session.get(Category, category_id)
    if not category or not category.active:
        raise NotFoundError("Categoría no encontrada")
    return category


def _clean(data, partial=False):
    """Map wire fields to model attributes. Partial updates skip absent keys."""
    values = {}
    if not partial or "nombre" in data:
        name = data.get("nombre")
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("El nombre es requerido")
        values["name"] = name.strip()
    if not partial or "descripcion" in data:
        values["description"] = (data.get("descripcion") or "").strip()
    if not partial or "imagen" in data:
        values["image"] = (data.get("imagen") or "").strip() or None
    if not partial or "orden" in data:
        order = data.get("orden", 1)
        if isinstance(order, bool) or not isinstance(order, int):
            raise ValidationError("orden debe ser un número entero")
        values["sort_order"] = order
    return values


def create_category(data):
    category = Category(active=True, **_clean(data))
    db.session.add(category)
    db.session.commit()
    return category


def update_category(category_id, data):
    category = get_category(category_id)
    values = _clean(data, partial=True)
    if not values:
        raise ValidationError("No hay campos para actualizar")
    for attr, value in values.items():
        setattr(category, attr, value)
    db.session.commit()
    return category


def delete_category(category_id):
    """Soft delete; refused while active products still use the category."""
    category = get_category(category_id)
    in_use = Product.query.filter_by(category_id=category.id, status="ACTIVE").count()
    if in_use:
        raise ValidationError(
            "No se puede eliminar la categoría porque tiene productos asociados"
        )
    category.active = False
    db.session.commit()
