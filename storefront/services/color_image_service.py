"""Per-color image sets shared by all sizes of a color."""
import logging
from storefront.extensions import db
from storefront.errors import NotFoundError, ValidationError
from storefront.models.audit_log import AuditLog
from storefront.models.color_image import ColorImageSet
from storefront.models.product import Product
from storefront.models.variant import Variant

logger = logging.getLogger(__name__)


def get_color_images(product_id):
    return (
        ColorImageSet.query.filter_by(product_id=product_id)
        .order_by(ColorImageSet.color)
        .all()
    )


def images_by_color(product_id):
    """{color: principal image} for the product's image sets."""
    return {
        entry.color: entry.principal_image
        for entry in get_color_images(product_id)
        if entry.principal_image
    }


def _clean_images(images, principal):
    if not isinstance(images, list):
        raise ValidationError("imagenes debe ser una lista de URLs")
    cleaned = []
    for url in images:
        if not isinstance(url, str) or not url.strip():
            raise ValidationError("Cada imagen debe ser una URL no vacía")
        url = url.strip()
        if url not in cleaned:
            cleaned.append(url)
    if principal:
        principal = str(principal).strip()
        if principal in cleaned:
            cleaned.remove(principal)
        cleaned.insert(0, principal)
    if not cleaned:
        raise ValidationError("Se requiere al menos una imagen")
    return cleaned


def set_color_images(product_id, color, images, principal=None, admin_id=None):
    """Replace the image list for one color of a product.

    The color must belong to at least one active variant of the product.
    """
    product = db.session.get(Product, product_id)
    if not product:
        raise NotFoundError("Producto no encontrado")

    if not color or not str(color).strip():
        raise ValidationError("El color es requerido")
    color = str(color).strip()

    has_color = (
        db.session.query(Variant.id)
        .filter_by(product_id=product.id, color=color, active=True)
        .first()
    )
    if not has_color:
        raise ValidationError(f'No existe el color "{color}" para este producto')

    images = _clean_images(images, principal)

    entry = ColorImageSet.query.filter_by(product_id=product.id, color=color).first()
    if entry:
        entry.images = images
    else:
        entry = ColorImageSet(product_id=product.id, color=color, images=images)
        db.session.add(entry)

    if admin_id is not None:
        db.session.add(
            AuditLog(
                admin_id=admin_id,
                action="SET_COLOR_IMAGES",
                product_id=product.id,
                payload={"color": color, "count": len(images)},
            )
        )
    db.session.commit()
    return entry


def delete_color_images(product_id, color, admin_id=None):
    """Drop a color's images; its variants are left alone."""
    color = str(color or "").strip()
    entry = ColorImageSet.query.filter_by(product_id=product_id, color=color).first()
    if not entry:
        raise NotFoundError("No se encontraron imágenes para este color")
    db.session.delete(entry)
    if admin_id is not None:
        db.session.add(
            AuditLog(
                admin_id=admin_id,
                action="DELETE_COLOR_IMAGES",
                product_id=product_id,
                payload={"color": color},
            )
        )
    db.session.commit()
