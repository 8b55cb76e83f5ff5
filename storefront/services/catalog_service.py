"""Storefront read model: colors, sizes, imagery and price for a product."""
from flask import current_app
from storefront.extensions import db
from storefront.errors import NotFoundError, ValidationError
from storefront.models.product import CURRENCIES, Product, cents_to_amount
from storefront.models.variant import Variant
from storefront.services import color_image_service

SIZE_ORDER = ["XS", "S", "M", "L", "XL", "XXL"]


def size_sort_key(size):
    """Letter sizes first, then numeric sizes, then anything else."""
    label = size.strip().upper()
    if label in SIZE_ORDER:
        return (0, SIZE_ORDER.index(label), "")
    try:
        return (1, float(label), "")
    except ValueError:
        return (2, 0, label)


def _in_stock(variants):
    return [v for v in variants if v.active and v.stock > 0]


def available_colors(variants):
    """Colors that have at least one active variant in stock."""
    return sorted({v.color for v in _in_stock(variants)})


def available_sizes(variants, color):
    """Sizes of `color` with an active variant in stock."""
    sizes = {v.size for v in _in_stock(variants) if v.color == color}
    return sorted(sizes, key=size_sort_key)


def selectable_colors(variants):
    """Colors with any active variant, in stock or not."""
    return sorted({v.color for v in variants if v.active})


def find_variant(variants, color, size):
    for v in variants:
        if v.active and v.color == color and v.size == size:
            return v
    return None


def display_image(product, principal_by_color, color=None):
    """Principal image of the selected color, else the product default."""
    if color and principal_by_color.get(color):
        return principal_by_color[color]
    return product.image_url


def normalize_currency(currency=None):
    currency = (currency or current_app.config["DEFAULT_CURRENCY"]).upper()
    if currency not in CURRENCIES:
        raise ValidationError(f"Moneda no soportada: {currency}")
    return currency


def effective_price_cents(product, currency):
    """Sale price when the product is on sale and has one in this currency."""
    currency = normalize_currency(currency)
    sale = product.sale_price_cents(currency)
    if product.on_sale and sale is not None:
        return sale
    return product.price_cents(currency)


class Selection:
    """Color/size selection for one product page.

    NO_COLOR -> COLOR_SELECTED -> SIZE_SELECTED -> ADDABLE. Changing the color
    clears the size; a color with no sizes in stock never reaches ADDABLE.
    """

    NO_COLOR = "NO_COLOR"
    COLOR_SELECTED = "COLOR_SELECTED"
    SIZE_SELECTED = "SIZE_SELECTED"
    ADDABLE = "ADDABLE"

    def __init__(self, variants, color=None, size=None):
        self.variants = list(variants)
        self.color = None
        self.size = None
        if color:
            self.select_color(color)
        if size:
            self.select_size(size)

    @property
    def state(self):
        if not self.color:
            return self.NO_COLOR
        if not self.size:
            return self.COLOR_SELECTED
        variant = self.variant
        if variant and variant.stock > 0:
            return self.ADDABLE
        return self.SIZE_SELECTED

    @property
    def variant(self):
        if not self.color or not self.size:
            return None
        return find_variant(self.variants, self.color, self.size)

    @property
    def sizes(self):
        if not self.color:
            return []
        return available_sizes(self.variants, self.color)

    def select_color(self, color):
        if color not in selectable_colors(self.variants):
            raise ValidationError(f'El color "{color}" no está disponible')
        if color != self.color:
            self.size = None
        self.color = color
        return self.state

    def select_size(self, size):
        if not self.color:
            raise ValidationError("Selecciona un color primero")
        if size not in self.sizes:
            raise ValidationError(
                f'La talla "{size}" no está disponible en color {self.color}'
            )
        self.size = size
        return self.state

    def refresh(self, variants):
        """Re-evaluate the selection against fresh inventory."""
        self.variants = list(variants)
        if self.color and self.color not in selectable_colors(self.variants):
            self.color = None
            self.size = None
        elif self.size and self.size not in self.sizes:
            self.size = None
        return self.state

    def require_addable(self):
        """Raise ValidationError naming what blocks add-to-cart."""
        if not self.color:
            raise ValidationError("Por favor selecciona un color")
        if not self.size:
            raise ValidationError("Por favor selecciona una talla")
        variant = self.variant
        if not variant or variant.stock <= 0:
            raise ValidationError(
                f"Sin stock disponible para {self.color} / {self.size}"
            )
        return variant


def load_product(product_id, include_hidden=False):
    product = db.session.get(Product, product_id)
    if not product or (not include_hidden and not product.is_visible):
        raise NotFoundError("Producto no encontrado")
    return product


def active_variants(product_id):
    return (
        Variant.query.filter_by(product_id=product_id, active=True)
        .order_by(Variant.color, Variant.size)
        .all()
    )


def build_product_view(product, variants, color_images, currency=None, color=None):
    """Shape a product for the storefront product page."""
    currency = normalize_currency(currency)
    principal_by_color = {
        entry.color: entry.principal_image for entry in color_images
        if entry.principal_image
    }
    colors = available_colors(variants)
    price = effective_price_cents(product, currency)
    regular = product.price_cents(currency)

    data = product.to_dict()
    data.update({
        "moneda": currency,
        "precio": cents_to_amount(price),
        "precio_original": cents_to_amount(regular) if price != regular else None,
        "colores": colors,
        "tallas": sorted(
            {v.size for v in _in_stock(variants)}, key=size_sort_key
        ),
        "tallas_por_color": {c: available_sizes(variants, c) for c in colors},
        "variantes": [v.to_dict() for v in variants if v.active],
        "imagenes_por_color": {
            entry.color: list(entry.images) for entry in color_images
        },
        "imagen_principal": display_image(product, principal_by_color, color),
    })
    return data


def get_product_view(product_id, currency=None, color=None):
    product = load_product(product_id)
    return build_product_view(
        product,
        active_variants(product.id),
        color_image_service.get_color_images(product.id),
        currency=currency,
        color=color,
    )
