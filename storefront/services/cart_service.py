"""Cart kept in the signed cookie session.

Lines are keyed by (product, color, size); quantities are capped at the
variant stock seen when the line was added.
"""
from flask import current_app, session
from storefront.errors import NotFoundError, ValidationError
from storefront.models.product import cents_to_amount
from storefront.services import catalog_service, color_image_service


class Cart:
    def __init__(self, items=None, currency=None):
        self.items = [dict(item) for item in (items or [])]
        self.currency = currency

    def _find(self, product_id, color, size):
        for item in self.items:
            if (
                item["producto_id"] == product_id
                and item["color"] == color
                and item["talla"] == size
            ):
                return item
        return None

    def add(self, line, quantity=1):
        """Add a line or bump its quantity, never past its stock."""
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValidationError("La cantidad debe ser un entero positivo")
        existing = self._find(line["producto_id"], line["color"], line["talla"])
        if existing:
            existing["stock"] = line["stock"]
            existing["cantidad"] = min(existing["cantidad"] + quantity, existing["stock"])
            return existing
        item = dict(line, cantidad=min(quantity, line["stock"]))
        self.items.append(item)
        return item

    def update_quantity(self, product_id, color, size, quantity):
        """Clamp to [0, stock]; a line that reaches 0 is removed."""
        item = self._find(product_id, color, size)
        if not item:
            raise NotFoundError("Producto no encontrado en el carrito")
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise ValidationError("La cantidad debe ser un número entero")
        item["cantidad"] = max(0, min(quantity, item["stock"]))
        self.items = [i for i in self.items if i["cantidad"] > 0]
        return item if item["cantidad"] else None

    def remove(self, product_id, color, size):
        self.items = [
            i for i in self.items
            if not (
                i["producto_id"] == product_id
                and i["color"] == color
                and i["talla"] == size
            )
        ]

    def clear(self):
        self.items = []
        self.currency = None

    @property
    def total_cents(self):
        return sum(i["precio"] * i["cantidad"] for i in self.items)

    @property
    def count(self):
        return sum(i["cantidad"] for i in self.items)

    def to_dict(self):
        return {
            "items": [
                dict(item, precio=cents_to_amount(item["precio"]))
                for item in self.items
            ],
            "moneda": self.currency or current_app.config["DEFAULT_CURRENCY"],
            "total": cents_to_amount(self.total_cents),
            "cantidad_total": self.count,
        }


def load_cart():
    data = session.get(current_app.config["CART_SESSION_KEY"]) or {}
    return Cart(data.get("items"), data.get("currency"))


def save_cart(cart):
    session[current_app.config["CART_SESSION_KEY"]] = {
        "items": cart.items,
        "currency": cart.currency,
    }
    session.modified = True


def add_to_cart(product_id, color, size, quantity=1, currency=None):
    """Validate the selection against live inventory and add it to the cart."""
    cart = load_cart()
    currency = catalog_service.normalize_currency(currency or cart.currency)
    if cart.items and cart.currency and cart.currency != currency:
        raise ValidationError(f"El carrito usa la moneda {cart.currency}")

    product = catalog_service.load_product(product_id)
    selection = catalog_service.Selection(catalog_service.active_variants(product.id))
    if color:
        selection.select_color(color)
    if size and selection.color:
        selection.select_size(size)
    variant = selection.require_addable()

    principal_by_color = color_image_service.images_by_color(product.id)
    line = {
        "producto_id": product.id,
        "nombre": product.name,
        "color": variant.color,
        "talla": variant.size,
        "precio": catalog_service.effective_price_cents(product, currency),
        "stock": variant.stock,
        "imagen": catalog_service.display_image(product, principal_by_color, variant.color),
    }
    cart.currency = currency
    cart.add(line, quantity)
    save_cart(cart)
    return cart


def update_cart_item(product_id, color, size, quantity):
    cart = load_cart()
    cart.update_quantity(product_id, color, size, quantity)
    if not cart.items:
        cart.clear()
    save_cart(cart)
    return cart


def remove_cart_item(product_id, color, size):
    cart = load_cart()
    cart.remove(product_id, color, size)
    if not cart.items:
        cart.clear()
    save_cart(cart)
    return cart


def clear_cart():
    cart = load_cart()
    cart.clear()
    save_cart(cart)
    return cart
