"""Session cart endpoints."""
from storefront.blueprints.api import api_bp
from storefront.blueprints.api.helpers import json_body, ok
from storefront.errors import ValidationError
from storefront.services import cart_service


def _line_key(body):
    product_id = body.get("producto_id")
    if isinstance(product_id, bool) or not isinstance(product_id, int):
        raise ValidationError("producto_id inválido")
    return product_id, body.get("color"), body.get("talla")


@api_bp.route("/carrito")
def view_cart():
    return ok(cart_service.load_cart().to_dict())


@api_bp.route("/carrito", methods=["POST"])
def add_to_cart():
    body = json_body()
    product_id, color, size = _line_key(body)
    cart = cart_service.add_to_cart(
        product_id,
        color,
        size,
        quantity=body.get("cantidad", 1),
        currency=body.get("moneda"),
    )
    return ok(cart.to_dict(), f"Agregado al carrito ({color}, {size})")


@api_bp.route("/carrito", methods=["DELETE"])
def clear_cart():
    return ok(cart_service.clear_cart().to_dict())


@api_bp.route("/carrito/items", methods=["PUT"])
def update_cart_item():
    body = json_body()
    product_id, color, size = _line_key(body)
    cart = cart_service.update_cart_item(product_id, color, size, body.get("cantidad"))
    return ok(cart.to_dict())


@api_bp.route("/carrito/items", methods=["DELETE"])
def remove_cart_item():
    body = json_body()
    product_id, color, size = _line_key(body)
    return ok(cart_service.remove_cart_item(product_id, color, size).to_dict())
