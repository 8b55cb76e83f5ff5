"""Checkout and order endpoints."""
from flask import current_app, g, request
from storefront.auth import admin_required, login_required
from storefront.blueprints.api import api_bp
from storefront.blueprints.api.helpers import json_body, ok
from storefront.errors import ForbiddenError
from storefront.services import cart_service, order_service


@api_bp.route("/pedidos")
@login_required
def list_orders():
    """Own orders; admins can pass ?todos=true for every order."""
    if request.args.get("todos") == "true":
        if g.user.get("rol") != "admin":
            raise ForbiddenError("Permisos de administrador requeridos")
        status = request.args.get("estado")
        orders = order_service.get_all_orders(
            order_service.parse_status(status) if status else None
        )
    else:
        orders = order_service.get_orders_for_user(g.user["id"])
    return ok([o.to_dict(with_lines=False) for o in orders])


@api_bp.route("/pedidos", methods=["POST"])
@login_required
def create_order():
    """Place an order from the body items, or from the session cart."""
    body = json_body()
    from_cart = "items" not in body
    if from_cart:
        cart = cart_service.load_cart()
        items = [
            {
                "producto_id": i["producto_id"],
                "color": i["color"],
                "talla": i["talla"],
                "cantidad": i["cantidad"],
            }
            for i in cart.items
        ]
        currency = body.get("moneda") or cart.currency
    else:
        items = body.get("items")
        currency = body.get("moneda")

    order = order_service.create_order(
        g.user,
        items,
        shipping_address=body.get("direccion_envio"),
        payment_method=body.get("metodo_pago"),
        notes=body.get("notas"),
        currency=currency,
        customer={
            "email": body.get("email_cliente"),
            "nombre": body.get("nombre_cliente"),
            "telefono": body.get("telefono_cliente"),
        },
        shipping_cost=current_app.config["SHIPPING_FLAT_RATE"],
    )
    if from_cart:
        cart_service.clear_cart()
    return ok(order.to_dict(), "Pedido creado exitosamente", status=201)


@api_bp.route("/pedidos/<int:order_id>")
@login_required
def get_order(order_id):
    order = order_service.get_order(order_id)
    if order.user_id != g.user["id"] and g.user.get("rol") != "admin":
        raise ForbiddenError("Acceso denegado")
    return ok(order.to_dict())


@api_bp.route("/pedidos/<int:order_id>/estado", methods=["PUT"])
@admin_required
def update_order_status(order_id):
    body = json_body()
    order = order_service.update_order_status(order_id, body.get("estado"), g.user["id"])
    return ok(order.to_dict(), "Estado del pedido actualizado")
