"""Per-color image endpoints: /productos/<id>/imagenes-color."""
from flask import g
from storefront.auth import admin_required
from storefront.blueprints.api import api_bp
from storefront.blueprints.api.helpers import json_body, ok
from storefront.services import color_image_service


@api_bp.route("/productos/<int:product_id>/imagenes-color")
def list_color_images(product_id):
    entries = color_image_service.get_color_images(product_id)
    return ok([entry.to_dict() for entry in entries])


@api_bp.route("/productos/<int:product_id>/imagenes-color", methods=["POST"])
@admin_required
def set_color_images(product_id):
    body = json_body()
    entry = color_image_service.set_color_images(
        product_id,
        color=body.get("color"),
        images=body.get("imagenes"),
        principal=body.get("imagen_principal"),
        admin_id=g.user["id"],
    )
    return ok(
        entry.to_dict(),
        f"Imágenes del color {entry.color} actualizadas correctamente",
    )


@api_bp.route(
    "/productos/<int:product_id>/imagenes-color/<path:color>", methods=["DELETE"]
)
@admin_required
def delete_color_images(product_id, color):
    color_image_service.delete_color_images(product_id, color, admin_id=g.user["id"])
    return ok({"color": color}, f"Imágenes del color {color} eliminadas correctamente")
