"""Variant endpoints: /productos/<id>/variantes."""
from flask import g
from storefront.auth import admin_required
from storefront.blueprints.api import api_bp
from storefront.blueprints.api.helpers import json_body, ok
from storefront.services import variant_service

# wire name -> service field
FIELD_MAP = {
    "color": "color",
    "talla": "size",
    "stock": "stock",
    "sku": "sku",
    "imagen_url": "image_url",
    "activo": "active",
}


def _variant_fields(body):
    return {FIELD_MAP[k]: v for k, v in body.items() if k in FIELD_MAP}


@api_bp.route("/productos/<int:product_id>/variantes")
def list_variants(product_id):
    variants = variant_service.list_variants(product_id)
    return ok([v.to_dict() for v in variants])


@api_bp.route("/productos/<int:product_id>/variantes", methods=["POST"])
@admin_required
def create_variant(product_id):
    variant = variant_service.create_variant(
        product_id, _variant_fields(json_body()), g.user["id"]
    )
    return ok(variant.to_dict(), "Variante creada exitosamente", status=201)


@api_bp.route("/productos/<int:product_id>/variantes/lote", methods=["POST"])
@admin_required
def bulk_create_variants(product_id):
    """Quick creation: one color across several sizes, best effort."""
    body = json_body()
    result = variant_service.bulk_create(
        product_id,
        color=body.get("color"),
        sizes=body.get("tallas"),
        stock=body.get("stock"),
        image_url=body.get("imagen_url"),
        admin_id=g.user["id"],
    )
    return ok(result, result["mensaje"])


@api_bp.route("/productos/<int:product_id>/variantes/<int:variant_id>", methods=["PUT"])
@admin_required
def update_variant(product_id, variant_id):
    variant = variant_service.update_variant(
        product_id, variant_id, _variant_fields(json_body()), g.user["id"]
    )
    return ok(variant.to_dict(), "Variante actualizada exitosamente")


@api_bp.route(
    "/productos/<int:product_id>/variantes/<int:variant_id>", methods=["DELETE"]
)
@admin_required
def delete_variant(product_id, variant_id):
    variant_service.delete_variant(product_id, variant_id, g.user["id"])
    return ok({"id": variant_id}, "Variante eliminada exitosamente")
