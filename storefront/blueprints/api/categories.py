"""Category endpoints."""
from flask import request
from storefront.auth import admin_required
from storefront.blueprints.api import api_bp
from storefront.blueprints.api.helpers import json_body, ok
from storefront.services import category_service


@api_bp.route("/categorias")
def list_categories():
    with_counts = request.args.get("con_conteo") == "true"
    return ok(category_service.get_categories(with_counts=with_counts))


@api_bp.route("/categorias", methods=["POST"])
@admin_required
def create_category():
    category = category_service.create_category(json_body())
    return ok(category.to_dict(), "Categoría creada exitosamente", status=201)


@api_bp.route("/categorias/<int:category_id>")
def get_category(category_id):
    return ok(category_service.get_category(category_id).to_dict())


@api_bp.route("/categorias/<int:category_id>", methods=["PUT"])
@admin_required
def update_category(category_id):
    category = category_service.update_category(category_id, json_body())
    return ok(category.to_dict(), "Categoría actualizada exitosamente")


@api_bp.route("/categorias/<int:category_id>", methods=["DELETE"])
@admin_required
def delete_category(category_id):
    category_service.delete_category(category_id)
    return ok({"id": category_id}, "Categoría eliminada correctamente")
