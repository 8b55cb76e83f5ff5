"""Product catalog and product lifecycle endpoints."""
from flask import current_app, g, request
from storefront.auth import admin_required, current_user
from storefront.blueprints.api import api_bp
from storefront.blueprints.api.helpers import (
    bool_arg, float_arg, json_body, ok, page_args, pagination_meta,
)
from storefront.errors import ForbiddenError
from storefront.services import (
    catalog_service, color_image_service, product_service, stock_service,
)
from storefront.workers.stock_reconcile import enqueue_reconcile_all


@api_bp.route("/productos")
def list_products():
    """Public catalog, or every product for admins with ?admin=true."""
    page, limit = page_args(current_app.config["DEFAULT_PAGE_SIZE"])

    if request.args.get("admin") == "true":
        if current_user().get("rol") != "admin":
            raise ForbiddenError("Permisos de administrador requeridos")
        pagination = product_service.get_admin_products(
            status=request.args.get("estado", "todos"),
            category_id=request.args.get("categoria_id", type=int),
            search=request.args.get("busqueda"),
            sort=request.args.get("orden", "fecha"),
            page=page,
            per_page=limit,
        )
        data = []
        for product in pagination.items:
            item = product.to_dict()
            item["resumen_stock"] = stock_service.stock_report(product)
            data.append(item)
        return ok(data, total=pagination.total, pagination=pagination_meta(pagination))

    currency = catalog_service.normalize_currency(request.args.get("moneda"))
    pagination = product_service.get_active_products(
        category_id=request.args.get("categoria_id", type=int),
        gender=request.args.get("genero"),
        min_price=float_arg("precio_min"),
        max_price=float_arg("precio_max"),
        currency=currency,
        featured=bool_arg("destacado"),
        on_sale=bool_arg("en_oferta"),
        search=request.args.get("busqueda"),
        sort=request.args.get("orden", "fecha"),
        page=page,
        per_page=limit,
    )
    data = [
        catalog_service.build_product_view(
            product,
            catalog_service.active_variants(product.id),
            color_image_service.get_color_images(product.id),
            currency=currency,
        )
        for product in pagination.items
    ]
    return ok(data, pagination=pagination_meta(pagination))


@api_bp.route("/productos", methods=["POST"])
@admin_required
def create_product():
    product = product_service.create_product(json_body(), g.user["id"])
    return ok(product.to_dict(), "Producto creado exitosamente", status=201)


@api_bp.route("/productos/<int:product_id>")
def get_product(product_id):
    """Storefront view: colors, sizes per color, imagery and price."""
    data = catalog_service.get_product_view(
        product_id,
        currency=request.args.get("moneda"),
        color=request.args.get("color"),
    )
    return ok(data)


@api_bp.route("/productos/<int:product_id>", methods=["PUT"])
@admin_required
def update_product(product_id):
    product = product_service.update_product(product_id, json_body(), g.user["id"])
    return ok(product.to_dict(), "Producto actualizado exitosamente")


@api_bp.route("/productos/<int:product_id>", methods=["DELETE"])
@admin_required
def delete_product(product_id):
    product = product_service.soft_delete_product(product_id, g.user["id"])
    return ok(product.to_dict(), "Producto eliminado exitosamente")


@api_bp.route("/productos/<int:product_id>/activar", methods=["POST"])
@admin_required
def activate_product(product_id):
    product = product_service.activate_product(product_id, g.user["id"])
    return ok(product.to_dict(), "Producto activado exitosamente")


@api_bp.route("/productos/<int:product_id>/desactivar", methods=["POST"])
@admin_required
def deactivate_product(product_id):
    product = product_service.deactivate_product(product_id, g.user["id"])
    return ok(product.to_dict(), "Producto desactivado exitosamente")


@api_bp.route("/productos/<int:product_id>/restaurar", methods=["POST"])
@admin_required
def restore_product(product_id):
    product = product_service.restore_product(product_id, g.user["id"])
    return ok(product.to_dict(), "Producto restaurado exitosamente")


@api_bp.route("/productos/<int:product_id>/eliminar-permanente", methods=["DELETE"])
@admin_required
def purge_product(product_id):
    product = product_service.purge_product(product_id, g.user["id"])
    return ok(product.to_dict(), "Producto eliminado permanentemente")


@api_bp.route("/productos/<int:product_id>/sincronizar-stock")
@admin_required
def stock_report(product_id):
    """Stored stock vs. variant sum, without writing anything."""
    return ok(stock_service.get_stock_report(product_id))


@api_bp.route("/productos/<int:product_id>/sincronizar-stock", methods=["PUT"])
@admin_required
def sync_stock(product_id):
    result = stock_service.sync_product_stock(product_id, admin_id=g.user["id"])
    return ok(result, result["mensaje"])


@api_bp.route("/productos/reconciliar-stock", methods=["POST"])
@admin_required
def reconcile_stock():
    job_id = enqueue_reconcile_all()
    return ok({"job_id": job_id}, "Reconciliación de stock iniciada", status=202)
