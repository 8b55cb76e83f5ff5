"""Admin dashboard endpoints."""
from datetime import datetime, timezone
from flask import request
from storefront.auth import admin_required
from storefront.blueprints.api import api_bp
from storefront.blueprints.api.helpers import ok
from storefront.services import dashboard_service, product_service, stock_service


def _limit(default=10, max_limit=50):
    limit = request.args.get("limite", default, type=int)
    return min(max(limit, 1), max_limit)


@api_bp.route("/dashboard/estadisticas")
@admin_required
def dashboard_stats():
    return ok(product_service.get_stats())


@api_bp.route("/dashboard/stock")
@admin_required
def dashboard_stock():
    """Low-stock products and stock/variant discrepancies."""
    return ok({
        "stock_bajo": [p.to_dict() for p in product_service.get_low_stock_products()],
        "discrepancias": stock_service.find_discrepancies(),
    })


@api_bp.route("/dashboard/productos-mas-vendidos")
@admin_required
def dashboard_best_sellers():
    return ok(dashboard_service.best_sellers(_limit()))


@api_bp.route("/dashboard/pedidos-recientes")
@admin_required
def dashboard_recent_orders():
    return ok(dashboard_service.recent_orders(_limit()))


@api_bp.route("/dashboard/ventas-por-mes")
@admin_required
def dashboard_sales_by_month():
    year = request.args.get("anio", datetime.now(timezone.utc).year, type=int)
    return ok(dashboard_service.sales_by_month(year), anio=year)
