"""Tests for product administration and lifecycle."""
import pytest
from storefront.errors import ValidationError
from storefront.models.color_image import ColorImageSet
from storefront.models.product import Product
from storefront.models.variant import Variant
from storefront.services import color_image_service, product_service


def test_create_product(db, category):
    p = product_service.create_product(
        {"nombre": " Casaca Denim ", "categoria_id": category.id, "precio_pen": "189.90"},
        admin_id=1,
    )
    assert p.name == "Casaca Denim"
    assert p.price_pen == 18990
    assert p.status == "ACTIVE"


def test_create_product_missing_fields(db):
    with pytest.raises(ValidationError, match="precio_pen"):
        product_service.create_product({"nombre": "X", "categoria_id": 1}, admin_id=1)


def test_lifecycle(db, make_product):
    p = make_product()

    assert product_service.deactivate_product(p.id, 1).status == "INACTIVE"
    assert product_service.activate_product(p.id, 1).status == "ACTIVE"
    deleted = product_service.soft_delete_product(p.id, 1)
    assert deleted.status == "DELETED"
    assert deleted.deleted_at is not None

    with pytest.raises(ValidationError):
        product_service.activate_product(p.id, 1)

    restored = product_service.restore_product(p.id, 1)
    assert restored.status == "INACTIVE"
    assert restored.deleted_at is None


def test_purge_keeps_row_and_drops_inventory(db, hoodie):
    color_image_service.set_color_images(hoodie.id, "Black", ["b.jpg"])
    product_service.soft_delete_product(hoodie.id, 1)

    purged = product_service.purge_product(hoodie.id, 1)

    assert purged.is_purged
    assert purged.name == "Hoodie"
    assert purged.stock == 0
    assert Variant.query.filter_by(product_id=hoodie.id).count() == 0
    assert ColorImageSet.query.filter_by(product_id=hoodie.id).count() == 0
    assert db.session.get(Product, hoodie.id) is not None

    with pytest.raises(ValidationError):
        product_service.restore_product(hoodie.id, 1)


def test_purge_requires_soft_delete(db, make_product):
    p = make_product()
    with pytest.raises(ValidationError):
        product_service.purge_product(p.id, 1)


def test_stats(db, hoodie, make_product):
    make_product("Oculto", status="INACTIVE")

    stats = product_service.get_stats()

    assert stats["total_productos"] == 2
    assert stats["productos_por_estado"] == {"ACTIVE": 1, "INACTIVE": 1}
    assert stats["productos_stock_bajo"] == 1
    assert stats["discrepancias_stock"] == 0


# --- HTTP ---


def test_admin_listing_requires_admin(client, customer_headers):
    assert client.get("/api/productos?admin=true").status_code == 401
    resp = client.get("/api/productos?admin=true", headers=customer_headers)
    assert resp.status_code == 403


def test_admin_listing_includes_hidden(client, hoodie, make_product, admin_headers):
    make_product("Oculto", status="INACTIVE")

    resp = client.get("/api/productos?admin=true", headers=admin_headers)

    body = resp.get_json()
    assert body["total"] == 2
    assert {p["nombre"] for p in body["data"]} == {"Hoodie", "Oculto"}
    assert all("resumen_stock" in p for p in body["data"])


def test_create_product_endpoint(client, category, admin_headers):
    resp = client.post(
        "/api/productos",
        json={"nombre": "Vestido", "categoria_id": category.id, "precio_pen": 99.9},
        headers=admin_headers,
    )
    assert resp.status_code == 201
    assert resp.get_json()["data"]["precio_pen"] == 99.9


def test_delete_endpoint_hides_product(client, hoodie, admin_headers):
    resp = client.delete(f"/api/productos/{hoodie.id}", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.get_json()["data"]["estado"] == "eliminado"
    assert client.get(f"/api/productos/{hoodie.id}").status_code == 404


def test_dashboard_stats_endpoint(client, hoodie, admin_headers):
    resp = client.get("/api/dashboard/estadisticas", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.get_json()["data"]["total_productos"] == 1
