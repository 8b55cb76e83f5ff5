"""Tests for the variant store and its endpoints."""
import pytest
from storefront.errors import ConflictError, NotFoundError, ValidationError
from storefront.models.audit_log import AuditLog
from storefront.models.product import Product
from storefront.models.variant import Variant
from storefront.services import variant_service


def test_create_variant_resyncs_stock(db, make_product):
    p = make_product()
    v = variant_service.create_variant(
        p.id, {"color": " Negro ", "size": "M", "stock": 4}, admin_id=1
    )

    assert v.color == "Negro"
    assert v.active
    assert db.session.get(Product, p.id).stock == 4
    assert AuditLog.query.filter_by(action="CREATE_VARIANT").count() == 1


def test_create_duplicate_variant_conflicts(db, hoodie):
    with pytest.raises(ConflictError):
        variant_service.create_variant(
            hoodie.id, {"color": "Black", "size": "S", "stock": 1}, admin_id=1
        )

    assert Variant.query.filter_by(product_id=hoodie.id).count() == 2


def test_create_variant_validates_input(db, make_product):
    p = make_product()
    with pytest.raises(ValidationError):
        variant_service.create_variant(p.id, {"color": "", "size": "M"}, admin_id=1)
    with pytest.raises(ValidationError):
        variant_service.create_variant(
            p.id, {"color": "Rojo", "size": "M", "stock": -1}, admin_id=1
        )
    with pytest.raises(ValidationError):
        variant_service.create_variant(
            p.id, {"color": "Rojo", "size": "M", "stock": 2.5}, admin_id=1
        )


def test_create_variant_unknown_product(db):
    with pytest.raises(NotFoundError):
        variant_service.create_variant(999, {"color": "Rojo", "size": "M"}, admin_id=1)


def test_update_variant_stock(db, hoodie):
    medium = Variant.query.filter_by(product_id=hoodie.id, size="M").one()
    variant_service.update_variant(hoodie.id, medium.id, {"stock": 3}, admin_id=1)

    assert db.session.get(Product, hoodie.id).stock == 8


def test_update_variant_into_existing_combination_conflicts(db, hoodie):
    medium = Variant.query.filter_by(product_id=hoodie.id, size="M").one()
    with pytest.raises(ConflictError):
        variant_service.update_variant(hoodie.id, medium.id, {"size": "S"}, admin_id=1)

    assert db.session.get(Variant, medium.id).size == "M"


def test_reactivating_a_duplicate_conflicts(db, hoodie, make_variant):
    retired = make_variant(hoodie, "Black", "S", stock=2, active=False)
    with pytest.raises(ConflictError):
        variant_service.update_variant(
            hoodie.id, retired.id, {"active": True}, admin_id=1
        )


def test_deactivating_variant_removes_it_from_stock(db, hoodie):
    small = Variant.query.filter_by(product_id=hoodie.id, size="S").one()
    variant_service.update_variant(hoodie.id, small.id, {"active": False}, admin_id=1)

    assert db.session.get(Product, hoodie.id).stock == 0


def test_empty_update_rejected(db, hoodie):
    small = Variant.query.filter_by(product_id=hoodie.id, size="S").one()
    with pytest.raises(ValidationError):
        variant_service.update_variant(hoodie.id, small.id, {}, admin_id=1)


def test_delete_variant_of_other_product_not_found(db, hoodie, make_product, make_variant):
    other = make_product("Polo")
    foreign = make_variant(other, "Blanco", "M", stock=1)

    with pytest.raises(NotFoundError):
        variant_service.delete_variant(hoodie.id, foreign.id, admin_id=1)

    assert db.session.get(Variant, foreign.id) is not None
    assert Variant.query.filter_by(product_id=hoodie.id).count() == 2


def test_update_variant_of_other_product_not_found(db, hoodie, make_product, make_variant):
    other = make_product("Polo")
    foreign = make_variant(other, "Blanco", "M", stock=1)

    with pytest.raises(NotFoundError):
        variant_service.update_variant(hoodie.id, foreign.id, {"stock": 9}, admin_id=1)
    with pytest.raises(NotFoundError):
        variant_service.update_variant(hoodie.id, 9999, {"stock": 9}, admin_id=1)

    assert db.session.get(Variant, foreign.id).stock == 1


def test_delete_variant_resyncs_stock(db, hoodie):
    small = Variant.query.filter_by(product_id=hoodie.id, size="S").one()
    variant_service.delete_variant(hoodie.id, small.id, admin_id=1)

    assert db.session.get(Product, hoodie.id).stock == 0


def test_bulk_create_partial_success(db, make_product, make_variant):
    p = make_product("Polo Azul")
    make_variant(p, "Blue", "M", stock=1)

    result = variant_service.bulk_create(
        p.id, "Blue", ["S", "M", "L"], 10, None, admin_id=1
    )

    assert result["creadas"] == 2
    assert result["fallidas"] == 1
    assert result["errores"][0]["talla"] == "M"
    assert Variant.query.filter_by(product_id=p.id).count() == 3
    assert {v["sku"] for v in result["variantes"]} == {
        f"{p.id}-blue-s", f"{p.id}-blue-l",
    }
    assert db.session.get(Product, p.id).stock == 21


def test_bulk_create_requires_sizes(db, make_product):
    p = make_product()
    with pytest.raises(ValidationError):
        variant_service.bulk_create(p.id, "Blue", [], 1, None, admin_id=1)


# --- HTTP ---


def test_list_variants(client, hoodie):
    resp = client.get(f"/api/productos/{hoodie.id}/variantes")
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["success"] is True
    assert [(v["color"], v["talla"]) for v in data["data"]] == [
        ("Black", "M"), ("Black", "S"),
    ]


def test_create_variant_requires_token(client, hoodie):
    resp = client.post(
        f"/api/productos/{hoodie.id}/variantes",
        json={"color": "Gris", "talla": "L", "stock": 1},
    )
    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_create_variant_requires_admin(client, hoodie, customer_headers):
    resp = client.post(
        f"/api/productos/{hoodie.id}/variantes",
        json={"color": "Gris", "talla": "L", "stock": 1},
        headers=customer_headers,
    )
    assert resp.status_code == 403


def test_create_variant_endpoint(client, hoodie, admin_headers):
    resp = client.post(
        f"/api/productos/{hoodie.id}/variantes",
        json={"color": "Gris", "talla": "L", "stock": 2, "imagen_url": "gris.jpg"},
        headers=admin_headers,
    )
    assert resp.status_code == 201
    data = resp.get_json()["data"]
    assert data["talla"] == "L"
    assert data["imagen_url"] == "gris.jpg"


def test_create_duplicate_variant_endpoint(client, hoodie, admin_headers):
    resp = client.post(
        f"/api/productos/{hoodie.id}/variantes",
        json={"color": "Black", "talla": "S", "stock": 1},
        headers=admin_headers,
    )
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Ya existe una variante con este color y talla"


def test_delete_missing_variant_endpoint(client, hoodie, admin_headers):
    resp = client.delete(
        f"/api/productos/{hoodie.id}/variantes/9999", headers=admin_headers
    )
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "Variante no encontrada"


def test_bulk_create_endpoint(client, make_product, make_variant, admin_headers):
    p = make_product("Polo Azul")
    make_variant(p, "Blue", "M", stock=1)

    resp = client.post(
        f"/api/productos/{p.id}/variantes/lote",
        json={"color": "Blue", "tallas": ["S", "M", "L"], "stock": 10},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["data"]["creadas"] == 2
    assert body["message"] == "Se crearon 2 variantes correctamente (1 errores)"
