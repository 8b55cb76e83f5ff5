"""Tests for per-color image sets."""
import pytest
from storefront.errors import NotFoundError, ValidationError
from storefront.models.color_image import ColorImageSet
from storefront.models.variant import Variant
from storefront.services import color_image_service


def test_set_images_for_existing_color(db, hoodie):
    entry = color_image_service.set_color_images(
        hoodie.id, "Black", ["b1.jpg", "b2.jpg", "b1.jpg"], principal="b2.jpg"
    )

    assert entry.images == ["b2.jpg", "b1.jpg"]
    assert color_image_service.images_by_color(hoodie.id) == {"Black": "b2.jpg"}


def test_set_images_replaces_existing_entry(db, hoodie):
    color_image_service.set_color_images(hoodie.id, "Black", ["old.jpg"])
    color_image_service.set_color_images(hoodie.id, "Black", ["new.jpg"])

    entries = ColorImageSet.query.filter_by(product_id=hoodie.id).all()
    assert len(entries) == 1
    assert entries[0].images == ["new.jpg"]


def test_color_without_active_variant_rejected(db, hoodie, make_variant):
    make_variant(hoodie, "Red", "M", stock=3, active=False)

    with pytest.raises(ValidationError) as exc:
        color_image_service.set_color_images(hoodie.id, "Red", ["r.jpg"])

    assert exc.value.message == 'No existe el color "Red" para este producto'
    assert ColorImageSet.query.count() == 0


def test_empty_image_list_rejected(db, hoodie):
    with pytest.raises(ValidationError):
        color_image_service.set_color_images(hoodie.id, "Black", [])


def test_delete_missing_color_images(db, hoodie):
    with pytest.raises(NotFoundError):
        color_image_service.delete_color_images(hoodie.id, "Black")


# --- HTTP ---


def test_upsert_and_list_endpoint(client, hoodie, admin_headers):
    resp = client.post(
        f"/api/productos/{hoodie.id}/imagenes-color",
        json={"color": "Black", "imagenes": ["b1.jpg", "b2.jpg"]},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    assert resp.get_json()["data"]["imagen_principal"] == "b1.jpg"

    resp = client.get(f"/api/productos/{hoodie.id}/imagenes-color")
    assert resp.get_json()["data"] == [
        {
            "producto_id": hoodie.id,
            "color": "Black",
            "imagen_principal": "b1.jpg",
            "imagenes": ["b1.jpg", "b2.jpg"],
        }
    ]


def test_upsert_unknown_color_endpoint(client, hoodie, admin_headers):
    resp = client.post(
        f"/api/productos/{hoodie.id}/imagenes-color",
        json={"color": "Verde", "imagenes": ["v.jpg"]},
        headers=admin_headers,
    )
    assert resp.status_code == 400
    assert resp.get_json()["success"] is False


def test_delete_endpoint(client, hoodie, admin_headers):
    color_image_service.set_color_images(hoodie.id, "Black", ["b1.jpg"])
    assert client.get(f"/api/productos/{hoodie.id}?color=Black").get_json()[
        "data"
    ]["imagen_principal"] == "b1.jpg"

    resp = client.delete(
        f"/api/productos/{hoodie.id}/imagenes-color/Black", headers=admin_headers
    )
    assert resp.status_code == 200
    assert ColorImageSet.query.count() == 0

    # variants stay, imagery falls back to the product default
    assert Variant.query.filter_by(product_id=hoodie.id).count() == 2
    view = client.get(f"/api/productos/{hoodie.id}?color=Black").get_json()["data"]
    assert view["colores"] == ["Black"]
    assert view["imagen_principal"] is None


def test_delete_matches_trimmed_color(client, hoodie, admin_headers):
    color_image_service.set_color_images(hoodie.id, " Black ", ["b1.jpg"])

    resp = client.delete(
        f"/api/productos/{hoodie.id}/imagenes-color/Black%20", headers=admin_headers
    )

    assert resp.status_code == 200
    assert ColorImageSet.query.count() == 0


def test_images_available_again_after_delete(db, hoodie):
    color_image_service.set_color_images(hoodie.id, "Black", ["b1.jpg"])
    color_image_service.delete_color_images(hoodie.id, "Black")
    color_image_service.set_color_images(hoodie.id, "Black", ["b2.jpg"])

    assert [e.images for e in color_image_service.get_color_images(hoodie.id)] == [
        ["b2.jpg"]
    ]
