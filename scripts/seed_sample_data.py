#!/usr/bin/env python3
"""Seed sample products for local development."""
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from storefront import create_app
from storefront.extensions import db
from storefront.models.category import Category
from storefront.models.color_image import ColorImageSet
from storefront.models.product import Product
from storefront.models.variant import Variant
from storefront.services import stock_service

app = create_app()

SAMPLE_PRODUCTS = [
    {
        "name": "Hoodie Oversize",
        "category": "Casacas",
        "price": 12990,
        "sale_price": 9990,
        "gender": "unisex",
        "variants": {
            "Negro": {"S": 5, "M": 0, "L": 3, "XL": 2},
            "Gris": {"M": 4, "L": 1},
        },
    },
    {
        "name": "Polo Básico Algodón",
        "category": "Polos",
        "price": 4990,
        "gender": "unisex",
        "variants": {
            "Blanco": {"XS": 6, "S": 10, "M": 12, "L": 8},
            "Negro": {"S": 4, "M": 9},
            "Azul": {"M": 0},
        },
    },
    {
        "name": "Casaca Denim",
        "category": "Casacas",
        "price": 18990,
        "gender": "masculino",
        "variants": {"Azul": {"M": 2, "L": 2, "XL": 1}},
    },
    {
        "name": "Vestido Floral",
        "category": "Vestidos",
        "price": 15990,
        "gender": "femenino",
        "variants": {
            "Rosa": {"S": 3, "M": 3},
            "Celeste": {"S": 1, "M": 0, "L": 2},
        },
    },
    {
        "name": "Jean Slim",
        "category": "Pantalones",
        "price": 13990,
        "gender": "masculino",
        "variants": {"Azul": {"28": 3, "30": 5, "32": 4, "34": 0}},
    },
    {
        "name": "Gorro de Lana",
        "category": "Accesorios",
        "price": 3990,
        "gender": "unisex",
        "variants": {"Rojo": {"Única": 7}, "Negro": {"Única": 2}},
    },
]

# Placeholder images per color for demo purposes
COLORS = {
    "Negro": "111111", "Gris": "7f8c8d", "Blanco": "ecf0f1", "Azul": "2c3e50",
    "Rosa": "e91e63", "Celeste": "5dade2", "Rojo": "c0392b",
}


def _category(name, sort_order):
    category = Category.query.filter_by(name=name).first()
    if not category:
        category = Category(name=name, sort_order=sort_order)
        db.session.add(category)
        db.session.flush()
    return category


def seed():
    with app.app_context():
        if Product.query.first():
            print("Products already exist — skipping seed.")
            return

        for i, item in enumerate(SAMPLE_PRODUCTS):
            category = _category(item["category"], i + 1)
            product = Product(
                name=item["name"],
                category_id=category.id,
                price_pen=item["price"],
                sale_price_pen=item.get("sale_price"),
                on_sale="sale_price" in item,
                gender=item["gender"],
                featured=i < 2,
            )
            db.session.add(product)
            db.session.flush()

            for color, sizes in item["variants"].items():
                for size, stock in sizes.items():
                    db.session.add(
                        Variant(
                            product_id=product.id,
                            color=color,
                            size=size,
                            stock=stock,
                            sku=f"{product.id}-{color.lower()}-{size.lower()}",
                        )
                    )
                hex_color = COLORS.get(color, "95a5a6")
                db.session.add(
                    ColorImageSet(
                        product_id=product.id,
                        color=color,
                        images=[
                            f"https://placehold.co/600x800/{hex_color}/fff?text={n}"
                            for n in (1, 2)
                        ],
                    )
                )

            stock_service.resync(product)
            print(f"  Created #{product.id}: {item['name']} ({product.stock} units)")

        db.session.commit()
        print(f"\nSeeded {len(SAMPLE_PRODUCTS)} products.")


if __name__ == "__main__":
    seed()
