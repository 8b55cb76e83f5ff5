from flask import Blueprint

api_bp = Blueprint("api", __name__)

from storefront.blueprints.api import (  # noqa: F401, E402
    products,
    variants,
    color_images,
    categories,
    cart,
    orders,
    dashboard,
)
