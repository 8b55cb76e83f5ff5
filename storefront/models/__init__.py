from storefront.models.category import Category
from storefront.models.product import Product
from storefront.models.variant import Variant
from storefront.models.color_image import ColorImageSet
from storefront.models.order import Order, OrderLine
from storefront.models.audit_log import AuditLog

__all__ = [
    "Category",
    "Product",
    "Variant",
    "ColorImageSet",
    "Order",
    "OrderLine",
    "AuditLog",
]
