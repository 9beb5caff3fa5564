"""
Orders Module (``erp_modules.orders``).

Quotes, sales orders and purchase orders made of priced line items with
per-line and overall percentage discounts.
"""

from erp_modules.orders.models import DocumentKind, LineItem, OrderDocument, ProductRef
from erp_modules.orders.service import OrderService

__all__ = [
    "DocumentKind",
    "LineItem",
    "OrderDocument",
    "ProductRef",
    "OrderService",
]
