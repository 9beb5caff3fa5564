"""
Catalog Module (``erp_modules.catalog``).

Products with list prices and the payment-method catalog.
"""

from erp_modules.catalog.models import (
    DEFAULT_PAYMENT_METHODS,
    PaymentMethod,
    PaymentMethodKind,
    Product,
)
from erp_modules.catalog.service import CatalogService

__all__ = [
    "DEFAULT_PAYMENT_METHODS",
    "PaymentMethod",
    "PaymentMethodKind",
    "Product",
    "CatalogService",
]
