"""
Catalog Service (``erp_modules.catalog.service``).

Responsibility
--------------
In-memory lookups for products and payment methods.  Orders resolve
products here to default unit prices; the ledger resolves payment
methods here before recording a payment.

Failure modes
-------------
* ``ProductNotFoundError`` / ``PaymentMethodNotFoundError`` for unknown ids.
* ``InactiveProductError`` / ``InactivePaymentMethodError`` from
  ``require_active_product`` / ``require_active_method``.
* ``ValidationError`` when a product code is registered twice.
"""

from __future__ import annotations

import dataclasses
from typing import Iterable
from uuid import UUID

from erp_kernel.exceptions import (
    InactivePaymentMethodError,
    InactiveProductError,
    PaymentMethodNotFoundError,
    ProductNotFoundError,
    ValidationError,
)
from erp_kernel.logging_config import get_logger
from erp_modules.catalog.models import DEFAULT_PAYMENT_METHODS, PaymentMethod, Product

logger = get_logger("modules.catalog.service")


class CatalogService:
    """Products and payment methods, keyed by id."""

    def __init__(
        self,
        products: Iterable[Product] = (),
        payment_methods: Iterable[PaymentMethod] | None = None,
    ):
        self._products: dict[UUID, Product] = {}
        self._methods: dict[str, PaymentMethod] = {}
        for product in products:
            self.add_product(product)
        for method in DEFAULT_PAYMENT_METHODS if payment_methods is None else payment_methods:
            self._methods[method.id] = method

    # Products

    def add_product(self, product: Product) -> Product:
        existing = self._find_code(product.code)
        if existing is not None and existing.id != product.id:
            raise ValidationError(f"Product code already registered: {product.code}")
        self._products[product.id] = product
        logger.info("catalog_product_registered", extra={
            "product_id": str(product.id),
            "code": product.code,
            "list_price": str(product.list_price.amount),
        })
        return product

    def _find_code(self, code: str) -> Product | None:
        wanted = code.strip().lower()
        for product in self._products.values():
            if product.code.lower() == wanted:
                return product
        return None

    def get_product(self, product_id: UUID) -> Product:
        try:
            return self._products[product_id]
        except KeyError:
            raise ProductNotFoundError(str(product_id)) from None

    def require_active_product(self, product_id: UUID) -> Product:
        product = self.get_product(product_id)
        if not product.active:
            raise InactiveProductError(product.code)
        return product

    def find_product_by_code(self, code: str) -> Product:
        """Case-insensitive lookup by product code."""
        product = self._find_code(code)
        if product is None:
            raise ProductNotFoundError(code)
        return product

    def list_products(self, include_inactive: bool = False) -> list[Product]:
        products = [p for p in self._products.values() if include_inactive or p.active]
        return sorted(products, key=lambda p: p.code)

    # Payment methods

    def get_payment_method(self, method_id: str) -> PaymentMethod:
        try:
            return self._methods[method_id]
        except KeyError:
            raise PaymentMethodNotFoundError(method_id) from None

    def require_active_method(self, method_id: str) -> PaymentMethod:
        method = self.get_payment_method(method_id)
        if not method.active:
            raise InactivePaymentMethodError(method_id)
        return method

    def active_payment_methods(self) -> list[PaymentMethod]:
        return [m for m in self._methods.values() if m.active]

    def add_payment_method(self, method: PaymentMethod) -> PaymentMethod:
        if method.id in self._methods:
            raise ValidationError(f"Payment method already registered: {method.id}")
        self._methods[method.id] = method
        return method

    def set_payment_method_active(self, method_id: str, active: bool) -> PaymentMethod:
        """Enable or disable a method; recorded payments keep referencing it."""
        method = dataclasses.replace(self.get_payment_method(method_id), active=active)
        self._methods[method_id] = method
        logger.info("catalog_payment_method_toggled", extra={
            "method_id": method_id,
            "active": active,
        })
        return method
