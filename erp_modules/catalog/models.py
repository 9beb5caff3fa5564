"""
Catalog Domain Models (``erp_modules.catalog.models``).

Responsibility
--------------
Frozen value objects for the reference data other modules look up: the
product list with its list prices and the payment-method catalog used
when recording payments and receipts.

Architecture position
---------------------
**Modules layer** -- pure data definitions.  No I/O.

Invariants enforced
-------------------
* Products carry a non-blank code and name and a non-negative list price.
* Payment-method ids are lowercase slugs.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from uuid import UUID

from erp_kernel.domain.values import Money
from erp_kernel.exceptions import InvalidPriceError, MissingFieldError


class PaymentMethodKind(Enum):
    """How money moves."""
    CASH = "cash"
    PIX = "pix"
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    TRANSFER = "transfer"
    BOLETO = "boleto"
    OTHER = "other"


@dataclass(frozen=True)
class Product:
    """A sellable or purchasable product.

    ``list_price`` is the default unit price of new line items.
    """
    id: UUID
    code: str
    name: str
    list_price: Money
    active: bool = True

    def __post_init__(self):
        for field_name in ("code", "name"):
            value = getattr(self, field_name)
            if not value or not value.strip():
                raise MissingFieldError(field_name)
            object.__setattr__(self, field_name, value.strip())
        if self.list_price.is_negative:
            raise InvalidPriceError(str(self.list_price.amount))


@dataclass(frozen=True)
class PaymentMethod:
    """A catalog entry referenced by recorded payments."""
    id: str
    name: str
    kind: PaymentMethodKind = PaymentMethodKind.OTHER
    active: bool = True

    def __post_init__(self):
        if not self.id or self.id != self.id.strip().lower():
            raise ValueError(f"payment method id must be a lowercase slug, got {self.id!r}")
        if not self.name or not self.name.strip():
            raise MissingFieldError("name")


DEFAULT_PAYMENT_METHODS: tuple[PaymentMethod, ...] = (
    PaymentMethod("cash", "Cash", PaymentMethodKind.CASH),
    PaymentMethod("pix", "PIX", PaymentMethodKind.PIX),
    PaymentMethod("credit_card", "Credit Card", PaymentMethodKind.CREDIT_CARD),
    PaymentMethod("debit_card", "Debit Card", PaymentMethodKind.DEBIT_CARD),
    PaymentMethod("transfer", "Transfer", PaymentMethodKind.TRANSFER),
    PaymentMethod("boleto", "Boleto", PaymentMethodKind.BOLETO),
)
