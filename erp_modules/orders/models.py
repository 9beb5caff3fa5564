"""
Order Domain Models (``erp_modules.orders.models``).

Responsibility
--------------
Frozen value objects for quotes, sales orders and purchase orders and
their priced line items.

Architecture position
---------------------
**Modules layer** -- pure data definitions.  Prices are computed by
``erp_engines.pricing``; these objects only hold the inputs.

Invariants enforced
-------------------
* ``LineItem.subtotal`` and ``OrderDocument.total_amount`` are derived
  properties.  There is no stored total, so no code path can leave a
  stale one behind after an item or discount change.
* Quantities, unit prices and percentages are validated at construction;
  an invalid line item never exists.
* Every line is priced in the document's currency.

Failure modes
-------------
* ``ValidationError`` subclasses from ``__post_init__``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from erp_engines.pricing import (
    document_total,
    line_subtotal,
    validate_percentage,
    validate_quantity,
    validate_unit_price,
)
from erp_kernel.domain.values import Currency, Money
from erp_kernel.exceptions import CurrencyMismatchError, MissingFieldError
from erp_modules._document_helpers import require_date


class DocumentKind(Enum):
    """The three priced document types.  Each lives in its own collection."""
    QUOTE = "Quote"
    SALES_ORDER = "SalesOrder"
    PURCHASE_ORDER = "PurchaseOrder"

    @property
    def collection(self) -> str:
        return _COLLECTIONS[self]

    @property
    def label(self) -> str:
        return _LABELS[self]


_COLLECTIONS = {
    DocumentKind.QUOTE: "quotes",
    DocumentKind.SALES_ORDER: "sales_orders",
    DocumentKind.PURCHASE_ORDER: "purchase_orders",
}

_LABELS = {
    DocumentKind.QUOTE: "Quote",
    DocumentKind.SALES_ORDER: "Sales order",
    DocumentKind.PURCHASE_ORDER: "Purchase order",
}


@dataclass(frozen=True)
class ProductRef:
    """Snapshot of the product a line was priced from."""
    id: UUID
    code: str
    name: str


@dataclass(frozen=True)
class LineItem:
    """One priced line of an order document.

    Contract: quantity > 0, unit_price >= 0, 0 <= discount_percent <= 100.
    Guarantees: ``subtotal`` always reflects the current fields.
    """
    id: UUID
    product: ProductRef
    quantity: Decimal
    unit_price: Money
    discount_percent: Decimal = Decimal("0")

    def __post_init__(self):
        object.__setattr__(self, "quantity", validate_quantity(self.quantity))
        validate_unit_price(self.unit_price)
        object.__setattr__(self, "discount_percent", validate_percentage(self.discount_percent))

    @property
    def subtotal(self) -> Money:
        return line_subtotal(self.quantity, self.unit_price, self.discount_percent)


@dataclass(frozen=True)
class OrderDocument:
    """A quote, sales order or purchase order.

    ``total_amount`` is never stored on the value; serialization writes it
    out for readers and verifies it on load.
    """
    id: UUID
    kind: DocumentKind
    number: str
    counterparty: str
    issue_date: date
    currency: Currency
    items: tuple[LineItem, ...] = ()
    overall_discount_percent: Decimal = Decimal("0")
    notes: str = ""
    created_at: datetime | None = None

    def __post_init__(self):
        for field_name in ("number", "counterparty"):
            value = getattr(self, field_name)
            if value is None or not str(value).strip():
                raise MissingFieldError(field_name)
            object.__setattr__(self, field_name, str(value).strip())
        require_date(self.issue_date, "issue_date")
        object.__setattr__(
            self,
            "overall_discount_percent",
            validate_percentage(self.overall_discount_percent, "overall_discount_percent"),
        )
        object.__setattr__(self, "items", tuple(self.items))
        for item in self.items:
            if item.unit_price.currency != self.currency:
                raise CurrencyMismatchError(self.currency.code, item.unit_price.currency.code)

    @property
    def subtotal_amount(self) -> Money:
        """Sum of line subtotals before the overall discount."""
        return document_total(self.items, overall_discount_percent=Decimal("0"), currency=self.currency)

    @property
    def total_amount(self) -> Money:
        return document_total(
            self.items,
            overall_discount_percent=self.overall_discount_percent,
            currency=self.currency,
        )

    def find_item(self, item_id: UUID) -> LineItem | None:
        for item in self.items:
            if item.id == item_id:
                return item
        return None
