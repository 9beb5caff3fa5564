"""
Order Service (``erp_modules.orders.service``).

Responsibility
--------------
Editing operations for quotes, sales orders and purchase orders: create
a document, add, edit and remove priced line items, set the overall
discount, edit header details and delete.

Architecture position
---------------------
**Modules layer** -- thin glue.  Prices come from
``erp_engines.pricing`` through the derived properties of
``OrderDocument``; storage goes through one ``DocumentRepository`` per
document kind.

Invariants enforced
-------------------
* Validate first, then write: every operation builds the complete new
  document value (which validates itself) before calling ``upsert``, so a
  rejected edit leaves the stored document untouched.
* Document numbers are unique within a kind.
* Totals are always recomputed from the current items.

Failure modes
-------------
* ``DocumentNotFoundError`` / ``LineItemNotFoundError`` for unknown ids.
* ``ProductNotFoundError`` when the product is not in the catalog.
* ``InactiveProductError`` when a withdrawn product is added to a document.
* ``MissingFieldError`` / ``InvalidDateError`` for a missing or non-date
  issue date.
* ``DuplicateDocumentNumberError`` when a number is already in use.
* ``ValidationError`` subclasses for invalid quantities, prices and
  percentages.

Usage::

    service = OrderService(repositories, catalog, currency="BRL", clock=clock)
    quote = service.create_document(DocumentKind.QUOTE, "ACME", date(2024, 1, 15))
    quote = service.add_item(quote.id, product.id, Decimal("2"))
    format_money(quote.total_amount)
"""

from __future__ import annotations

import dataclasses
from datetime import date
from decimal import Decimal
from typing import Any, Mapping
from uuid import UUID, uuid4

from erp_kernel.domain.clock import Clock, SystemClock
from erp_kernel.domain.values import Currency, Money
from erp_kernel.exceptions import (
    DocumentNotFoundError,
    DuplicateDocumentNumberError,
    LineItemNotFoundError,
)
from erp_kernel.logging_config import get_logger
from erp_modules._document_helpers import (
    DocumentRepository,
    allocate_number,
    require_date,
    require_text,
    to_money,
)
from erp_modules.catalog.service import CatalogService
from erp_modules.orders.models import DocumentKind, LineItem, OrderDocument, ProductRef

logger = get_logger("modules.orders.service")

DEFAULT_PREFIXES: dict[DocumentKind, str] = {
    DocumentKind.QUOTE: "QT",
    DocumentKind.SALES_ORDER: "SO",
    DocumentKind.PURCHASE_ORDER: "PO",
}


class OrderService:
    """
    Facade for quote and order editing.

    Contract:
        Every mutating method returns the updated document as stored.
    """

    def __init__(
        self,
        repositories: Mapping[DocumentKind, DocumentRepository[OrderDocument]],
        catalog: CatalogService,
        *,
        currency: Currency | str = "BRL",
        prefixes: Mapping[DocumentKind, str] | None = None,
        clock: Clock | None = None,
    ):
        missing = set(DocumentKind) - set(repositories)
        if missing:
            raise ValueError(f"No repository for: {sorted(k.value for k in missing)}")
        self._repositories = dict(repositories)
        self._catalog = catalog
        self._currency = currency if isinstance(currency, Currency) else Currency(currency)
        self._prefixes = {**DEFAULT_PREFIXES, **(prefixes or {})}
        self._clock = clock or SystemClock()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _locate(self, document_id: UUID) -> tuple[DocumentRepository[OrderDocument], OrderDocument]:
        for repository in self._repositories.values():
            document = repository.get(document_id)
            if document is not None:
                return repository, document
        raise DocumentNotFoundError(str(document_id))

    def _check_number_free(self, kind: DocumentKind, number: str, exclude: UUID | None = None) -> None:
        for other in self._repositories[kind].list():
            if other.number == number and other.id != exclude:
                logger.warning("order_number_duplicate", extra={
                    "kind": kind.value,
                    "number": number,
                })
                raise DuplicateDocumentNumberError(kind.value, number)

    def _store(self, document: OrderDocument, event: str, **extra: Any) -> OrderDocument:
        self._repositories[document.kind].upsert(document)
        logger.info(event, extra={
            "document_id": str(document.id),
            "kind": document.kind.value,
            "number": document.number,
            "item_count": len(document.items),
            "total_amount": str(document.total_amount.amount),
            **extra,
        })
        return document

    def _price(self, value: Money | Decimal | int | str) -> Money:
        return to_money(value, self._currency, "unit_price")

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def create_document(
        self,
        kind: DocumentKind,
        counterparty: str,
        issue_date: date,
        number: str | None = None,
        notes: str = "",
        overall_discount_percent: Decimal | int | str = Decimal("0"),
    ) -> OrderDocument:
        """Create an empty document; the number is allocated when omitted."""
        require_date(issue_date, "issue_date")
        if number is None or not number.strip():
            number = allocate_number(
                self._prefixes[kind],
                issue_date.year,
                (d.number for d in self._repositories[kind].list()),
            )
        else:
            number = number.strip()
            self._check_number_free(kind, number)

        document = OrderDocument(
            id=uuid4(),
            kind=kind,
            number=number,
            counterparty=require_text(counterparty, "counterparty"),
            issue_date=issue_date,
            currency=self._currency,
            overall_discount_percent=overall_discount_percent,
            notes=notes or "",
            created_at=self._clock.now(),
        )
        return self._store(document, "order_document_created")

    def update_details(
        self,
        document_id: UUID,
        *,
        counterparty: str | None = None,
        notes: str | None = None,
        number: str | None = None,
        issue_date: date | None = None,
    ) -> OrderDocument:
        """Edit header fields; None leaves a field unchanged."""
        _, document = self._locate(document_id)
        changes: dict[str, Any] = {}
        if counterparty is not None:
            changes["counterparty"] = require_text(counterparty, "counterparty")
        if notes is not None:
            changes["notes"] = notes
        if number is not None:
            number = require_text(number, "number")
            if number != document.number:
                self._check_number_free(document.kind, number, exclude=document.id)
            changes["number"] = number
        if issue_date is not None:
            changes["issue_date"] = require_date(issue_date, "issue_date")
        updated = dataclasses.replace(document, **changes)
        return self._store(updated, "order_details_updated", fields=sorted(changes))

    def set_overall_discount(self, document_id: UUID, percent: Decimal | int | str) -> OrderDocument:
        _, document = self._locate(document_id)
        updated = dataclasses.replace(document, overall_discount_percent=percent)
        return self._store(
            updated,
            "order_overall_discount_set",
            overall_discount_percent=str(updated.overall_discount_percent),
        )

    def get(self, document_id: UUID) -> OrderDocument:
        return self._locate(document_id)[1]

    def list(self, kind: DocumentKind) -> list[OrderDocument]:
        """Documents of ``kind`` ordered by issue date, then number."""
        return sorted(self._repositories[kind].list(), key=lambda d: (d.issue_date, d.number))

    def delete(self, document_id: UUID) -> None:
        repository, document = self._locate(document_id)
        repository.remove(document_id)
        logger.info("order_document_deleted", extra={
            "document_id": str(document_id),
            "kind": document.kind.value,
            "number": document.number,
        })

    # ------------------------------------------------------------------
    # Line items
    # ------------------------------------------------------------------

    def add_item(
        self,
        document_id: UUID,
        product_id: UUID,
        quantity: Decimal | int | str,
        unit_price: Money | Decimal | int | str | None = None,
        discount_percent: Decimal | int | str = Decimal("0"),
    ) -> OrderDocument:
        """Append a line; the unit price defaults to the product's list price."""
        _, document = self._locate(document_id)
        product = self._catalog.require_active_product(product_id)
        item = LineItem(
            id=uuid4(),
            product=ProductRef(id=product.id, code=product.code, name=product.name),
            quantity=quantity,
            unit_price=product.list_price if unit_price is None else self._price(unit_price),
            discount_percent=discount_percent,
        )
        updated = dataclasses.replace(document, items=(*document.items, item))
        return self._store(
            updated,
            "order_item_added",
            item_id=str(item.id),
            subtotal=str(item.subtotal.amount),
        )

    def update_item(
        self,
        document_id: UUID,
        item_id: UUID,
        quantity: Decimal | int | str | None = None,
        unit_price: Money | Decimal | int | str | None = None,
        discount_percent: Decimal | int | str | None = None,
    ) -> OrderDocument:
        _, document = self._locate(document_id)
        item = document.find_item(item_id)
        if item is None:
            raise LineItemNotFoundError(str(document_id), str(item_id))

        changes: dict[str, Any] = {}
        if quantity is not None:
            changes["quantity"] = quantity
        if unit_price is not None:
            changes["unit_price"] = self._price(unit_price)
        if discount_percent is not None:
            changes["discount_percent"] = discount_percent
        edited = dataclasses.replace(item, **changes)

        items = tuple(edited if i.id == item_id else i for i in document.items)
        updated = dataclasses.replace(document, items=items)
        return self._store(
            updated,
            "order_item_updated",
            item_id=str(item_id),
            subtotal=str(edited.subtotal.amount),
        )

    def remove_item(self, document_id: UUID, item_id: UUID) -> OrderDocument:
        _, document = self._locate(document_id)
        if document.find_item(item_id) is None:
            raise LineItemNotFoundError(str(document_id), str(item_id))
        items = tuple(i for i in document.items if i.id != item_id)
        updated = dataclasses.replace(document, items=items)
        return self._store(updated, "order_item_removed", item_id=str(item_id))
