"""
Ledger Service (``erp_modules.ledger.service``).

Responsibility
--------------
Accounts payable / accounts receivable operations: create documents
(directly or from a sales/purchase order), record payments and receipts,
reverse all payments, edit fields, and the read side (views with the
overdue overlay, search, summary cards and aging).

Architecture position
---------------------
**Modules layer** -- thin ERP glue.  One ``LedgerService`` instance per
direction; both share a single ``LedgerStateMachine`` built over
``LEDGER_WORKFLOW``.  All state changes are computed by the engine; this
service resolves ids, converts user input to ``Money``, reads the clock
and writes results back through the repository.

Invariants enforced
-------------------
* Validate first, then write: the engine returns a new document or
  raises, and only a successfully computed document is upserted.
* Document numbers are unique within a direction.
* Dates that mean "now" (``recorded_at``, the reversal's ``as_of``, the
  display overlay's reference date) come from the injected ``Clock``.

Failure modes
-------------
* ``DocumentNotFoundError`` for unknown ids.
* ``PaymentMethodNotFoundError`` / ``InactivePaymentMethodError``.
* ``MissingFieldError`` / ``InvalidDateError`` for missing or non-date dates.
* ``OverpaymentError``, ``InvalidAmountError``, ``OriginalAmountLockedError``,
  ``InvalidTransitionError`` from the engine.
* ``ValidationError`` when an order of the wrong kind is converted.

Audit relevance
---------------
Each mutation logs a structured event (``ledger_document_created``,
``ledger_payment_recorded``, ``ledger_payments_reversal_recorded``,
``ledger_document_updated``) with the document id, direction and amounts.

Usage::

    payables = LedgerService(
        LedgerDirection.PAYABLE, repository, catalog, machine, clock=clock,
    )
    doc = payables.create_document("AP-1", "Supplier", "Rent", "1000.00", date(2024, 2, 1))
    doc = payables.record_payment(doc.id, "400.00", date(2024, 1, 20), "pix")
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from erp_engines.aging import AgingCalculator, AgingReport
from erp_engines.ledger import (
    LedgerStateMachine,
    LedgerStatus,
    display_status,
    remaining_balance,
    validate_date,
)
from erp_kernel.domain.clock import Clock, SystemClock
from erp_kernel.domain.values import Currency, Money
from erp_kernel.exceptions import (
    CurrencyMismatchError,
    DocumentNotFoundError,
    DuplicateDocumentNumberError,
    InvalidAmountError,
    ValidationError,
)
from erp_kernel.logging_config import get_logger
from erp_modules._document_helpers import (
    DocumentRepository,
    allocate_number,
    require_text,
    to_money,
)
from erp_modules.catalog.service import CatalogService
from erp_modules.ledger.models import (
    LedgerDirection,
    LedgerDocument,
    LedgerSummary,
    LedgerView,
)
from erp_modules.orders.models import DocumentKind, OrderDocument

logger = get_logger("modules.ledger.service")

DEFAULT_PREFIXES: dict[LedgerDirection, str] = {
    LedgerDirection.PAYABLE: "AP",
    LedgerDirection.RECEIVABLE: "AR",
}

_ORDER_DIRECTION: dict[DocumentKind, LedgerDirection] = {
    DocumentKind.SALES_ORDER: LedgerDirection.RECEIVABLE,
    DocumentKind.PURCHASE_ORDER: LedgerDirection.PAYABLE,
}


class LedgerService:
    """
    Facade for one side of the ledger.

    Contract:
        Every mutating method returns the updated document as stored.
        Read methods never modify documents.
    """

    def __init__(
        self,
        direction: LedgerDirection,
        repository: DocumentRepository[LedgerDocument],
        catalog: CatalogService,
        state_machine: LedgerStateMachine,
        *,
        currency: Currency | str = "BRL",
        prefix: str | None = None,
        clock: Clock | None = None,
        aging_calculator: AgingCalculator | None = None,
    ):
        self._direction = direction
        self._repository = repository
        self._catalog = catalog
        self._machine = state_machine
        self._currency = currency if isinstance(currency, Currency) else Currency(currency)
        self._prefix = prefix or DEFAULT_PREFIXES[direction]
        self._clock = clock or SystemClock()
        self._aging = aging_calculator or AgingCalculator()

    @property
    def direction(self) -> LedgerDirection:
        return self._direction

    @property
    def currency(self) -> Currency:
        return self._currency

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require(self, document_id: UUID) -> LedgerDocument:
        document = self._repository.get(document_id)
        if document is None:
            raise DocumentNotFoundError(str(document_id))
        return document

    def _check_number_free(self, number: str, exclude: UUID | None = None) -> None:
        for other in self._repository.list():
            if other.number == number and other.id != exclude:
                raise DuplicateDocumentNumberError(self._direction.value, number)

    def _next_number(self, year: int) -> str:
        return allocate_number(self._prefix, year, (d.number for d in self._repository.list()))

    def _amount(self, value: Money | Decimal | int | str, field_name: str) -> Money:
        return to_money(value, self._currency, field_name)

    def _log_extra(self, document: LedgerDocument, **extra: Any) -> dict[str, Any]:
        return {
            "document_id": str(document.id),
            "direction": self._direction.value,
            "number": document.number,
            "status": document.status.value,
            "paid_amount": str(document.paid_amount.amount),
            "original_amount": str(document.original_amount.amount),
            **extra,
        }

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create_document(
        self,
        number: str | None,
        counterparty: str,
        description: str,
        original_amount: Money | Decimal | int | str,
        due_date: date,
        category: str = "",
        issue_date: date | None = None,
    ) -> LedgerDocument:
        """Create a Pending document; a blank number is allocated automatically."""
        amount = self._amount(original_amount, "original_amount")
        if amount.currency != self._currency:
            raise CurrencyMismatchError(self._currency.code, amount.currency.code)
        if not amount.fits_currency_precision:
            raise InvalidAmountError(
                "original_amount",
                str(amount.amount),
                f"more than {self._currency.decimal_places} decimal places",
            )

        validate_date(due_date, "due_date")
        issue_date = validate_date(issue_date, "issue_date", required=False) or self._clock.today()
        if number is None or not number.strip():
            number = self._next_number(issue_date.year)
        else:
            number = number.strip()
            self._check_number_free(number)

        document = LedgerDocument(
            id=uuid4(),
            direction=self._direction,
            number=number,
            counterparty=require_text(counterparty, "counterparty"),
            description=(description or "").strip(),
            category=(category or "").strip(),
            original_amount=amount,
            due_date=due_date,
            issue_date=issue_date,
            created_at=self._clock.now(),
        )
        self._repository.upsert(document)
        logger.info("ledger_document_created", extra=self._log_extra(
            document, due_date=due_date.isoformat(),
        ))
        return document

    def create_from_order(
        self,
        order: OrderDocument,
        due_date: date,
        description: str | None = None,
    ) -> LedgerDocument:
        """Bill a sales order (receivable) or a purchase order (payable).

        The order total is rounded half-up to the currency's smallest unit;
        this is the point where an unrounded total becomes a ledger amount.
        """
        if _ORDER_DIRECTION.get(order.kind) is not self._direction:
            raise ValidationError(
                f"{order.kind.label} {order.number} cannot become a {self._direction.value.lower()}"
            )
        amount = order.total_amount.round()
        if not amount.is_positive:
            raise InvalidAmountError(
                "original_amount", str(amount.amount), f"{order.kind.label} {order.number} has no value",
            )
        document = self.create_document(
            number=None,
            counterparty=order.counterparty,
            description=description or f"{order.kind.label} {order.number}",
            original_amount=amount,
            due_date=due_date,
        )
        logger.info("ledger_document_created_from_order", extra={
            "document_id": str(document.id),
            "order_id": str(order.id),
            "order_number": order.number,
            "order_total": str(order.total_amount.amount),
            "original_amount": str(amount.amount),
        })
        return document

    # ------------------------------------------------------------------
    # Payments
    # ------------------------------------------------------------------

    def record_payment(
        self,
        document_id: UUID,
        amount: Money | Decimal | int | str,
        payment_date: date,
        method_id: str,
    ) -> LedgerDocument:
        """Record a payment (payables) or receipt (receivables)."""
        document = self._require(document_id)
        method = self._catalog.require_active_method(method_id)
        updated = self._machine.record_payment(
            document,
            amount=self._amount(amount, "amount"),
            payment_date=payment_date,
            method=method.id,
            recorded_at=self._clock.now(),
        )
        self._repository.upsert(updated)
        logger.info("ledger_payment_recorded", extra=self._log_extra(
            updated,
            amount=str(updated.payment_history[-1].amount.amount),
            method=method.id,
            payment_date=payment_date.isoformat(),
            label=self._direction.payment_label,
        ))
        return updated

    def reverse_all_payments(self, document_id: UUID) -> LedgerDocument:
        """Undo every payment; the document returns to Pending."""
        document = self._require(document_id)
        updated = self._machine.reverse_all_payments(document, as_of=self._clock.today())
        self._repository.upsert(updated)
        logger.info("ledger_payments_reversal_recorded", extra=self._log_extra(
            updated,
            reversed_count=document.payment_count,
            reversed_amount=str(document.paid_amount.amount),
        ))
        return updated

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def edit(self, document_id: UUID, **fields: Any) -> LedgerDocument:
        """Edit descriptive fields; see ``LedgerStateMachine.edit``."""
        document = self._require(document_id)
        if "original_amount" in fields and fields["original_amount"] is not None:
            fields["original_amount"] = self._amount(fields["original_amount"], "original_amount")
        if "number" in fields:
            number = require_text(fields["number"], "number")
            if number != document.number:
                self._check_number_free(number, exclude=document.id)
        updated = self._machine.edit(document, **fields)
        self._repository.upsert(updated)
        logger.info("ledger_document_updated", extra=self._log_extra(
            updated, fields=sorted(fields),
        ))
        return updated

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    def get(self, document_id: UUID) -> LedgerDocument:
        return self._require(document_id)

    def list(self) -> list[LedgerDocument]:
        """All documents ordered by due date, then number."""
        return sorted(self._repository.list(), key=lambda d: (d.due_date, d.number))

    def _view(self, document: LedgerDocument, as_of: date) -> LedgerView:
        status = display_status(document, as_of)
        overdue_days = (as_of - document.due_date).days if status is LedgerStatus.OVERDUE else 0
        return LedgerView(
            document=document,
            as_of=as_of,
            display_status=status,
            remaining_balance=remaining_balance(document),
            days_overdue=overdue_days,
        )

    def view(self, document_id: UUID, as_of: date | None = None) -> LedgerView:
        return self._view(self._require(document_id), as_of or self._clock.today())

    def views(self, as_of: date | None = None) -> list[LedgerView]:
        as_of = as_of or self._clock.today()
        return [self._view(d, as_of) for d in self.list()]

    def search(
        self,
        text: str | None = None,
        status: LedgerStatus | str | None = None,
        as_of: date | None = None,
    ) -> list[LedgerView]:
        """Filter by free text and by display status.

        Text matches number, counterparty, description or category,
        case-insensitively.  Status filters on the display status, so
        ``Overdue`` finds unpaid documents past due.
        """
        if isinstance(status, str):
            status = LedgerStatus.parse(status)
        needle = (text or "").strip().lower()

        results = []
        for view in self.views(as_of):
            doc = view.document
            if status is not None and view.display_status is not status:
                continue
            if needle and not any(
                needle in value.lower()
                for value in (doc.number, doc.counterparty, doc.description, doc.category)
            ):
                continue
            results.append(view)
        return results

    def open_documents(self) -> list[LedgerDocument]:
        """Documents with money still to move, ordered by due date."""
        return [d for d in self.list() if remaining_balance(d).is_positive]

    def summary(self, as_of: date | None = None) -> LedgerSummary:
        as_of = as_of or self._clock.today()
        zero = Money.zero(self._currency)
        pending = partial = overdue = paid = zero
        counts = {status: 0 for status in LedgerStatus}

        for view in self.views(as_of):
            doc = view.document
            counts[view.display_status] += 1
            paid = paid + doc.paid_amount
            if view.display_status is LedgerStatus.PENDING:
                pending = pending + doc.original_amount
            elif view.display_status is LedgerStatus.PARTIALLY_PAID:
                partial = partial + view.remaining_balance
            elif view.display_status is LedgerStatus.OVERDUE:
                overdue = overdue + view.remaining_balance

        return LedgerSummary(
            direction=self._direction,
            as_of=as_of,
            pending_total=pending,
            partially_paid_outstanding=partial,
            overdue_outstanding=overdue,
            paid_total=paid,
            counts=counts,
        )

    def aging_report(self, as_of: date | None = None) -> AgingReport:
        """Open balances classified into days-past-due buckets."""
        as_of = as_of or self._clock.today()
        items = [
            self._aging.age_item(
                document_id=doc.id,
                number=doc.number,
                counterparty=doc.counterparty,
                due_date=doc.due_date,
                amount=remaining_balance(doc),
                as_of_date=as_of,
            )
            for doc in self.open_documents()
        ]
        return self._aging.generate_report(items, as_of, self._currency)
