"""
Module: erp_engines.ledger
Responsibility:
    The state machine behind payable and receivable documents: applying
    payments, full reversal, field edits, stored-status derivation and the
    overdue display overlay.  One implementation serves both directions.

Architecture position:
    Engines -- pure calculation layer.  No clock access (callers pass
    ``as_of`` / ``recorded_at``), no I/O.  Documents are immutable values;
    every operation returns a new document and never mutates its input.
    The lifecycle itself is declared as a ``Workflow`` in the modules
    layer and injected, so transitions are looked up, not hardcoded.

Invariants enforced:
    - sum(payment_history.amount) == paid_amount after every operation.
    - Stored status is a pure function of (paid_amount, original_amount);
      ``Overdue`` is never stored, only overlaid by ``display_status``.
    - paid_amount increases only through ``record_payment`` and resets only
      through ``reverse_all_payments``; no other operation changes the
      length of ``payment_history``.
    - Every status change made by a payment or reversal corresponds to a
      transition declared in the injected workflow.

Failure modes:
    - InvalidAmountError: amount not positive or finer than the currency.
    - MissingFieldError / InvalidDateError: missing or non-date dates.
    - CurrencyMismatchError: amount in another currency.
    - OverpaymentError: amount above remaining balance (unless allowed).
    - OriginalAmountLockedError: original amount edit after payments.
    - InvalidTransitionError: action not declared from the current state
      (paying a Paid document, reversing a document with no payments).
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Protocol, TypeVar
from uuid import UUID, uuid4

from erp_engines.tracer import traced_engine
from erp_kernel.domain.values import Money
from erp_kernel.domain.workflow import Workflow
from erp_kernel.exceptions import (
    CurrencyMismatchError,
    InvalidAmountError,
    InvalidDateError,
    InvalidTransitionError,
    MissingFieldError,
    OriginalAmountLockedError,
    OverpaymentError,
    UnknownStatusError,
    ValidationError,
)
from erp_kernel.logging_config import get_logger

logger = get_logger("engines.ledger")

RECORD_PAYMENT = "record_payment"
REVERSE_ALL_PAYMENTS = "reverse_all_payments"


class LedgerStatus(Enum):
    """Closed set of ledger statuses.

    ``OVERDUE`` is a display value only; stored documents hold one of the
    three lifecycle states.
    """
    PENDING = "Pending"
    PARTIALLY_PAID = "PartiallyPaid"
    PAID = "Paid"
    OVERDUE = "Overdue"

    @classmethod
    def parse(cls, value: str) -> LedgerStatus:
        """Strict lookup by value; unknown strings are rejected."""
        try:
            return cls(value)
        except ValueError:
            raise UnknownStatusError(value) from None

    @property
    def is_lifecycle_state(self) -> bool:
        return self is not LedgerStatus.OVERDUE


LIFECYCLE_STATES: tuple[LedgerStatus, ...] = (
    LedgerStatus.PENDING,
    LedgerStatus.PARTIALLY_PAID,
    LedgerStatus.PAID,
)


@dataclass(frozen=True)
class PaymentEvent:
    """One recorded payment (payables) or receipt (receivables).

    Contract: frozen; removed only by a full reversal of its document.
    ``payment_date`` is whatever the user entered and is never compared
    with the recording time.
    """
    id: UUID
    payment_date: date
    amount: Money
    method: str
    recorded_at: datetime | None = None


class LedgerDocumentLike(Protocol):
    id: UUID
    due_date: date
    original_amount: Money
    paid_amount: Money
    status: LedgerStatus
    payment_history: tuple[PaymentEvent, ...]


D = TypeVar("D", bound=LedgerDocumentLike)


def validate_date(value: Any, field_name: str, *, required: bool = True) -> date | None:
    """Accept a calendar date; datetimes and strings are rejected."""
    if value is None:
        if required:
            raise MissingFieldError(field_name)
        return None
    if not isinstance(value, date) or isinstance(value, datetime):
        raise InvalidDateError(field_name, repr(value))
    return value


def derive_status(paid_amount: Money, original_amount: Money) -> LedgerStatus:
    """Stored lifecycle status for the given amounts."""
    if paid_amount >= original_amount and paid_amount.is_positive:
        return LedgerStatus.PAID
    if paid_amount.is_positive:
        return LedgerStatus.PARTIALLY_PAID
    return LedgerStatus.PENDING


def remaining_balance(document: LedgerDocumentLike) -> Money:
    """``original_amount - paid_amount`` (negative after an allowed over-payment)."""
    return document.original_amount - document.paid_amount


def display_status(document: LedgerDocumentLike, as_of: date) -> LedgerStatus:
    """Overdue overlay: unpaid documents past their due date show as Overdue."""
    if document.status is not LedgerStatus.PAID and document.due_date < as_of:
        return LedgerStatus.OVERDUE
    return document.status


def check_invariants(document: LedgerDocumentLike) -> list[str]:
    """Return a description of every violated document invariant (empty if valid)."""
    problems: list[str] = []
    currency = document.original_amount.currency

    if not document.original_amount.is_positive:
        problems.append("original amount must be positive")
    if document.paid_amount.is_negative:
        problems.append("paid amount cannot be negative")

    total = Money.zero(currency)
    for event in document.payment_history:
        if event.amount.currency != currency:
            problems.append(f"payment {event.id} is in {event.amount.currency}")
            continue
        if not event.amount.is_positive:
            problems.append(f"payment {event.id} amount must be positive")
        total = total + event.amount
    if document.paid_amount.currency == currency and total != document.paid_amount:
        problems.append(
            f"payment history sums to {total.amount}, paid amount is {document.paid_amount.amount}"
        )

    if not document.status.is_lifecycle_state:
        problems.append(f"stored status cannot be {document.status.value}")
    elif (
        document.paid_amount.currency == currency
        and document.status is not derive_status(document.paid_amount, document.original_amount)
    ):
        problems.append(
            f"status {document.status.value} does not match paid "
            f"{document.paid_amount.amount} of {document.original_amount.amount}"
        )
    return problems


class LedgerStateMachine:
    """
    Applies ledger operations against a declared workflow.

    Contract:
        - Inputs are pre-validated documents; operations validate their own
          arguments and raise before building any new value (no partial
          mutation).
        - Returns new document values via ``dataclasses.replace``.

    Non-goals:
        - Does NOT persist; the owning service writes the result back.
        - Does NOT reverse individual payments; reversal is all-or-nothing.
    """

    EDITABLE_FIELDS: frozenset[str] = frozenset({
        "number",
        "counterparty",
        "description",
        "category",
        "due_date",
        "issue_date",
        "original_amount",
    })
    REQUIRED_TEXT_FIELDS: frozenset[str] = frozenset({"number", "counterparty"})

    def __init__(
        self,
        workflow: Workflow,
        *,
        allow_overpayment: bool = False,
        lock_original_amount_after_payment: bool = True,
    ):
        missing = {s.value for s in LIFECYCLE_STATES} - set(workflow.states)
        if missing:
            raise ValueError(f"Workflow {workflow.name} lacks ledger states: {sorted(missing)}")
        self._workflow = workflow
        self._allow_overpayment = allow_overpayment
        self._lock_original = lock_original_amount_after_payment

    @property
    def workflow(self) -> Workflow:
        return self._workflow

    @property
    def allow_overpayment(self) -> bool:
        return self._allow_overpayment

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require_transition(self, document: LedgerDocumentLike, to_state: LedgerStatus, action: str) -> None:
        transition = self._workflow.find_transition(
            document.status.value, to_state.value, action,
        )
        if transition is None:
            logger.warning(
                "ledger_transition_rejected",
                extra={
                    "document_id": str(document.id),
                    "from_state": document.status.value,
                    "to_state": to_state.value,
                    "action": action,
                },
            )
            raise InvalidTransitionError(str(document.id), document.status.value, action)

    @staticmethod
    def _validate_amount(document: LedgerDocumentLike, amount: Money, field_name: str) -> None:
        expected = document.original_amount.currency
        if amount.currency != expected:
            raise CurrencyMismatchError(expected.code, amount.currency.code)
        if not amount.is_positive:
            raise InvalidAmountError(field_name, str(amount.amount), "must be greater than zero")
        if not amount.fits_currency_precision:
            raise InvalidAmountError(
                field_name,
                str(amount.amount),
                f"more than {expected.decimal_places} decimal places",
            )

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    @traced_engine("ledger", "1.0", fingerprint_fields=("amount", "payment_date", "method"))
    def record_payment(
        self,
        document: D,
        *,
        amount: Money,
        payment_date: date,
        method: str,
        recorded_at: datetime | None = None,
        event_id: UUID | None = None,
    ) -> D:
        """
        Append a payment event, add its amount and recompute the status.

        Postconditions:
            - len(payment_history) grows by exactly one.
            - paid_amount == previous paid_amount + amount.
            - status is Paid when paid_amount >= original_amount, else
              PartiallyPaid.
        """
        self._validate_amount(document, amount, "amount")
        validate_date(payment_date, "payment_date")
        if not method or not method.strip():
            raise MissingFieldError("method")

        balance = remaining_balance(document)
        if amount > balance and not self._allow_overpayment:
            raise OverpaymentError(str(document.id), str(amount.amount), str(balance.amount))

        new_paid = document.paid_amount + amount
        new_status = derive_status(new_paid, document.original_amount)
        self._require_transition(document, new_status, RECORD_PAYMENT)

        event = PaymentEvent(
            id=event_id or uuid4(),
            payment_date=payment_date,
            amount=amount,
            method=method.strip(),
            recorded_at=recorded_at,
        )
        updated = dataclasses.replace(
            document,
            paid_amount=new_paid,
            status=new_status,
            payment_history=(*document.payment_history, event),
        )

        logger.info(
            "ledger_payment_applied",
            extra={
                "document_id": str(document.id),
                "payment_id": str(event.id),
                "amount": str(amount.amount),
                "paid_amount": str(new_paid.amount),
                "from_state": document.status.value,
                "to_state": new_status.value,
                "payment_count": len(updated.payment_history),
            },
        )
        return updated

    @traced_engine("ledger", "1.0", fingerprint_fields=("as_of",))
    def reverse_all_payments(self, document: D, *, as_of: date) -> D:
        """
        Undo every recorded payment.

        Postconditions:
            - paid_amount is zero and payment_history is empty.
            - stored status is Pending; ``display_status(result, as_of)``
              is Overdue when the due date has already passed.
        """
        target = LedgerStatus.PENDING
        self._require_transition(document, target, REVERSE_ALL_PAYMENTS)

        updated = dataclasses.replace(
            document,
            paid_amount=Money.zero(document.original_amount.currency),
            status=target,
            payment_history=(),
        )
        logger.info(
            "ledger_payments_reversed",
            extra={
                "document_id": str(document.id),
                "reversed_count": len(document.payment_history),
                "reversed_amount": str(document.paid_amount.amount),
                "from_state": document.status.value,
                "display_status": display_status(updated, as_of).value,
            },
        )
        return updated

    def edit(self, document: D, **fields: Any) -> D:
        """
        Free-form field edit that never touches paid amount, status or history.

        ``original_amount`` is special: locked once payments exist (unless
        the lock is disabled, in which case status is re-derived at once).
        """
        unknown = set(fields) - self.EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")

        for name in self.REQUIRED_TEXT_FIELDS & set(fields):
            value = fields[name]
            if value is None or not str(value).strip():
                raise MissingFieldError(name)
            fields[name] = str(value).strip()
        if "due_date" in fields:
            validate_date(fields["due_date"], "due_date")
        if "issue_date" in fields:
            validate_date(fields["issue_date"], "issue_date", required=False)

        changes: dict[str, Any] = dict(fields)
        if "original_amount" in fields:
            new_amount = fields["original_amount"]
            if new_amount is None:
                raise MissingFieldError("original_amount")
            if not isinstance(new_amount, Money):
                raise InvalidAmountError("original_amount", repr(new_amount), "not a money amount")
            self._validate_amount(document, new_amount, "original_amount")
            if new_amount != document.original_amount:
                if document.payment_history and self._lock_original:
                    raise OriginalAmountLockedError(str(document.id), len(document.payment_history))
                if new_amount < document.paid_amount and not self._allow_overpayment:
                    raise OverpaymentError(
                        str(document.id), str(document.paid_amount.amount), str(new_amount.amount),
                    )
                changes["status"] = derive_status(document.paid_amount, new_amount)

        updated = dataclasses.replace(document, **changes)
        logger.info(
            "ledger_document_edited",
            extra={
                "document_id": str(document.id),
                "fields": sorted(fields),
                "status": updated.status.value,
            },
        )
        return updated
