"""
Ledger Domain Models (``erp_modules.ledger.models``).

Responsibility
--------------
Frozen value objects for accounts payable and accounts receivable: the
ledger document itself and the read models built from it (per-document
view and the summary cards).

Architecture position
---------------------
**Modules layer** -- pure data definitions.  Status, balance and overdue
rules live in ``erp_engines.ledger``; these objects hold the data the
engine operates on.

Invariants enforced
-------------------
* One document type serves both directions; ``direction`` only selects
  the collection and display labels.
* ``original_amount`` is positive and ``paid_amount`` shares its currency.
* ``remaining_balance`` is derived, never stored.

Failure modes
-------------
* ``MissingFieldError`` / ``InvalidAmountError`` / ``InvalidDateError`` from
  ``__post_init__``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from uuid import UUID

from erp_engines.ledger import LedgerStatus, PaymentEvent, validate_date
from erp_kernel.domain.values import Currency, Money
from erp_kernel.exceptions import InvalidAmountError, MissingFieldError


class LedgerDirection(Enum):
    """Which side of the ledger a document sits on."""
    PAYABLE = "Payable"
    RECEIVABLE = "Receivable"

    @property
    def collection(self) -> str:
        return "payables" if self is LedgerDirection.PAYABLE else "receivables"

    @property
    def payment_label(self) -> str:
        """What a payment event is called on this side."""
        return "Payment" if self is LedgerDirection.PAYABLE else "Receipt"


@dataclass(frozen=True)
class LedgerDocument:
    """A payable or receivable account.

    ``paid_amount`` defaults to zero in the document currency.  Status and
    history are changed only by ``LedgerStateMachine``.
    """
    id: UUID
    direction: LedgerDirection
    number: str
    counterparty: str
    original_amount: Money
    due_date: date
    description: str = ""
    category: str = ""
    issue_date: date | None = None
    paid_amount: Money | None = None
    status: LedgerStatus = LedgerStatus.PENDING
    payment_history: tuple[PaymentEvent, ...] = ()
    created_at: datetime | None = None

    def __post_init__(self):
        for field_name in ("number", "counterparty"):
            value = getattr(self, field_name)
            if value is None or not str(value).strip():
                raise MissingFieldError(field_name)
        validate_date(self.due_date, "due_date")
        validate_date(self.issue_date, "issue_date", required=False)
        if not self.original_amount.is_positive:
            raise InvalidAmountError(
                "original_amount", str(self.original_amount.amount), "must be greater than zero",
            )
        if self.paid_amount is None:
            object.__setattr__(self, "paid_amount", Money.zero(self.original_amount.currency))
        object.__setattr__(self, "payment_history", tuple(self.payment_history))

    @property
    def currency(self) -> Currency:
        return self.original_amount.currency

    @property
    def remaining_balance(self) -> Money:
        return self.original_amount - self.paid_amount

    @property
    def payment_count(self) -> int:
        return len(self.payment_history)


@dataclass(frozen=True)
class LedgerView:
    """Read model for presentation: stored values plus the overdue overlay.

    Presentation reads these; it never sets derived fields itself.
    """
    document: LedgerDocument
    as_of: date
    display_status: LedgerStatus
    remaining_balance: Money
    days_overdue: int

    @property
    def is_overdue(self) -> bool:
        return self.display_status is LedgerStatus.OVERDUE

    @property
    def payment_label(self) -> str:
        return self.document.direction.payment_label


@dataclass(frozen=True)
class LedgerSummary:
    """The summary cards shown above a ledger list.

    * ``pending_total``: original amounts of documents displayed Pending.
    * ``partially_paid_outstanding``: remaining balances of documents
      displayed PartiallyPaid.
    * ``overdue_outstanding``: remaining balances of documents displayed
      Overdue.
    * ``paid_total``: paid amounts across all documents.
    """
    direction: LedgerDirection
    as_of: date
    pending_total: Money
    partially_paid_outstanding: Money
    overdue_outstanding: Money
    paid_total: Money
    counts: dict[LedgerStatus, int]

    @property
    def open_total(self) -> Money:
        return self.pending_total + self.partially_paid_outstanding + self.overdue_outstanding
