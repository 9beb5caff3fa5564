"""
Cash-flow Projection (``erp_modules.cashflow.service``).

Responsibility
--------------
Lists the money expected to move in the next days: open receivables are
inflows, open payables are outflows, each at its remaining balance on its
due date.  ``projection`` totals both sides and the net.

Architecture position
---------------------
**Modules layer** -- read-only composition of the two ``LedgerService``
instances.  Never modifies a document.

Invariants enforced
-------------------
* The window is ``[today, today + window_days]`` inclusive; ``today``
  comes from the injected clock.  Documents already past due are reported
  by the ledger's aging and overdue views, not here.
* ``net == inflows - outflows``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from uuid import UUID

from erp_kernel.domain.clock import Clock, SystemClock
from erp_kernel.domain.values import Money
from erp_kernel.logging_config import get_logger
from erp_modules.ledger.models import LedgerDirection
from erp_modules.ledger.service import LedgerService

logger = get_logger("modules.cashflow.service")


class FlowDirection(Enum):
    INFLOW = "inflow"
    OUTFLOW = "outflow"


@dataclass(frozen=True)
class CashFlowEntry:
    """One expected movement: an open document's remaining balance."""
    document_id: UUID
    direction: FlowDirection
    number: str
    counterparty: str
    due_date: date
    amount: Money


@dataclass(frozen=True)
class CashFlowProjection:
    start_date: date
    end_date: date
    inflows: Money
    outflows: Money
    entries: tuple[CashFlowEntry, ...]

    @property
    def net(self) -> Money:
        return self.inflows - self.outflows


class CashFlowService:
    """Upcoming dues across payables and receivables."""

    def __init__(
        self,
        payables: LedgerService,
        receivables: LedgerService,
        *,
        clock: Clock | None = None,
        window_days: int = 30,
    ):
        if payables.direction is not LedgerDirection.PAYABLE:
            raise ValueError("payables service must be the payable direction")
        if receivables.direction is not LedgerDirection.RECEIVABLE:
            raise ValueError("receivables service must be the receivable direction")
        if payables.currency != receivables.currency:
            raise ValueError("payables and receivables must share a currency")
        if window_days <= 0:
            raise ValueError("window_days must be positive")
        self._payables = payables
        self._receivables = receivables
        self._clock = clock or SystemClock()
        self._window_days = window_days

    def _window(self, window_days: int | None) -> tuple[date, date]:
        days = self._window_days if window_days is None else window_days
        if days < 0:
            raise ValueError("window_days cannot be negative")
        start = self._clock.today()
        return start, start + timedelta(days=days)

    def upcoming(self, window_days: int | None = None) -> list[CashFlowEntry]:
        """Open documents due within the window, ordered by due date."""
        start, end = self._window(window_days)
        entries = []
        for service, flow in (
            (self._receivables, FlowDirection.INFLOW),
            (self._payables, FlowDirection.OUTFLOW),
        ):
            for doc in service.open_documents():
                if start <= doc.due_date <= end:
                    entries.append(CashFlowEntry(
                        document_id=doc.id,
                        direction=flow,
                        number=doc.number,
                        counterparty=doc.counterparty,
                        due_date=doc.due_date,
                        amount=doc.remaining_balance,
                    ))
        entries.sort(key=lambda e: (e.due_date, e.direction.value, e.number))
        return entries

    def projection(self, window_days: int | None = None) -> CashFlowProjection:
        start, end = self._window(window_days)
        entries = self.upcoming(window_days)
        inflows = outflows = Money.zero(self._payables.currency)
        for entry in entries:
            if entry.direction is FlowDirection.INFLOW:
                inflows = inflows + entry.amount
            else:
                outflows = outflows + entry.amount

        projection = CashFlowProjection(
            start_date=start,
            end_date=end,
            inflows=inflows,
            outflows=outflows,
            entries=tuple(entries),
        )
        logger.info("cashflow_projection_computed", extra={
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
            "entry_count": len(entries),
            "inflows": str(inflows.amount),
            "outflows": str(outflows.amount),
            "net": str(projection.net.amount),
        })
        return projection
