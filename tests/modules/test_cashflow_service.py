"""
Tests for the upcoming-dues cash-flow projection.
"""

from datetime import date

import pytest

from erp_kernel.domain.values import Money
from erp_modules.cashflow import CashFlowService, FlowDirection


def brl(amount) -> Money:
    return Money.of(str(amount), "BRL")


@pytest.fixture
def cashflow(container):
    return container.cashflow


@pytest.fixture
def book(payables, receivables, today):
    """Documents around the default 30-day window (2024-01-15 .. 2024-02-14)."""
    receivables.create_document(None, "Client A", "", "500", date(2024, 1, 20))
    receivables.create_document(None, "Client B", "", "300", date(2024, 2, 14))
    receivables.create_document(None, "Client C", "", "100", date(2024, 2, 15))
    receivables.create_document(None, "Client D", "", "80", date(2024, 1, 10))
    partial = receivables.create_document(None, "Client E", "", "1000", date(2024, 1, 31))
    receivables.record_payment(partial.id, "400", today, "pix")
    settled = receivables.create_document(None, "Client F", "", "50", date(2024, 1, 25))
    receivables.record_payment(settled.id, "50", today, "pix")

    payables.create_document(None, "Supplier A", "", "200", today)
    payables.create_document(None, "Supplier B", "", "700", date(2024, 2, 1))


class TestUpcoming:

    def test_window_is_inclusive_and_skips_overdue_and_paid(self, cashflow, book):
        entries = cashflow.upcoming()
        assert [e.counterparty for e in entries] == [
            "Supplier A", "Client A", "Client E", "Supplier B", "Client B",
        ]

    def test_amount_is_remaining_balance(self, cashflow, book):
        by_party = {e.counterparty: e for e in cashflow.upcoming()}
        assert by_party["Client E"].amount == brl("600")
        assert by_party["Client E"].direction is FlowDirection.INFLOW
        assert by_party["Supplier B"].direction is FlowDirection.OUTFLOW

    def test_custom_window(self, cashflow, book):
        entries = cashflow.upcoming(window_days=5)
        assert [e.counterparty for e in entries] == ["Supplier A", "Client A"]

    def test_window_follows_clock(self, cashflow, book, deterministic_clock):
        deterministic_clock.set_date(date(2024, 2, 14))
        assert [e.counterparty for e in cashflow.upcoming(window_days=1)] == ["Client B", "Client C"]

    def test_negative_window_rejected(self, cashflow):
        with pytest.raises(ValueError):
            cashflow.upcoming(window_days=-1)


class TestProjection:

    def test_totals(self, cashflow, book):
        projection = cashflow.projection()
        assert projection.start_date == date(2024, 1, 15)
        assert projection.end_date == date(2024, 2, 14)
        assert projection.inflows == brl("1400")
        assert projection.outflows == brl("900")
        assert projection.net == brl("500")
        assert len(projection.entries) == 5

    def test_empty_projection(self, cashflow):
        projection = cashflow.projection()
        assert projection.entries == ()
        assert projection.net.is_zero

    def test_projection_logged(self, cashflow, book, captured_logs):
        cashflow.projection()
        records = [r for r in captured_logs() if r["message"] == "cashflow_projection_computed"]
        assert records[0]["net"] == "500"


class TestWiring:

    def test_directions_must_match(self, payables, receivables):
        with pytest.raises(ValueError):
            CashFlowService(receivables, payables)

    def test_window_must_be_positive(self, payables, receivables):
        with pytest.raises(ValueError):
            CashFlowService(payables, receivables, window_days=0)
