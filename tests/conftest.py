"""
Pytest fixtures for the ERP test suite.

Provides:
- Structured logging configured for the whole session, plus a fixture
  capturing log records as parsed JSON
- A DeterministicClock fixed at 2024-01-15 12:00 UTC
- A catalog with two products and the default payment methods
- In-memory wired services (ErpContainer) built from the default config
"""

import json
import logging
from datetime import date
from io import StringIO
from uuid import uuid4

import pytest

from erp_config import ErpConfig, LedgerPolicy
from erp_engines.ledger import LedgerStateMachine
from erp_kernel.domain.clock import DeterministicClock
from erp_kernel.domain.values import Money
from erp_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from erp_modules.catalog import CatalogService, Product
from erp_modules.ledger import LEDGER_WORKFLOW, LedgerDirection, LedgerDocument
from erp_services.container import ErpContainer
from erp_services.persistence import InMemoryKeyValueStore


def brl(amount) -> Money:
    return Money.of(str(amount), "BRL")


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture erp_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, ledger):
            ledger.record_payment(...)
            logs = captured_logs()
            assert any(r["message"] == "ledger_payment_recorded" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("erp_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Clock fixtures
# =============================================================================


@pytest.fixture
def deterministic_clock():
    """Clock fixed at 2024-01-15 12:00 UTC."""
    return DeterministicClock()


@pytest.fixture
def today(deterministic_clock) -> date:
    return deterministic_clock.today()


# =============================================================================
# Domain fixtures
# =============================================================================


@pytest.fixture
def widget() -> Product:
    return Product(id=uuid4(), code="WID-01", name="Widget", list_price=brl("250.00"))


@pytest.fixture
def bolt() -> Product:
    return Product(id=uuid4(), code="BLT-10", name="Bolt M10", list_price=brl("2.50"))


@pytest.fixture
def catalog(widget, bolt) -> CatalogService:
    return CatalogService(products=[widget, bolt])


@pytest.fixture
def state_machine() -> LedgerStateMachine:
    return LedgerStateMachine(LEDGER_WORKFLOW)


@pytest.fixture
def make_ledger_document():
    """Factory for a Pending ledger document with sensible defaults."""

    def _make(
        original="1000.00",
        due_date=date(2024, 2, 1),
        direction=LedgerDirection.PAYABLE,
        number="AP-2024-001",
    ) -> LedgerDocument:
        return LedgerDocument(
            id=uuid4(),
            direction=direction,
            number=number,
            counterparty="Acme Steel",
            description="Raw material",
            original_amount=brl(original),
            due_date=due_date,
        )

    return _make


# =============================================================================
# Service fixtures
# =============================================================================


@pytest.fixture
def config() -> ErpConfig:
    return ErpConfig()


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def container(config, store, deterministic_clock, catalog) -> ErpContainer:
    return ErpContainer.build(config, store=store, clock=deterministic_clock, catalog=catalog)


@pytest.fixture
def lenient_container(store, deterministic_clock, catalog) -> ErpContainer:
    """Container whose ledger accepts over-payments and original-amount edits."""
    config = ErpConfig(
        ledger=LedgerPolicy(allow_overpayment=True, lock_original_amount_after_payment=False),
    )
    return ErpContainer.build(config, store=store, clock=deterministic_clock, catalog=catalog)


@pytest.fixture
def payables(container):
    return container.payables


@pytest.fixture
def receivables(container):
    return container.receivables


@pytest.fixture
def orders(container):
    return container.orders


