"""
Module: erp_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the canonical import surface for higher
    layers (erp_modules, erp_services).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import erp_kernel (and sibling engine modules).
    MUST NOT import erp_modules or erp_services.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
      Dates are passed in explicitly by the services that own a Clock.
    - Decimal-only arithmetic for every monetary amount.
    - Determinism: identical inputs always produce identical outputs.

Usage:
    from erp_engines.pricing import line_subtotal, document_total
    from erp_engines.ledger import LedgerStateMachine, LedgerStatus
    from erp_engines.aging import AgingCalculator
"""

from erp_engines.aging import (
    STANDARD_BUCKETS,
    AgeBucket,
    AgedItem,
    AgingCalculator,
    AgingReport,
)
from erp_engines.ledger import (
    LedgerStateMachine,
    LedgerStatus,
    PaymentEvent,
    check_invariants,
    derive_status,
    display_status,
    remaining_balance,
)
from erp_engines.pricing import (
    document_total,
    line_subtotal,
    validate_percentage,
    validate_quantity,
    validate_unit_price,
)
from erp_engines.tracer import traced_engine

__all__ = [
    "STANDARD_BUCKETS",
    "AgeBucket",
    "AgedItem",
    "AgingCalculator",
    "AgingReport",
    "LedgerStateMachine",
    "LedgerStatus",
    "PaymentEvent",
    "check_invariants",
    "derive_status",
    "display_status",
    "remaining_balance",
    "document_total",
    "line_subtotal",
    "validate_percentage",
    "validate_quantity",
    "validate_unit_price",
    "traced_engine",
]
