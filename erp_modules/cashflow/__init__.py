"""
Cash-flow Module (``erp_modules.cashflow``).

Projection of upcoming inflows (receivables) and outflows (payables).
"""

from erp_modules.cashflow.service import (
    CashFlowEntry,
    CashFlowProjection,
    CashFlowService,
    FlowDirection,
)

__all__ = [
    "CashFlowEntry",
    "CashFlowProjection",
    "CashFlowService",
    "FlowDirection",
]
