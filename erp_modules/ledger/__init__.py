"""
Ledger Module (``erp_modules.ledger``).

Accounts payable and accounts receivable: one document type, one
workflow and one service class, instantiated once per direction.
"""

from erp_modules.ledger.models import (
    LedgerDirection,
    LedgerDocument,
    LedgerSummary,
    LedgerView,
)
from erp_modules.ledger.service import LedgerService
from erp_modules.ledger.workflows import LEDGER_WORKFLOW

__all__ = [
    "LedgerDirection",
    "LedgerDocument",
    "LedgerSummary",
    "LedgerView",
    "LedgerService",
    "LEDGER_WORKFLOW",
]
