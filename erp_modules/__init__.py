"""
ERP Modules.

Thin orchestration layers over the kernel and engines.
Each module contains:
- Domain models (the nouns)
- Workflows (state machines), where the module has a lifecycle
- A service facade that validates input, calls the engines and writes the
  result back through a repository

Modules:
- Catalog: Products and payment methods
- Orders: Quotes, sales orders and purchase orders with priced line items
- Ledger: Accounts payable and receivable with partial payments
- Cashflow: Upcoming inflows and outflows from open ledger documents

Actual calculation logic lives in erp_engines.
"""

from erp_modules import (
    catalog,
    orders,
    ledger,
    cashflow,
)

__all__ = [
    "catalog",
    "orders",
    "ledger",
    "cashflow",
]
