"""
ERP Kernel - financial core primitives

Value objects, typed errors, structured logging and storage plumbing for:
- Line-item pricing with percentage discounts
- Payable/receivable ledger documents with partial payments
- All-or-nothing payment reversal
- Exact Decimal money with explicit rounding
"""

__version__ = "0.1.0"
