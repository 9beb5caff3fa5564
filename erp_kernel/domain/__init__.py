"""
Pure domain layer.

Value objects, the clock abstraction and workflow declarations, with NO
dependencies on:
- ORM (SQLAlchemy)
- Storage
- I/O

All domain objects are immutable and deterministic.
"""

from erp_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from erp_kernel.domain.currency import CurrencyInfo, CurrencyRegistry
from erp_kernel.domain.values import Currency, Money, discount_factor, format_money
from erp_kernel.domain.workflow import Guard, Transition, Workflow

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "CurrencyInfo",
    "CurrencyRegistry",
    "Currency",
    "Money",
    "discount_factor",
    "format_money",
    "Guard",
    "Transition",
    "Workflow",
]
