"""
Configuration Schema (``erp_config.schema``).

Responsibility
--------------
Frozen dataclasses describing everything an installation may tune: the
operating currency, ledger policies (over-payment and original-amount
lock), the cash-flow window, document numbering prefixes and the
persistence backend.

Invariants enforced
-------------------
* ``__post_init__`` validates every field; an invalid configuration never
  exists as an object.
* Every collection has exactly one storage key and one numbering prefix.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from erp_kernel.domain.currency import CurrencyRegistry

COLLECTIONS: tuple[str, ...] = (
    "quotes",
    "sales_orders",
    "purchase_orders",
    "payables",
    "receivables",
)

DEFAULT_PREFIXES: dict[str, str] = {
    "quotes": "QT",
    "sales_orders": "SO",
    "purchase_orders": "PO",
    "payables": "AP",
    "receivables": "AR",
}


def _check_collections(mapping: dict[str, str], what: str) -> None:
    missing = set(COLLECTIONS) - set(mapping)
    unknown = set(mapping) - set(COLLECTIONS)
    if missing:
        raise ValueError(f"{what} missing for: {sorted(missing)}")
    if unknown:
        raise ValueError(f"{what} given for unknown collections: {sorted(unknown)}")
    blank = [k for k, v in mapping.items() if not v or not str(v).strip()]
    if blank:
        raise ValueError(f"{what} cannot be blank: {sorted(blank)}")


@dataclass(frozen=True)
class LedgerPolicy:
    """How strictly the ledger guards amounts.

    ``allow_overpayment``: accept payments above the remaining balance
    (advance credit).  ``lock_original_amount_after_payment``: forbid
    editing the original amount once any payment exists.
    """
    allow_overpayment: bool = False
    lock_original_amount_after_payment: bool = True

    def __post_init__(self):
        for name in ("allow_overpayment", "lock_original_amount_after_payment"):
            if not isinstance(getattr(self, name), bool):
                raise ValueError(f"ledger.{name} must be true or false")


@dataclass(frozen=True)
class CashFlowSettings:
    window_days: int = 30

    def __post_init__(self):
        if not isinstance(self.window_days, int) or self.window_days <= 0:
            raise ValueError("cashflow.window_days must be a positive integer")


@dataclass(frozen=True)
class NumberingSettings:
    """Prefix per collection for generated numbers like ``SO-2024-007``."""
    prefixes: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_PREFIXES))

    def __post_init__(self):
        _check_collections(self.prefixes, "numbering prefix")

    def prefix_for(self, collection: str) -> str:
        return self.prefixes[collection]


@dataclass(frozen=True)
class PersistenceSettings:
    """Where documents are stored.

    ``database_url`` None selects the in-memory key-value store.
    """
    database_url: str | None = None
    keys: dict[str, str] = field(default_factory=lambda: {c: c for c in COLLECTIONS})

    def __post_init__(self):
        _check_collections(self.keys, "storage key")
        if len(set(self.keys.values())) != len(self.keys):
            raise ValueError("storage keys must be distinct per collection")
        if self.database_url is not None and not self.database_url.strip():
            raise ValueError("persistence.database_url cannot be blank")

    def key_for(self, collection: str) -> str:
        return self.keys[collection]


@dataclass(frozen=True)
class ErpConfig:
    """Root configuration object returned by ``get_active_config()``."""
    name: str = "default"
    currency: str = "BRL"
    ledger: LedgerPolicy = field(default_factory=LedgerPolicy)
    cashflow: CashFlowSettings = field(default_factory=CashFlowSettings)
    numbering: NumberingSettings = field(default_factory=NumberingSettings)
    persistence: PersistenceSettings = field(default_factory=PersistenceSettings)

    def __post_init__(self):
        object.__setattr__(self, "currency", CurrencyRegistry.validate(self.currency))
