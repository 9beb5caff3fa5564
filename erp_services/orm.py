"""
SQLAlchemy ORM model for the persistent key-value store.

Responsibility
--------------
``KeyValueEntryModel`` holds one serialized collection per row: the key
is the collection's storage key (``payables``, ``quotes`` ...) and the
value is the JSON array written by ``erp_services.serialization``.

Architecture position
---------------------
**Services layer** -- ORM model consumed only by
``erp_services.persistence.SqlKeyValueStore``.  Inherits from ``Base``
(kernel db layer).

Invariants enforced
-------------------
* ``key`` is unique; a write replaces the row's value.
"""

from datetime import datetime

from sqlalchemy import DateTime, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from erp_kernel.db.base import Base


class KeyValueEntryModel(Base):
    """One stored collection snapshot."""

    __tablename__ = "kv_entries"

    __table_args__ = (
        UniqueConstraint("key", name="uq_kv_entries_key"),
    )

    key: Mapped[str] = mapped_column(String(200), nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<KeyValueEntryModel {self.key} ({len(self.value)} chars)>"
