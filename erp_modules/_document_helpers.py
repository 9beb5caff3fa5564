"""
Shared helpers for the document services.

Used by erp_modules/*/service.py: the repository protocol the services are
written against, document number allocation and input normalisation.

Architecture: Modules layer. Imports only from erp_kernel.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Protocol, TypeVar, runtime_checkable
from uuid import UUID

from erp_kernel.domain.values import Currency, Money
from erp_kernel.exceptions import InvalidAmountError, InvalidDateError, MissingFieldError

T = TypeVar("T")


@runtime_checkable
class DocumentRepository(Protocol[T]):
    """Protocol for the per-collection document store used by the services.

    ``erp_services.repository.DocumentRepository`` is the implementation.
    """

    def get(self, document_id: UUID) -> T | None: ...

    def list(self) -> list[T]: ...

    def upsert(self, document: T) -> None: ...

    def remove(self, document_id: UUID) -> bool: ...


def require_text(value: str | None, field_name: str) -> str:
    """Strip ``value`` and reject None or blank."""
    if value is None or not str(value).strip():
        raise MissingFieldError(field_name)
    return str(value).strip()


def require_date(value: date | None, field_name: str) -> date:
    if value is None:
        raise MissingFieldError(field_name)
    if not isinstance(value, date) or isinstance(value, datetime):
        raise InvalidDateError(field_name, repr(value))
    return value


def to_money(value: Money | Decimal | int | str, currency: Currency, field_name: str) -> Money:
    """Coerce a user-entered amount into Money of ``currency``.

    Money values pass through unchanged; currency checks are left to the
    engines.
    """
    if isinstance(value, Money):
        return value
    try:
        return Money.of(value, currency)
    except ValueError:
        raise InvalidAmountError(field_name, str(value), "not a number") from None


def allocate_number(prefix: str, year: int, existing: Iterable[str]) -> str:
    """Next free ``<prefix>-<year>-<seq:03d>`` number.

    Sequences restart every year; the next value is one past the highest
    sequence still present for this prefix and year, so gaps below it
    are never refilled.
    """
    pattern = re.compile(rf"^{re.escape(prefix)}-{year}-(\d+)$")
    highest = 0
    for number in existing:
        match = pattern.match(number)
        if match:
            highest = max(highest, int(match.group(1)))
    return f"{prefix}-{year}-{highest + 1:03d}"
