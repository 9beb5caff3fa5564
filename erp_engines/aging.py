"""
Module: erp_engines.aging
Responsibility:
    Days-past-due calculation and aging-bucket classification for open
    payable and receivable balances.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import erp_kernel domain values.

Invariants enforced:
    - Purity: no clock access; ``as_of_date`` is always passed in.
    - Decimal-only arithmetic for all monetary amounts.
    - Deterministic bucket classification for identical inputs.

Failure modes:
    - ValueError when an age does not fall into any configured bucket.

Usage:
    calculator = AgingCalculator()
    age = calculator.calculate_age(due_date=date(2024, 1, 31), as_of_date=date(2024, 2, 15))
    calculator.classify(age)  # AgeBucket("1-30", 1, 30)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Sequence
from uuid import UUID

from erp_kernel.domain.values import Currency, Money
from erp_kernel.logging_config import get_logger

logger = get_logger("engines.aging")


@dataclass(frozen=True)
class AgeBucket:
    """
    A contiguous range of days past due.

    Guarantees:
        - min_days >= 0.
        - max_days >= min_days (when bounded).
    """

    name: str
    min_days: int
    max_days: int | None  # None = unbounded (e.g., 90+)

    def __post_init__(self) -> None:
        if self.min_days < 0:
            raise ValueError("min_days cannot be negative")
        if self.max_days is not None and self.max_days < self.min_days:
            raise ValueError("max_days cannot be less than min_days")

    def contains(self, age_days: int) -> bool:
        if age_days < self.min_days:
            return False
        if self.max_days is None:
            return True
        return age_days <= self.max_days


STANDARD_BUCKETS: tuple[AgeBucket, ...] = (
    AgeBucket("Current", 0, 0),
    AgeBucket("1-30", 1, 30),
    AgeBucket("31-60", 31, 60),
    AgeBucket("61-90", 61, 90),
    AgeBucket("Over 90", 91, None),
)


@dataclass(frozen=True)
class AgedItem:
    """An open balance with its age classification."""

    document_id: UUID
    number: str
    counterparty: str
    due_date: date
    amount: Money
    age_days: int
    bucket: AgeBucket

    @property
    def is_overdue(self) -> bool:
        return self.age_days > 0

    @property
    def days_past_due(self) -> int:
        return max(0, self.age_days)


@dataclass(frozen=True)
class AgingReport:
    """
    Snapshot aging report.

    Guarantees:
        - ``total_amount()`` equals the sum of all item amounts.
        - ``total_by_bucket()`` covers every bucket in ``self.buckets``.
    """

    as_of_date: date
    currency: Currency
    buckets: tuple[AgeBucket, ...]
    items: tuple[AgedItem, ...]

    @property
    def item_count(self) -> int:
        return len(self.items)

    def _sum(self, items: Sequence[AgedItem]) -> Money:
        total = Money.zero(self.currency)
        for item in items:
            total = total + item.amount
        return total

    def total_amount(self) -> Money:
        return self._sum(self.items)

    def total_by_bucket(self) -> dict[str, Money]:
        return {
            bucket.name: self._sum(self.items_in_bucket(bucket.name))
            for bucket in self.buckets
        }

    def items_in_bucket(self, bucket_name: str) -> tuple[AgedItem, ...]:
        return tuple(i for i in self.items if i.bucket.name == bucket_name)

    def overdue_items(self) -> tuple[AgedItem, ...]:
        return tuple(i for i in self.items if i.is_overdue)

    def overdue_amount(self) -> Money:
        return self._sum(self.overdue_items())


class AgingCalculator:
    """
    Calculate aging for dated open balances.

    Contract:
        Pure functions -- all dates and data passed as parameters.
    """

    DEFAULT_BUCKETS = STANDARD_BUCKETS

    def __init__(self, buckets: Sequence[AgeBucket] | None = None):
        self._buckets = tuple(buckets) if buckets is not None else self.DEFAULT_BUCKETS

    @property
    def buckets(self) -> tuple[AgeBucket, ...]:
        return self._buckets

    def calculate_age(self, due_date: date, as_of_date: date) -> int:
        """Days past due (negative when not yet due)."""
        return (as_of_date - due_date).days

    def classify(self, age_days: int) -> AgeBucket:
        """
        Classify age into a bucket.  Negative ages (not yet due) map to the
        bucket starting at zero.

        Raises:
            ValueError: If age doesn't fit any bucket.
        """
        if age_days < 0:
            for bucket in self._buckets:
                if bucket.min_days == 0:
                    return bucket
            return self._buckets[0]

        for bucket in self._buckets:
            if bucket.contains(age_days):
                return bucket

        logger.warning("age_classification_no_bucket", extra={
            "age_days": age_days,
            "bucket_count": len(self._buckets),
        })
        raise ValueError(f"Age {age_days} does not fit any bucket")

    def age_item(
        self,
        *,
        document_id: UUID,
        number: str,
        counterparty: str,
        due_date: date,
        amount: Money,
        as_of_date: date,
    ) -> AgedItem:
        """Convenience combining calculate_age and classify."""
        age = self.calculate_age(due_date, as_of_date)
        return AgedItem(
            document_id=document_id,
            number=number,
            counterparty=counterparty,
            due_date=due_date,
            amount=amount,
            age_days=age,
            bucket=self.classify(age),
        )

    def generate_report(
        self,
        items: Sequence[AgedItem],
        as_of_date: date,
        currency: Currency,
    ) -> AgingReport:
        report = AgingReport(
            as_of_date=as_of_date,
            currency=currency,
            buckets=self._buckets,
            items=tuple(items),
        )
        logger.info("aging_report_generated", extra={
            "as_of_date": as_of_date.isoformat(),
            "item_count": report.item_count,
            "total_amount": str(report.total_amount().amount),
            "overdue_amount": str(report.overdue_amount().amount),
        })
        return report
