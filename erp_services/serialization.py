"""
erp_services.serialization -- JSON codec for stored document collections.

Responsibility:
    Converts order and ledger documents to and from the JSON arrays kept
    in the key-value store.  Keys are camelCase, dates ISO-8601, decimals
    written as strings so no precision is lost.

Architecture position:
    Services -- boundary layer between the store (opaque strings) and the
    module domain models.

Invariants enforced:
    - Parsing uses ``parse_float=Decimal``, so numeric values written by
      other tools also become Decimal, never float.
    - Ledger status is checked against the closed ``LedgerStatus`` set.
      A stored ``Overdue`` (written by older front-ends that persisted the
      overlay) is replaced by the status derived from the amounts.
    - Every decoded ledger document passes ``check_invariants``: payment
      history sums to the paid amount and status matches the amounts.
    - A stored ``totalAmount`` on an order must equal the recomputed total.

Failure modes:
    - UnknownStatusError for a status outside the closed set.
    - MalformedDocumentError for missing keys, unparsable values, a
      violated invariant, or a document of the wrong kind/direction.
"""

from __future__ import annotations

import json
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Generic, Sequence, TypeVar
from uuid import UUID

from erp_engines.ledger import LedgerStatus, PaymentEvent, check_invariants, derive_status
from erp_kernel.domain.values import Currency, Money
from erp_kernel.exceptions import MalformedDocumentError, ValidationError
from erp_kernel.logging_config import get_logger
from erp_modules.ledger.models import LedgerDirection, LedgerDocument
from erp_modules.orders.models import DocumentKind, LineItem, OrderDocument, ProductRef

logger = get_logger("services.serialization")

T = TypeVar("T")

_DECODE_ERRORS = (KeyError, TypeError, ValueError, InvalidOperation, AttributeError, ValidationError)


# ---------------------------------------------------------------------------
# Scalar helpers
# ---------------------------------------------------------------------------


def _dec(value: Decimal) -> str:
    return str(value)


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, bool) or value is None:
        raise ValueError(f"not a number: {value!r}")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _opt_date(value: str | None) -> date | None:
    return date.fromisoformat(value) if value else None


def _opt_datetime(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _iso(value: date | datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


def encode_order(document: OrderDocument) -> dict[str, Any]:
    return {
        "id": str(document.id),
        "kind": document.kind.value,
        "number": document.number,
        "counterparty": document.counterparty,
        "issueDate": document.issue_date.isoformat(),
        "currency": document.currency.code,
        "items": [
            {
                "id": str(item.id),
                "productId": str(item.product.id),
                "productCode": item.product.code,
                "productName": item.product.name,
                "quantity": _dec(item.quantity),
                "unitPrice": _dec(item.unit_price.amount),
                "discountPercent": _dec(item.discount_percent),
                "subtotal": _dec(item.subtotal.amount),
            }
            for item in document.items
        ],
        "overallDiscountPercent": _dec(document.overall_discount_percent),
        "totalAmount": _dec(document.total_amount.amount),
        "notes": document.notes,
        "createdAt": _iso(document.created_at),
    }


def decode_order(data: dict[str, Any], kind: DocumentKind) -> OrderDocument:
    document_id = str(data.get("id", "<unknown>")) if isinstance(data, dict) else "<unknown>"
    try:
        if data["kind"] != kind.value:
            raise MalformedDocumentError(document_id, f"kind {data['kind']!r} stored as {kind.value}")
        currency = Currency(data["currency"])
        items = tuple(
            LineItem(
                id=UUID(raw["id"]),
                product=ProductRef(
                    id=UUID(raw["productId"]),
                    code=raw["productCode"],
                    name=raw["productName"],
                ),
                quantity=_to_decimal(raw["quantity"]),
                unit_price=Money(_to_decimal(raw["unitPrice"]), currency),
                discount_percent=_to_decimal(raw.get("discountPercent", "0")),
            )
            for raw in data.get("items", [])
        )
        document = OrderDocument(
            id=UUID(data["id"]),
            kind=kind,
            number=data["number"],
            counterparty=data["counterparty"],
            issue_date=date.fromisoformat(data["issueDate"]),
            currency=currency,
            items=items,
            overall_discount_percent=_to_decimal(data.get("overallDiscountPercent", "0")),
            notes=data.get("notes") or "",
            created_at=_opt_datetime(data.get("createdAt")),
        )
        stored_total = data.get("totalAmount")
        if stored_total is not None and _to_decimal(stored_total) != document.total_amount.amount:
            raise MalformedDocumentError(
                document_id,
                f"stored total {stored_total} does not match computed {document.total_amount.amount}",
            )
    except _DECODE_ERRORS as exc:
        raise MalformedDocumentError(document_id, f"{type(exc).__name__}: {exc}") from exc
    return document


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------


def encode_ledger(document: LedgerDocument) -> dict[str, Any]:
    return {
        "id": str(document.id),
        "direction": document.direction.value,
        "number": document.number,
        "counterparty": document.counterparty,
        "description": document.description,
        "category": document.category,
        "currency": document.currency.code,
        "originalAmount": _dec(document.original_amount.amount),
        "paidAmount": _dec(document.paid_amount.amount),
        "status": document.status.value,
        "dueDate": document.due_date.isoformat(),
        "issueDate": _iso(document.issue_date),
        "paymentHistory": [
            {
                "id": str(event.id),
                "date": event.payment_date.isoformat(),
                "amount": _dec(event.amount.amount),
                "method": event.method,
                "recordedAt": _iso(event.recorded_at),
            }
            for event in document.payment_history
        ],
        "createdAt": _iso(document.created_at),
    }


def decode_ledger(data: dict[str, Any], direction: LedgerDirection) -> LedgerDocument:
    document_id = str(data.get("id", "<unknown>")) if isinstance(data, dict) else "<unknown>"
    # Parsed outside the generic error wrapper so an unknown value surfaces
    # as UnknownStatusError.
    status = LedgerStatus.parse(data.get("status", LedgerStatus.PENDING.value))
    try:
        if data["direction"] != direction.value:
            raise MalformedDocumentError(
                document_id, f"direction {data['direction']!r} stored as {direction.value}",
            )
        currency = Currency(data["currency"])
        original = Money(_to_decimal(data["originalAmount"]), currency)
        paid = Money(_to_decimal(data.get("paidAmount", "0")), currency)
        history = tuple(
            PaymentEvent(
                id=UUID(raw["id"]),
                payment_date=date.fromisoformat(raw["date"]),
                amount=Money(_to_decimal(raw["amount"]), currency),
                method=raw["method"],
                recorded_at=_opt_datetime(raw.get("recordedAt")),
            )
            for raw in data.get("paymentHistory", [])
        )
        if status is LedgerStatus.OVERDUE:
            status = derive_status(paid, original)
            logger.info("ledger_legacy_overdue_status_migrated", extra={
                "document_id": document_id,
                "status": status.value,
            })
        document = LedgerDocument(
            id=UUID(data["id"]),
            direction=direction,
            number=data["number"],
            counterparty=data["counterparty"],
            description=data.get("description") or "",
            category=data.get("category") or "",
            original_amount=original,
            paid_amount=paid,
            status=status,
            due_date=date.fromisoformat(data["dueDate"]),
            issue_date=_opt_date(data.get("issueDate")),
            payment_history=history,
            created_at=_opt_datetime(data.get("createdAt")),
        )
    except _DECODE_ERRORS as exc:
        raise MalformedDocumentError(document_id, f"{type(exc).__name__}: {exc}") from exc

    problems = check_invariants(document)
    if problems:
        raise MalformedDocumentError(document_id, "; ".join(problems))
    return document


# ---------------------------------------------------------------------------
# Collection codecs
# ---------------------------------------------------------------------------


class CollectionCodec(Generic[T]):
    """Encodes a whole collection as one JSON array and back."""

    def __init__(
        self,
        name: str,
        encode: Callable[[T], dict[str, Any]],
        decode: Callable[[dict[str, Any]], T],
    ):
        self.name = name
        self._encode = encode
        self._decode = decode

    def encode_many(self, documents: Sequence[T]) -> str:
        return json.dumps([self._encode(d) for d in documents], ensure_ascii=False)

    def decode_many(self, text: str) -> list[T]:
        try:
            data = json.loads(text, parse_float=Decimal)
        except json.JSONDecodeError as exc:
            raise MalformedDocumentError(self.name, f"invalid JSON: {exc}") from exc
        if not isinstance(data, list):
            raise MalformedDocumentError(self.name, "stored collection is not a JSON array")
        for entry in data:
            if not isinstance(entry, dict):
                raise MalformedDocumentError(self.name, "collection entry is not a JSON object")
        return [self._decode(entry) for entry in data]


def order_codec(kind: DocumentKind) -> CollectionCodec[OrderDocument]:
    return CollectionCodec(kind.collection, encode_order, lambda data: decode_order(data, kind))


def ledger_codec(direction: LedgerDirection) -> CollectionCodec[LedgerDocument]:
    return CollectionCodec(direction.collection, encode_ledger, lambda data: decode_ledger(data, direction))
