"""
Tests for the stored-collection JSON codec.

Covers:
- Key names and decimal representation on the wire
- Status parsing against the closed set, including legacy Overdue values
- Invariant checks on load (history sum, status, order total)
- Malformed payloads
"""

import json
from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from erp_engines.ledger import LedgerStatus
from erp_kernel.exceptions import MalformedDocumentError, UnknownStatusError
from erp_modules.ledger import LedgerDirection
from erp_modules.orders import DocumentKind
from erp_services.serialization import (
    decode_ledger,
    decode_order,
    encode_ledger,
    encode_order,
    ledger_codec,
    order_codec,
)


def stored_ledger(**overrides) -> dict:
    data = {
        "id": str(uuid4()),
        "direction": "Payable",
        "number": "AP-2024-001",
        "counterparty": "Acme Steel",
        "description": "Raw material",
        "category": "",
        "currency": "BRL",
        "originalAmount": "1000.00",
        "paidAmount": "400.00",
        "status": "PartiallyPaid",
        "dueDate": "2024-02-01",
        "issueDate": "2024-01-10",
        "paymentHistory": [
            {"id": str(uuid4()), "date": "2024-01-12", "amount": "400.00", "method": "pix",
             "recordedAt": "2024-01-12T09:30:00+00:00"},
        ],
        "createdAt": "2024-01-10T08:00:00+00:00",
    }
    data.update(overrides)
    return data


@pytest.fixture
def paid_bill(payables, today):
    doc = payables.create_document(None, "Acme Steel", "Raw material", "1000.00", date(2024, 2, 1))
    payables.record_payment(doc.id, "250.50", today, "pix")
    return payables.record_payment(doc.id, "749.50", today, "boleto")


@pytest.fixture
def discounted_quote(orders, widget, bolt, today):
    quote = orders.create_document(DocumentKind.QUOTE, "Client", today, notes="Net 30")
    orders.add_item(quote.id, widget.id, 2)
    orders.add_item(quote.id, bolt.id, 3, discount_percent="12.5")
    return orders.set_overall_discount(quote.id, "2.5")


class TestLedgerEncoding:

    def test_wire_shape(self, paid_bill):
        data = encode_ledger(paid_bill)
        assert data["status"] == "Paid"
        assert data["originalAmount"] == "1000.00"
        assert data["paidAmount"] == "1000.00"
        assert [p["method"] for p in data["paymentHistory"]] == ["pix", "boleto"]
        assert data["paymentHistory"][0]["recordedAt"] == "2024-01-15T12:00:00+00:00"
        assert data["dueDate"] == "2024-02-01"

    def test_decoded_document_equals_original(self, paid_bill):
        assert decode_ledger(encode_ledger(paid_bill), LedgerDirection.PAYABLE) == paid_bill

    def test_numbers_written_by_other_tools_become_decimal(self):
        text = json.dumps([stored_ledger()]).replace('"1000.00"', "1000.10").replace('"400.00"', "400.10")
        doc = ledger_codec(LedgerDirection.PAYABLE).decode_many(text)[0]
        assert doc.original_amount.amount == Decimal("1000.10")
        assert doc.paid_amount.amount == Decimal("400.10")
        assert isinstance(doc.payment_history[0].amount.amount, Decimal)

    def test_optional_fields_default(self):
        data = stored_ledger(paidAmount="0", status="Pending", paymentHistory=[])
        for key in ("description", "category", "issueDate", "createdAt"):
            del data[key]
        doc = decode_ledger(data, LedgerDirection.PAYABLE)
        assert doc.description == ""
        assert doc.issue_date is None
        assert doc.created_at is None

    def test_recorded_at_parsed(self):
        doc = decode_ledger(stored_ledger(), LedgerDirection.PAYABLE)
        assert doc.payment_history[0].recorded_at == datetime(2024, 1, 12, 9, 30, tzinfo=timezone.utc)


class TestLedgerStatusOnLoad:

    def test_unknown_status_rejected(self):
        with pytest.raises(UnknownStatusError):
            decode_ledger(stored_ledger(status="Cancelled"), LedgerDirection.PAYABLE)

    def test_legacy_overdue_replaced_by_derived_status(self, captured_logs):
        doc = decode_ledger(stored_ledger(status="Overdue"), LedgerDirection.PAYABLE)
        assert doc.status is LedgerStatus.PARTIALLY_PAID
        migrated = [r for r in captured_logs() if r["message"] == "ledger_legacy_overdue_status_migrated"]
        assert migrated[0]["status"] == "PartiallyPaid"

    def test_legacy_overdue_without_payments_is_pending(self):
        data = stored_ledger(status="Overdue", paidAmount="0", paymentHistory=[])
        assert decode_ledger(data, LedgerDirection.PAYABLE).status is LedgerStatus.PENDING

    def test_status_disagreeing_with_amounts_rejected(self):
        with pytest.raises(MalformedDocumentError):
            decode_ledger(stored_ledger(status="Paid"), LedgerDirection.PAYABLE)

    def test_history_sum_mismatch_rejected(self):
        with pytest.raises(MalformedDocumentError, match="sums to"):
            decode_ledger(stored_ledger(paidAmount="500.00"), LedgerDirection.PAYABLE)


class TestMalformedLedger:

    def test_missing_key(self):
        data = stored_ledger()
        del data["dueDate"]
        with pytest.raises(MalformedDocumentError):
            decode_ledger(data, LedgerDirection.PAYABLE)

    def test_wrong_direction(self):
        with pytest.raises(MalformedDocumentError):
            decode_ledger(stored_ledger(direction="Receivable"), LedgerDirection.PAYABLE)

    def test_unparsable_amount(self):
        with pytest.raises(MalformedDocumentError):
            decode_ledger(stored_ledger(originalAmount="lots"), LedgerDirection.PAYABLE)

    def test_boolean_amount(self):
        with pytest.raises(MalformedDocumentError):
            decode_ledger(stored_ledger(originalAmount=True), LedgerDirection.PAYABLE)

    def test_non_positive_original(self):
        data = stored_ledger(originalAmount="0", paidAmount="0", status="Pending", paymentHistory=[])
        with pytest.raises(MalformedDocumentError):
            decode_ledger(data, LedgerDirection.PAYABLE)


class TestOrderEncoding:

    def test_wire_shape(self, discounted_quote):
        data = encode_order(discounted_quote)
        assert data["kind"] == "Quote"
        assert data["items"][1]["discountPercent"] == "12.5"
        assert data["items"][1]["productCode"] == "BLT-10"
        assert data["overallDiscountPercent"] == "2.5"
        assert Decimal(data["totalAmount"]) == discounted_quote.total_amount.amount
        assert data["notes"] == "Net 30"

    def test_decoded_document_equals_original(self, discounted_quote):
        decoded = decode_order(encode_order(discounted_quote), DocumentKind.QUOTE)
        assert decoded == discounted_quote
        assert decoded.total_amount == discounted_quote.total_amount

    def test_stored_total_mismatch_rejected(self, discounted_quote):
        data = encode_order(discounted_quote)
        data["totalAmount"] = "1.00"
        with pytest.raises(MalformedDocumentError, match="stored total"):
            decode_order(data, DocumentKind.QUOTE)

    def test_stored_total_optional(self, discounted_quote):
        data = encode_order(discounted_quote)
        del data["totalAmount"]
        assert decode_order(data, DocumentKind.QUOTE).total_amount == discounted_quote.total_amount

    def test_wrong_kind(self, discounted_quote):
        with pytest.raises(MalformedDocumentError):
            decode_order(encode_order(discounted_quote), DocumentKind.SALES_ORDER)

    def test_invalid_line_quantity(self, discounted_quote):
        data = encode_order(discounted_quote)
        data["items"][0]["quantity"] = "0"
        with pytest.raises(MalformedDocumentError):
            decode_order(data, DocumentKind.QUOTE)


class TestCollectionCodec:

    def test_empty_collection(self):
        codec = order_codec(DocumentKind.QUOTE)
        assert codec.decode_many(codec.encode_many([])) == []

    def test_non_ascii_kept(self, orders, today):
        quote = orders.create_document(DocumentKind.QUOTE, "Metalúrgica São João", today)
        text = order_codec(DocumentKind.QUOTE).encode_many([quote])
        assert "Metalúrgica São João" in text

    @pytest.mark.parametrize("text", ["{not json", '{"id": 1}', "[1, 2]"])
    def test_malformed_payloads(self, text):
        with pytest.raises(MalformedDocumentError):
            ledger_codec(LedgerDirection.RECEIVABLE).decode_many(text)
