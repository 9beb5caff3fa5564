"""
Tests for the typed exception hierarchy: codes, attributes and grouping.
"""

import pytest

from erp_kernel.exceptions import (
    CurrencyMismatchError,
    DocumentNotFoundError,
    DuplicateDocumentNumberError,
    ErpKernelError,
    InactivePaymentMethodError,
    InactiveProductError,
    InvalidAmountError,
    InvalidDateError,
    InvalidPercentageError,
    InvalidPriceError,
    InvalidQuantityError,
    InvalidTransitionError,
    LedgerError,
    LineItemNotFoundError,
    MalformedDocumentError,
    MissingFieldError,
    NotFoundError,
    OriginalAmountLockedError,
    OverpaymentError,
    PaymentMethodNotFoundError,
    PersistenceError,
    ProductNotFoundError,
    SerializationError,
    UnknownStatusError,
    ValidationError,
)


@pytest.mark.parametrize("exc,base,code", [
    (MissingFieldError("number"), ValidationError, "MISSING_FIELD"),
    (InvalidQuantityError("0"), ValidationError, "INVALID_QUANTITY"),
    (InvalidPriceError("-1"), ValidationError, "INVALID_PRICE"),
    (InvalidPercentageError("discount_percent", "101"), ValidationError, "INVALID_PERCENTAGE"),
    (InvalidAmountError("amount", "0", "must be greater than zero"), ValidationError, "INVALID_AMOUNT"),
    (InvalidDateError("due_date", "2024-03-01"), ValidationError, "INVALID_DATE"),
    (OverpaymentError("d", "10", "5"), ValidationError, "OVERPAYMENT"),
    (OriginalAmountLockedError("d", 2), ValidationError, "ORIGINAL_AMOUNT_LOCKED"),
    (DuplicateDocumentNumberError("Quote", "QT-1"), ValidationError, "DUPLICATE_DOCUMENT_NUMBER"),
    (InactivePaymentMethodError("pix"), ValidationError, "INACTIVE_PAYMENT_METHOD"),
    (InactiveProductError("WID-01"), ValidationError, "INACTIVE_PRODUCT"),
    (CurrencyMismatchError("BRL", "USD"), ValidationError, "CURRENCY_MISMATCH"),
    (DocumentNotFoundError("d"), NotFoundError, "DOCUMENT_NOT_FOUND"),
    (LineItemNotFoundError("d", "i"), NotFoundError, "LINE_ITEM_NOT_FOUND"),
    (ProductNotFoundError("p"), NotFoundError, "PRODUCT_NOT_FOUND"),
    (PaymentMethodNotFoundError("m"), NotFoundError, "PAYMENT_METHOD_NOT_FOUND"),
    (InvalidTransitionError("d", "Paid", "record_payment"), LedgerError, "INVALID_TRANSITION"),
    (UnknownStatusError("Cancelled"), SerializationError, "UNKNOWN_STATUS"),
    (MalformedDocumentError("d", "bad"), SerializationError, "MALFORMED_DOCUMENT"),
    (PersistenceError("payables", "disk full"), ErpKernelError, "PERSISTENCE_ERROR"),
])
def test_codes_and_grouping(exc, base, code):
    assert isinstance(exc, base)
    assert isinstance(exc, ErpKernelError)
    assert exc.code == code


def test_overpayment_carries_amounts():
    exc = OverpaymentError("doc-1", "150.00", "100.00")
    assert exc.document_id == "doc-1"
    assert exc.amount == "150.00"
    assert exc.remaining == "100.00"


def test_invalid_transition_carries_state_and_action():
    exc = InvalidTransitionError("doc-1", "Paid", "record_payment")
    assert exc.from_state == "Paid"
    assert exc.action == "record_payment"


def test_unknown_status_message_names_value():
    assert "Cancelled" in str(UnknownStatusError("Cancelled"))
