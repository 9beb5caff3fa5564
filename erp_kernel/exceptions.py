"""
Typed Exception Hierarchy for the ERP Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers (editor screens, import jobs, tests) must react to a rejected
action precisely. Every error therefore has:
  1. A TYPED exception class (catch by type, not message)
  2. A CODE class attribute (machine-readable, UI-safe)
  3. Structured DATA attributes (not just a message string)

Example:
    try:
        ledger.record_payment(document_id, amount, payment_date, method_id)
    except OverpaymentError as e:
        notify_user(f"Remaining balance is {e.remaining}")
    except DocumentNotFoundError:
        notify_user("This document no longer exists")

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    ErpKernelError (base)
    |
    +-- ValidationError
    |   +-- MissingFieldError
    |   +-- InvalidQuantityError
    |   +-- InvalidPriceError
    |   +-- InvalidPercentageError
    |   +-- InvalidAmountError
    |   +-- InvalidDateError
    |   +-- OverpaymentError
    |   +-- OriginalAmountLockedError
    |   +-- DuplicateDocumentNumberError
    |   +-- InactivePaymentMethodError
    |   +-- InactiveProductError
    |   +-- CurrencyMismatchError
    |
    +-- NotFoundError
    |   +-- DocumentNotFoundError
    |   +-- LineItemNotFoundError
    |   +-- ProductNotFoundError
    |   +-- PaymentMethodNotFoundError
    |
    +-- LedgerError
    |   +-- InvalidTransitionError
    |
    +-- SerializationError
    |   +-- UnknownStatusError
    |   +-- MalformedDocumentError
    |
    +-- PersistenceError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Validation      | MISSING_FIELD               | Required field empty
                | INVALID_QUANTITY            | Quantity zero or negative
                | INVALID_PRICE               | Unit price negative
                | INVALID_PERCENTAGE          | Percentage outside [0, 100]
                | INVALID_AMOUNT              | Amount not positive / too precise
                | INVALID_DATE                | Date field holds a non-date value
                | OVERPAYMENT                 | Payment exceeds remaining balance
                | ORIGINAL_AMOUNT_LOCKED      | Original amount edit after payments
                | DUPLICATE_DOCUMENT_NUMBER   | Number already used in its kind
                | INACTIVE_PAYMENT_METHOD     | Payment method switched off
                | INACTIVE_PRODUCT            | Product withdrawn from the catalog
                | CURRENCY_MISMATCH           | Amount in another currency
----------------|-----------------------------|-----------------------------------------
Not found       | DOCUMENT_NOT_FOUND          | Stale document id
                | LINE_ITEM_NOT_FOUND         | Stale line item id
                | PRODUCT_NOT_FOUND           | Unknown product id/code
                | PAYMENT_METHOD_NOT_FOUND    | Unknown payment method id
----------------|-----------------------------|-----------------------------------------
Ledger          | INVALID_TRANSITION          | No declared transition for action
----------------|-----------------------------|-----------------------------------------
Serialization   | UNKNOWN_STATUS              | Stored status outside the enum
                | MALFORMED_DOCUMENT          | Stored snapshot breaks an invariant
----------------|-----------------------------|-----------------------------------------
Persistence     | PERSISTENCE_ERROR           | Key-value store write/read failed

There is no retryable error: every operation is local and deterministic.
The only recovery path for a wrong payment is an explicit reversal.
"""


class ErpKernelError(Exception):
    """
    Base exception for all ERP kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "ERP_KERNEL_ERROR"


# Validation exceptions


class ValidationError(ErpKernelError):
    """Base exception for rejected input. The operation was not applied."""

    code: str = "VALIDATION_ERROR"


class MissingFieldError(ValidationError):
    """A required field is missing or blank."""

    code: str = "MISSING_FIELD"

    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__(f"Required field is missing: {field_name}")


class InvalidQuantityError(ValidationError):
    """Line-item quantity must be strictly positive."""

    code: str = "INVALID_QUANTITY"

    def __init__(self, quantity: str):
        self.quantity = quantity
        super().__init__(f"Quantity must be positive, got {quantity}")


class InvalidPriceError(ValidationError):
    """Unit price must not be negative."""

    code: str = "INVALID_PRICE"

    def __init__(self, unit_price: str):
        self.unit_price = unit_price
        super().__init__(f"Unit price cannot be negative, got {unit_price}")


class InvalidPercentageError(ValidationError):
    """Percentage outside the closed range [0, 100]."""

    code: str = "INVALID_PERCENTAGE"

    def __init__(self, field_name: str, value: str):
        self.field_name = field_name
        self.value = value
        super().__init__(f"{field_name} must be between 0 and 100, got {value}")


class InvalidAmountError(ValidationError):
    """Monetary amount is not positive or carries more decimals than the currency."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, field_name: str, amount: str, reason: str):
        self.field_name = field_name
        self.amount = amount
        self.reason = reason
        super().__init__(f"Invalid {field_name} {amount}: {reason}")


class InvalidDateError(ValidationError):
    """A date field holds something other than a calendar date."""

    code: str = "INVALID_DATE"

    def __init__(self, field_name: str, value: str):
        self.field_name = field_name
        self.value = value
        super().__init__(f"{field_name} must be a date, got {value}")


class OverpaymentError(ValidationError):
    """Payment (or new original amount) would exceed what is owed."""

    code: str = "OVERPAYMENT"

    def __init__(self, document_id: str, amount: str, remaining: str):
        self.document_id = document_id
        self.amount = amount
        self.remaining = remaining
        super().__init__(
            f"Amount {amount} exceeds remaining balance {remaining} "
            f"on document {document_id}"
        )


class OriginalAmountLockedError(ValidationError):
    """Original amount cannot change once payments have been recorded."""

    code: str = "ORIGINAL_AMOUNT_LOCKED"

    def __init__(self, document_id: str, payment_count: int):
        self.document_id = document_id
        self.payment_count = payment_count
        super().__init__(
            f"Original amount of document {document_id} is locked: "
            f"{payment_count} payment(s) recorded"
        )


class DuplicateDocumentNumberError(ValidationError):
    """Document number already used within its kind."""

    code: str = "DUPLICATE_DOCUMENT_NUMBER"

    def __init__(self, kind: str, number: str):
        self.kind = kind
        self.number = number
        super().__init__(f"Document number {number} already exists for {kind}")


class InactivePaymentMethodError(ValidationError):
    """Payment method exists but is not active."""

    code: str = "INACTIVE_PAYMENT_METHOD"

    def __init__(self, method_id: str):
        self.method_id = method_id
        super().__init__(f"Payment method {method_id} is inactive")


class InactiveProductError(ValidationError):
    """Product exists but has been withdrawn from the catalog."""

    code: str = "INACTIVE_PRODUCT"

    def __init__(self, product_ref: str):
        self.product_ref = product_ref
        super().__init__(f"Product {product_ref} is inactive")


class CurrencyMismatchError(ValidationError):
    """Amount currency differs from the document currency."""

    code: str = "CURRENCY_MISMATCH"

    def __init__(self, expected: str, received: str):
        self.expected = expected
        self.received = received
        super().__init__(f"Expected currency {expected}, received {received}")


# Not-found exceptions


class NotFoundError(ErpKernelError):
    """Base exception for stale or unknown identifiers."""

    code: str = "NOT_FOUND"


class DocumentNotFoundError(NotFoundError):
    """Document id no longer exists in its repository."""

    code: str = "DOCUMENT_NOT_FOUND"

    def __init__(self, document_id: str):
        self.document_id = document_id
        super().__init__(f"Document not found: {document_id}")


class LineItemNotFoundError(NotFoundError):
    """Line item id is not part of the document."""

    code: str = "LINE_ITEM_NOT_FOUND"

    def __init__(self, document_id: str, item_id: str):
        self.document_id = document_id
        self.item_id = item_id
        super().__init__(f"Line item {item_id} not found on document {document_id}")


class ProductNotFoundError(NotFoundError):
    """Product id or code is not in the catalog."""

    code: str = "PRODUCT_NOT_FOUND"

    def __init__(self, product_ref: str):
        self.product_ref = product_ref
        super().__init__(f"Product not found: {product_ref}")


class PaymentMethodNotFoundError(NotFoundError):
    """Payment method id is not in the catalog."""

    code: str = "PAYMENT_METHOD_NOT_FOUND"

    def __init__(self, method_id: str):
        self.method_id = method_id
        super().__init__(f"Payment method not found: {method_id}")


# Ledger exceptions


class LedgerError(ErpKernelError):
    """Base exception for ledger state machine errors."""

    code: str = "LEDGER_ERROR"


class InvalidTransitionError(LedgerError):
    """No transition is declared for the action from the current state."""

    code: str = "INVALID_TRANSITION"

    def __init__(self, document_id: str, from_state: str, action: str):
        self.document_id = document_id
        self.from_state = from_state
        self.action = action
        super().__init__(
            f"Action '{action}' is not allowed from state '{from_state}' "
            f"on document {document_id}"
        )


# Serialization exceptions


class SerializationError(ErpKernelError):
    """Base exception for snapshots that cannot be decoded."""

    code: str = "SERIALIZATION_ERROR"


class UnknownStatusError(SerializationError):
    """Stored status string is not a member of the closed enumeration."""

    code: str = "UNKNOWN_STATUS"

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Unknown ledger status: {value!r}")


class MalformedDocumentError(SerializationError):
    """Stored snapshot is missing fields or violates a document invariant."""

    code: str = "MALFORMED_DOCUMENT"

    def __init__(self, document_id: str, reason: str):
        self.document_id = document_id
        self.reason = reason
        super().__init__(f"Malformed document {document_id}: {reason}")


# Persistence exceptions


class PersistenceError(ErpKernelError):
    """Key-value store could not read or write a collection."""

    code: str = "PERSISTENCE_ERROR"

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Persistence failure for key {key!r}: {reason}")
