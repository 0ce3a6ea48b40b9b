from decimal import Decimal

from domain.common.exceptions import (
    BusinessException,
    DuplicateResourceException,
    FileStorageException,
    InvalidOperationException,
    ResourceNotFoundException,
    SegmentAmountExceedsExpenseException,
    SegmentValidationException,
)
from shared.codes import BusinessCode


def test_duplicate_resource_message():
    exc = DuplicateResourceException("Category", "name", "Travel")
    assert str(exc) == "Category with name 'Travel' already exists"
    assert exc.code == BusinessCode.RESOURCE_ALREADY_EXISTS
    assert exc.field == "name"
    assert isinstance(exc, BusinessException)


def test_duplicate_resource_free_message():
    exc = DuplicateResourceException(message="Email already registered")
    assert exc.message == "Email already registered"
    assert exc.details is None


def test_resource_not_found_by_id():
    exc = ResourceNotFoundException("Expense", "abc-123")
    assert exc.message == "Expense not found with id: abc-123"
    assert exc.code == BusinessCode.NOT_FOUND
    assert exc.details == {"resource_type": "Expense", "id": "abc-123"}


def test_resource_not_found_by_field():
    exc = ResourceNotFoundException("User", field="email", value="a@b.com")
    assert exc.message == "User not found with email: a@b.com"
    assert exc.field == "email"


def test_resource_not_found_free_message():
    exc = ResourceNotFoundException(message="File not found: x/y.pdf")
    assert str(exc) == "File not found: x/y.pdf"
    assert exc.details is None


def test_invalid_operation_keeps_cause():
    cause = OSError("disk full")
    exc = InvalidOperationException("Cannot do that", cause)
    assert exc.message == "Cannot do that"
    assert exc.__cause__ is cause
    assert exc.code == BusinessCode.INVALID_OPERATION


def test_segment_amount_exceeds_expense_message():
    exc = SegmentAmountExceedsExpenseException(Decimal("150.00"), Decimal("100.00"))
    assert exc.message == "Segment amount (150.00) exceeds expense amount (100.00)"
    assert isinstance(exc, SegmentValidationException)
    assert exc.code == BusinessCode.SEGMENT_VALIDATION_ERROR
    assert exc.segment_amount == Decimal("150.00")


def test_segment_amount_uses_plain_notation():
    exc = SegmentAmountExceedsExpenseException(Decimal("1.5E+3"), Decimal("1E+2"))
    assert exc.message == "Segment amount (1500) exceeds expense amount (100)"


def test_segment_validation_free_message():
    exc = SegmentValidationException("Segments must not be empty")
    assert exc.error_type == "SegmentValidation"
    assert exc.field == "amount"


def test_file_storage_exception_is_business_exception():
    exc = FileStorageException("Could not store file: a.pdf")
    assert isinstance(exc, BusinessException)
    assert exc.code == BusinessCode.STORAGE_ERROR
