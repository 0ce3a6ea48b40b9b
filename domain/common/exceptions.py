"""Business exception taxonomy shared by the domain, application and infrastructure layers.

The core layer only maps these to HTTP responses; nothing here depends on it.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Optional

from shared.codes import BusinessCode


class BusinessException(Exception):
    """Base class for every business rule violation.

    Not raised directly; code raises one of the concrete subclasses below so
    the HTTP layer can map its ``code`` to a status.
    """

    def __init__(
        self,
        code: int,
        message: str,
        error_type: str = "BusinessError",
        details: Optional[dict] = None,
        field: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.error_type = error_type
        self.details = details
        self.field = field
        super().__init__(self.message)
        if cause is not None:
            self.__cause__ = cause


class DuplicateResourceException(BusinessException):
    def __init__(
        self,
        resource_type: Optional[str] = None,
        field: Optional[str] = None,
        value: Optional[str] = None,
        *,
        message: Optional[str] = None,
    ):
        if message is None:
            message = f"{resource_type} with {field} '{value}' already exists"
        details = {"resource_type": resource_type, "value": value} if resource_type else None
        super().__init__(
            code=BusinessCode.RESOURCE_ALREADY_EXISTS,
            message=message,
            error_type="DuplicateResource",
            details=details,
            field=field,
        )


class ResourceNotFoundException(BusinessException):
    """Missing entity, looked up either by id or by an arbitrary field."""

    def __init__(
        self,
        resource_type: Optional[str] = None,
        identifier: Optional[str] = None,
        *,
        field: Optional[str] = None,
        value: Optional[str] = None,
        message: Optional[str] = None,
    ):
        details: dict = {}
        if message is None:
            if field is not None:
                message = f"{resource_type} not found with {field}: {value}"
                details = {"resource_type": resource_type, field: value}
            else:
                message = f"{resource_type} not found with id: {identifier}"
                details = {"resource_type": resource_type, "id": identifier}
        super().__init__(
            code=BusinessCode.NOT_FOUND,
            message=message,
            error_type="ResourceNotFound",
            details=details or None,
            field=field,
        )


class InvalidOperationException(BusinessException):
    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(
            code=BusinessCode.INVALID_OPERATION,
            message=message,
            error_type="InvalidOperation",
            cause=cause,
        )


class SegmentValidationException(BusinessException):
    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        *,
        details: Optional[dict] = None,
        error_type: str = "SegmentValidation",
    ):
        super().__init__(
            code=BusinessCode.SEGMENT_VALIDATION_ERROR,
            message=message,
            error_type=error_type,
            details=details,
            field="amount",
            cause=cause,
        )


class SegmentAmountExceedsExpenseException(SegmentValidationException):
    def __init__(self, segment_amount: Decimal, expense_amount: Decimal):
        segment = _plain(segment_amount)
        expense = _plain(expense_amount)
        super().__init__(
            f"Segment amount ({segment}) exceeds expense amount ({expense})",
            details={"segment_amount": segment, "expense_amount": expense},
            error_type="SegmentAmountExceedsExpense",
        )
        self.segment_amount = segment_amount
        self.expense_amount = expense_amount


class FileStorageException(BusinessException):
    """Raised when the storage backend fails to read or write a file."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(
            code=BusinessCode.STORAGE_ERROR,
            message=message,
            error_type="FileStorageError",
            cause=cause,
        )


def _plain(amount: Decimal) -> str:
    # Positional notation only, never 1E+2
    return format(Decimal(amount), "f")
