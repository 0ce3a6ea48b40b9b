"""Expense attachment domain exports."""
from .entity import ExpenseAttachment
from .repository import AttachmentRepository

__all__ = ["ExpenseAttachment", "AttachmentRepository"]
