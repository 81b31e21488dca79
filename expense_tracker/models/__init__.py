"""
Data Models Package

This package contains all Pydantic models used in the Expense Tracker.
All data flowing through the stores must conform to these schemas.
"""

from expense_tracker.models.expense import (
    SUPPORTED_CURRENCIES,
    UNCATEGORIZED_COLOR,
    UNCATEGORIZED_NAME,
    Category,
    CategoryColor,
    DateFormat,
    Expense,
    ExportDocument,
    Language,
    NewCategory,
    NewExpense,
    StoredUser,
    User,
    UserSettings,
    new_id,
    parse_timestamp,
    uncategorized,
    utc_now,
)
from expense_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Expense models
    "SUPPORTED_CURRENCIES",
    "UNCATEGORIZED_COLOR",
    "UNCATEGORIZED_NAME",
    "Category",
    "CategoryColor",
    "DateFormat",
    "Expense",
    "ExportDocument",
    "Language",
    "NewCategory",
    "NewExpense",
    "StoredUser",
    "User",
    "UserSettings",
    "new_id",
    "parse_timestamp",
    "uncategorized",
    "utc_now",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
