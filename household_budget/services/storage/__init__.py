"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Google Sheets is the persistent backend; the in-memory backend serves
tests and unconfigured installs.
"""

from household_budget.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    DashboardConfigStorageInterface,
    DuplicateError,
    NotFoundError,
    RecurringStorageInterface,
    StorageError,
    TransactionStorageInterface,
)
from household_budget.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryDashboardConfigStorage,
    InMemoryRecurringStorage,
    InMemoryTransactionStorage,
)
from household_budget.services.storage.google_sheets import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsDashboardConfigStorage,
    GoogleSheetsRecurringStorage,
    GoogleSheetsTransactionStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "DashboardConfigStorageInterface",
    "RecurringStorageInterface",
    "TransactionStorageInterface",
    # Exceptions
    "ConnectionError",
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryDashboardConfigStorage",
    "InMemoryRecurringStorage",
    "InMemoryTransactionStorage",
    # Google Sheets implementation
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsDashboardConfigStorage",
    "GoogleSheetsRecurringStorage",
    "GoogleSheetsTransactionStorage",
]
