"""Services package."""

from household_budget.services.storage import (
    AuditStorageInterface,
    ConnectionError,
    DashboardConfigStorageInterface,
    DuplicateError,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsDashboardConfigStorage,
    GoogleSheetsRecurringStorage,
    GoogleSheetsTransactionStorage,
    InMemoryAuditStorage,
    InMemoryDashboardConfigStorage,
    InMemoryRecurringStorage,
    InMemoryTransactionStorage,
    NotFoundError,
    RecurringStorageInterface,
    StorageError,
    TransactionStorageInterface,
)

__all__ = [
    "AuditStorageInterface",
    "ConnectionError",
    "DashboardConfigStorageInterface",
    "DuplicateError",
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsDashboardConfigStorage",
    "GoogleSheetsRecurringStorage",
    "GoogleSheetsTransactionStorage",
    "InMemoryAuditStorage",
    "InMemoryDashboardConfigStorage",
    "InMemoryRecurringStorage",
    "InMemoryTransactionStorage",
    "NotFoundError",
    "RecurringStorageInterface",
    "StorageError",
    "TransactionStorageInterface",
]
