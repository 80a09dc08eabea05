"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from family_finance.models.base import Base
from family_finance.models.enums import (
    AccountType,
    AccountStatus,
    EntryType,
    EntryStatus,
)
from family_finance.models.audit_log import AuditLog
from family_finance.models.account import Account
from family_finance.models.ledger_entry import LedgerEntry, TRANSFER_CATEGORY

__all__ = [
    "Base",
    "AccountType",
    "AccountStatus",
    "EntryType",
    "EntryStatus",
    "AuditLog",
    "Account",
    "LedgerEntry",
    "TRANSFER_CATEGORY",
]
