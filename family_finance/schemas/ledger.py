"""
Pydantic schemas for ledger operations.

These describe the rows the Ledger Store writes. They are
separate from the database models because callers build them
before any row exists.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from family_finance.models.enums import EntryType, EntryStatus


class LedgerEntryCreate(BaseModel):
    """A single debit or credit on one account."""
    date: datetime
    entry_type: EntryType
    category: str = Field(min_length=1, max_length=50)
    subcategory: str | None = Field(default=None, max_length=150)
    description: str = Field(min_length=1, max_length=255)
    amount: Decimal = Field(gt=0, decimal_places=4)
    account_id: int
    counter_account_id: int | None = None
    linked_entry_id: int | None = None
    owner_id: str = Field(min_length=1, max_length=64)
    dashboard_id: str | None = None
    notes: str | None = None


class LedgerEntryResponse(BaseModel):
    """Single entry in API responses."""
    id: int
    date: datetime
    entry_type: EntryType
    category: str
    subcategory: str | None
    description: str
    amount: Decimal
    account_id: int
    counter_account_id: int | None
    linked_entry_id: int | None
    status: EntryStatus
    created_at: datetime

    model_config = {"from_attributes": True}
