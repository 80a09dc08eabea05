"""
Pydantic schemas for transfers between accounts.

A transfer has no table of its own. It is the pair of ledger
entries it created, so the response is assembled from both.
"""

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from family_finance.models.enums import EntryType


DEFAULT_TRANSFER_DESCRIPTION = "Transfer between accounts"
MIN_TRANSFER_AMOUNT = Decimal("0.01")


class TransferCreate(BaseModel):
    """
    Request to move money from one account to another.

    The from/to accounts must differ. That rule is checked by
    TransferService so it surfaces as a ValidationError with the
    same shape whether the call came from HTTP or from code.
    """
    from_account_id: int
    to_account_id: int
    amount: Decimal = Field(
        ge=MIN_TRANSFER_AMOUNT, max_digits=17, decimal_places=2
    )
    date: datetime = Field(default_factory=datetime.utcnow)
    description: str = Field(
        default=DEFAULT_TRANSFER_DESCRIPTION, min_length=3, max_length=200
    )
    notes: str | None = Field(default=None, max_length=500)

    model_config = {"str_strip_whitespace": True}


class TransferQuery(BaseModel):
    """Filters, pagination and ordering for listing transfers."""
    from_account_id: int | None = None
    to_account_id: int | None = None
    account_id: int | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    min_amount: Decimal | None = Field(default=None, gt=0)
    max_amount: Decimal | None = Field(default=None, gt=0)

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=50, ge=1, le=100)

    sort_by: Literal["date", "amount"] = "date"
    sort_order: Literal["asc", "desc"] = "desc"

    @model_validator(mode="after")
    def ranges_are_ordered(self) -> "TransferQuery":
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        if self.min_amount and self.max_amount and self.min_amount > self.max_amount:
            raise ValueError("min_amount must not exceed max_amount")
        return self


class TransferEntrySummary(BaseModel):
    """One side of a transfer."""
    id: int
    account_id: int
    amount: Decimal
    entry_type: EntryType

    model_config = {"from_attributes": True}


class TransferResponse(BaseModel):
    id: int
    from_account_id: int
    to_account_id: int
    from_account_name: str | None
    to_account_name: str | None
    amount: Decimal
    date: datetime
    description: str
    notes: str | None
    from_entry: TransferEntrySummary
    to_entry: TransferEntrySummary
    created_at: datetime


class TransferPage(BaseModel):
    data: list[TransferResponse]
    total: int
    page: int
    limit: int
