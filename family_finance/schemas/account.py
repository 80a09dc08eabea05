"""
Pydantic schemas for account operations.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator, model_validator

from family_finance.models.enums import AccountType, AccountStatus


class AccountCreate(BaseModel):
    """Request to create a new account."""
    name: str = Field(min_length=3, max_length=100)
    account_type: AccountType
    currency: str = Field(default="BRL", min_length=3, max_length=3)
    initial_balance: Decimal = Field(default=Decimal("0"), decimal_places=4)
    credit_limit: Decimal | None = Field(default=None, gt=0, decimal_places=4)

    model_config = {"str_strip_whitespace": True}

    @field_validator("currency")
    @classmethod
    def currency_upper(cls, v: str) -> str:
        return v.upper()

    @model_validator(mode="after")
    def credit_card_needs_limit(self) -> "AccountCreate":
        if self.account_type == AccountType.CREDIT_CARD and self.credit_limit is None:
            raise ValueError("credit card accounts must define credit_limit")
        return self


class AccountStatusUpdate(BaseModel):
    """Request to move an account to another status."""
    new_status: AccountStatus


class ReconcileRequest(BaseModel):
    """Balance printed on a bank statement, to compare with the ledger."""
    statement_balance: Decimal = Field(decimal_places=2)
    notes: str | None = Field(default=None, max_length=500)


class ReconciliationResult(BaseModel):
    account_id: int
    calculated_balance: Decimal
    statement_balance: Decimal
    difference: Decimal
    is_reconciled: bool
    reconciled_at: datetime
    notes: str | None


class AccountResponse(BaseModel):
    id: int
    owner_id: str
    dashboard_id: str | None
    name: str
    account_type: AccountType
    status: AccountStatus
    currency: str
    initial_balance: Decimal
    current_balance: Decimal
    available_balance: Decimal
    credit_limit: Decimal | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
