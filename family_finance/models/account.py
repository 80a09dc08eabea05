"""
Account model.

A balance-bearing account: checking, savings, a credit card,
a wallet of cash. Balances are stored on the row and kept in
step with the account's active ledger entries by the services.

Balance rule, identical for every account type:

    current_balance   = initial_balance + credits - debits
    available_balance = current_balance + credit_limit (credit cards)
                      = current_balance                (everything else)

A credit card's current balance goes negative while credit is
in use, so money moving in always raises both balances.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    String, DateTime, Numeric,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column

from family_finance.models.base import Base
from family_finance.models.enums import AccountType, AccountStatus


# CLOSED is terminal
STATUS_TRANSITIONS: dict[AccountStatus, set[AccountStatus]] = {
    AccountStatus.ACTIVE: {AccountStatus.INACTIVE, AccountStatus.CLOSED},
    AccountStatus.INACTIVE: {AccountStatus.ACTIVE, AccountStatus.CLOSED},
    AccountStatus.CLOSED: set(),
}


class Account(Base):
    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(primary_key=True)
    owner_id: Mapped[str] = mapped_column(
        String(64), nullable=False, index=True
    )
    dashboard_id: Mapped[str | None] = mapped_column(
        String(64), nullable=True, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    account_type: Mapped[AccountType] = mapped_column(
        SAEnum(
            AccountType,
            name="account_type_enum",
            create_constraint=True,
        ),
        nullable=False,
    )
    status: Mapped[AccountStatus] = mapped_column(
        SAEnum(
            AccountStatus,
            name="account_status_enum",
            create_constraint=True,
        ),
        nullable=False,
        default=AccountStatus.ACTIVE,
    )
    currency: Mapped[str] = mapped_column(
        String(3), nullable=False, default="BRL"
    )
    initial_balance: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    current_balance: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    available_balance: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    credit_limit: Mapped[Decimal | None] = mapped_column(
        Numeric(19, 4), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    @property
    def is_credit_card(self) -> bool:
        return self.account_type == AccountType.CREDIT_CARD

    def can_transition_to(self, new_status: AccountStatus) -> bool:
        return new_status in STATUS_TRANSITIONS.get(self.status, set())

    def available_for(self, current_balance: Decimal) -> Decimal:
        """Available balance that corresponds to a given current balance."""
        if self.is_credit_card:
            return current_balance + (self.credit_limit or Decimal("0"))
        return current_balance

    def __repr__(self) -> str:
        return (
            f"<Account {self.id} {self.name!r} "
            f"{self.account_type.value} {self.current_balance}>"
        )
