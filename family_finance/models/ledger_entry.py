"""
Ledger entry model.

Each entry is one side of a money movement on one account.
A transfer is a pair of entries, a DEBIT on the source account
and a CREDIT on the destination, that point at each other
through linked_entry_id.

Entries are never physically deleted. Cancelling a transfer
flips both entries to DELETED and records who did it and when.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    String, DateTime, Numeric, ForeignKey, Text,
    Enum as SAEnum, Index,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from family_finance.models.base import Base
from family_finance.models.enums import EntryType, EntryStatus


TRANSFER_CATEGORY = "Transfer"


class LedgerEntry(Base):
    """
    A debit or credit entry against an account.

    The pairing invariant (opposite direction, same amount, date
    and owner, mutual links) is enforced by TransferService, not
    by the model. The model is just the data structure.
    """

    __tablename__ = "ledger_entries"
    __table_args__ = (
        Index("ix_ledger_entries_owner_category", "owner_id", "category"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    entry_type: Mapped[EntryType] = mapped_column(
        SAEnum(EntryType, name="entry_type_enum"),
        nullable=False,
    )
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    subcategory: Mapped[str | None] = mapped_column(
        String(150), nullable=True
    )
    description: Mapped[str] = mapped_column(
        String(255), nullable=False
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False
    )
    account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id"), nullable=False, index=True
    )
    counter_account_id: Mapped[int | None] = mapped_column(
        ForeignKey("accounts.id"), nullable=True, index=True
    )
    # Weak reference to the other side of a transfer. Unique so
    # that no entry can be claimed by two partners.
    linked_entry_id: Mapped[int | None] = mapped_column(
        ForeignKey("ledger_entries.id"),
        nullable=True,
        unique=True,
    )
    owner_id: Mapped[str] = mapped_column(
        String(64), nullable=False, index=True
    )
    dashboard_id: Mapped[str | None] = mapped_column(
        String(64), nullable=True, index=True
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[EntryStatus] = mapped_column(
        SAEnum(
            EntryStatus,
            name="entry_status_enum",
            create_constraint=True,
        ),
        nullable=False,
        default=EntryStatus.ACTIVE,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True
    )
    deleted_by: Mapped[str | None] = mapped_column(
        String(64), nullable=True
    )

    # Relationships
    account: Mapped["Account"] = relationship(
        foreign_keys=[account_id]
    )
    linked_entry: Mapped["LedgerEntry | None"] = relationship(
        foreign_keys=[linked_entry_id],
        remote_side=[id],
    )

    @property
    def is_active(self) -> bool:
        return self.status == EntryStatus.ACTIVE

    def __repr__(self) -> str:
        return (
            f"<LedgerEntry {self.id} {self.entry_type.value} "
            f"{self.amount} ({self.status.value})>"
        )
