"""
Ledger service — persistence of ledger entries.

This service owns the ledger_entries table:
1. Entries are created one at a time and linked afterwards
2. Entries are never physically deleted, only tombstoned
3. Every read is scoped to the owning user (and dashboard)

It never commits. The caller owns the transaction boundary, so
several ledger calls and balance updates can form one atomic
unit of work.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import ColumnElement, select, update, func
from sqlalchemy.orm import Session, joinedload

from family_finance.models.ledger_entry import LedgerEntry
from family_finance.models.enums import EntryType, EntryStatus
from family_finance.schemas.ledger import LedgerEntryCreate


def owner_scope(owner_id: str, dashboard_id: str | None = None) -> list[ColumnElement[bool]]:
    """Conditions restricting entries to one owner and, optionally, one dashboard."""
    conditions = [LedgerEntry.owner_id == owner_id]
    if dashboard_id is not None:
        conditions.append(LedgerEntry.dashboard_id == dashboard_id)
    return conditions


class LedgerService:
    """
    All ledger entry reads and writes pass through this service.

    The service takes a database session as a constructor
    argument. This means the caller controls the transaction
    boundary — they decide when to commit or rollback.
    """

    def __init__(self, db: Session):
        self.db = db

    def create_entry(self, request: LedgerEntryCreate) -> LedgerEntry:
        """Insert one entry and flush so its id is available."""
        entry = LedgerEntry(**request.model_dump())
        self.db.add(entry)
        self.db.flush()
        return entry

    def link_entry(self, entry: LedgerEntry, linked_entry_id: int) -> LedgerEntry:
        """Point an entry at its partner. Used once, to close a pair."""
        entry.linked_entry_id = linked_entry_id
        self.db.flush()
        return entry

    def find_entry(
        self,
        entry_id: int,
        owner_id: str,
        dashboard_id: str | None = None,
        category: str | None = None,
    ) -> LedgerEntry | None:
        """
        Load one live entry owned by the caller.

        The linked entry and the accounts on both sides are loaded
        in the same query, so building a transfer from the result
        needs no further round trips.
        """
        return self.db.execute(
            select(LedgerEntry)
            .options(
                joinedload(LedgerEntry.account),
                joinedload(LedgerEntry.linked_entry).joinedload(
                    LedgerEntry.account
                ),
            )
            .where(
                LedgerEntry.id == entry_id,
                LedgerEntry.status == EntryStatus.ACTIVE,
                *owner_scope(owner_id, dashboard_id),
                *([LedgerEntry.category == category] if category else []),
            )
        ).unique().scalar_one_or_none()

    def find_entries(
        self,
        conditions: list[ColumnElement[bool]],
        page: int = 1,
        limit: int = 50,
        order_by: list | None = None,
    ) -> tuple[list[LedgerEntry], int]:
        """
        Return one page of entries matching conditions, plus the total.

        The page and the count are built from the same condition
        list, so total always counts exactly the rows that paging
        walks through.
        """
        total = self.db.execute(
            select(func.count()).select_from(LedgerEntry).where(*conditions)
        ).scalar_one()

        stmt = (
            select(LedgerEntry)
            .options(
                joinedload(LedgerEntry.account),
                joinedload(LedgerEntry.linked_entry).joinedload(
                    LedgerEntry.account
                ),
            )
            .where(*conditions)
            .order_by(*(order_by or [LedgerEntry.id]))
            .offset((page - 1) * limit)
            .limit(limit)
        )
        entries = self.db.execute(stmt).unique().scalars().all()
        return list(entries), total

    def soft_delete_entries(
        self,
        entry_ids: list[int],
        owner_id: str,
        deleted_by: str,
        dashboard_id: str | None = None,
    ) -> int:
        """
        Tombstone live entries and return how many rows changed.

        Only ACTIVE rows are touched, so a caller that expects N
        rows and gets fewer knows someone else got there first.
        """
        result = self.db.execute(
            update(LedgerEntry)
            .where(
                LedgerEntry.id.in_(entry_ids),
                LedgerEntry.status == EntryStatus.ACTIVE,
                *owner_scope(owner_id, dashboard_id),
            )
            .values(
                status=EntryStatus.DELETED,
                deleted_at=datetime.utcnow(),
                deleted_by=deleted_by,
            )
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    def get_signed_total(self, account_id: int) -> Decimal:
        """
        Sum of an account's live entries: credits minus debits.

        Money coming into an account is a CREDIT on that account,
        money leaving it is a DEBIT.
        """
        totals = dict(
            self.db.execute(
                select(
                    LedgerEntry.entry_type,
                    func.coalesce(func.sum(LedgerEntry.amount), 0),
                )
                .where(
                    LedgerEntry.account_id == account_id,
                    LedgerEntry.status == EntryStatus.ACTIVE,
                )
                .group_by(LedgerEntry.entry_type)
            ).all()
        )
        credits = Decimal(str(totals.get(EntryType.CREDIT, 0)))
        debits = Decimal(str(totals.get(EntryType.DEBIT, 0)))
        return credits - debits

    def get_entries_by_account(self, account_id: int) -> list[LedgerEntry]:
        """Return all live entries for an account, newest first."""
        entries = self.db.execute(
            select(LedgerEntry)
            .where(
                LedgerEntry.account_id == account_id,
                LedgerEntry.status == EntryStatus.ACTIVE,
            )
            .order_by(LedgerEntry.date.desc(), LedgerEntry.id.desc())
        ).scalars().all()
        return list(entries)
