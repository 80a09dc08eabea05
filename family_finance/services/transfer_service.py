"""
Transfer service — moving money between a user's accounts.

A transfer is two ledger entries:

    DEBIT  on the source account       (money leaves)
    CREDIT on the destination account  (money arrives)

Both entries point at each other through linked_entry_id. They
are created, and later cancelled, together with the matching
balance changes in one database transaction:

1. Lock both accounts in ascending id order
2. Validate business rules (sufficient balance on the source)
3. Insert the DEBIT, insert the CREDIT already linked to it,
   then patch the DEBIT's link (neither id exists beforehand)
4. Apply the balance deltas as SQL increments
5. Write the audit row and commit

Any failure rolls everything back, so no half-created pair or
skewed balance is ever visible.
"""

import logging
from contextlib import contextmanager
from decimal import Decimal
from typing import Any

from sqlalchemy import or_
from sqlalchemy.orm import Session

from family_finance.exceptions import (
    FinanceError,
    InternalServerError,
    NotFoundError,
    ValidationError,
)
from family_finance.models.account import Account
from family_finance.models.audit_log import AuditLog
from family_finance.models.enums import AccountStatus, EntryType, EntryStatus
from family_finance.models.ledger_entry import LedgerEntry, TRANSFER_CATEGORY
from family_finance.schemas.ledger import LedgerEntryCreate
from family_finance.schemas.transfer import (
    TransferCreate,
    TransferEntrySummary,
    TransferPage,
    TransferQuery,
    TransferResponse,
)
from family_finance.services.account_service import AccountService
from family_finance.services.ledger_service import LedgerService, owner_scope

logger = logging.getLogger(__name__)


class TransferService:

    def __init__(self, db: Session):
        self.db = db
        self.ledger_service = LedgerService(db)
        self.account_service = AccountService(db)

    @contextmanager
    def _unit_of_work(
        self,
        action: str,
        owner_id: str,
        payload: dict[str, Any],
        commit: bool = True,
    ):
        """
        Run a block as one all-or-nothing database transaction.

        Domain errors roll back and pass through unchanged. Anything
        else rolls back, is logged with the user and payload, and
        reaches the caller only as an opaque InternalServerError.
        """
        try:
            yield
            if commit:
                self.db.commit()
        except FinanceError:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.exception(
                "Transfer %s failed for user %s, payload=%s",
                action, owner_id, payload,
            )
            raise InternalServerError("Could not process transfer") from e

    def _audit(
        self, event_type: str, entity_id: int, owner_id: str, details: dict
    ) -> None:
        self.db.add(AuditLog(
            event_type=event_type,
            entity_id=entity_id,
            owner_id=owner_id,
            details=details,
        ))
        self.db.flush()

    def _apply_deltas(self, deltas: dict[int, Decimal]) -> None:
        # Same ascending order as the row locks
        for account_id in sorted(deltas):
            self.account_service.adjust_balance(account_id, deltas[account_id])

    @staticmethod
    def _validate_pair(source: Account, destination: Account) -> None:
        """Both accounts must be active, share a dashboard and a currency."""
        for account in (source, destination):
            if account.status != AccountStatus.ACTIVE:
                raise ValidationError(
                    f"Account {account.id} is not active",
                    details={"account_id": account.id, "status": account.status.value},
                )
        if source.dashboard_id != destination.dashboard_id:
            raise ValidationError(
                "Source and destination accounts belong to different dashboards",
                details={
                    "from_dashboard_id": source.dashboard_id,
                    "to_dashboard_id": destination.dashboard_id,
                },
            )
        if source.currency != destination.currency:
            raise ValidationError(
                "Source and destination accounts use different currencies",
                details={
                    "from_currency": source.currency,
                    "to_currency": destination.currency,
                },
            )

    @staticmethod
    def _split_pair(entry: LedgerEntry) -> tuple[LedgerEntry, LedgerEntry]:
        """
        Return (debit, credit) for a transfer entry and its partner.

        Sides are decided by entry_type, not by which entry was
        looked up, so either id of a pair resolves to the same
        transfer. A partner that is missing, deleted, of the same
        direction, or not pointing back means there is no transfer.
        """
        linked = entry.linked_entry
        if (
            linked is None
            or not linked.is_active
            or linked.linked_entry_id != entry.id
            or linked.entry_type != entry.entry_type.opposite
        ):
            raise NotFoundError("Transfer")

        if entry.entry_type == EntryType.DEBIT:
            return entry, linked
        return linked, entry

    @staticmethod
    def _to_response(debit: LedgerEntry, credit: LedgerEntry) -> TransferResponse:
        return TransferResponse(
            id=debit.id,
            from_account_id=debit.account_id,
            to_account_id=credit.account_id,
            from_account_name=debit.account.name,
            to_account_name=credit.account.name,
            amount=debit.amount,
            date=debit.date,
            description=debit.description,
            notes=debit.notes,
            from_entry=TransferEntrySummary.model_validate(debit),
            to_entry=TransferEntrySummary.model_validate(credit),
            created_at=debit.created_at,
        )

    def create_transfer(
        self,
        request: TransferCreate,
        owner_id: str,
        dashboard_id: str | None = None,
    ) -> TransferResponse:
        """
        Transfer money from one of the caller's accounts to another.

        Raises ValidationError for a self-transfer, an inactive
        account, accounts in different dashboards or currencies, or
        insufficient balance. NotFoundError if either account is
        missing or not the caller's, InternalServerError on
        persistence failure.
        Credit card sources may go below zero.
        """
        if request.from_account_id == request.to_account_id:
            raise ValidationError(
                "Source and destination accounts must be different",
                details={"field": "to_account_id"},
            )

        logger.info(
            "Creating transfer for user %s: %s -> %s amount=%s",
            owner_id, request.from_account_id, request.to_account_id,
            request.amount,
        )

        payload = request.model_dump(mode="json")
        with self._unit_of_work("create", owner_id, payload):
            accounts = self.account_service.lock_accounts(
                [request.from_account_id, request.to_account_id],
                owner_id,
                dashboard_id,
            )
            source = accounts[request.from_account_id]
            destination = accounts[request.to_account_id]
            self._validate_pair(source, destination)

            if not source.is_credit_card and source.current_balance < request.amount:
                logger.warning(
                    "Insufficient balance on account %s: available=%s required=%s",
                    source.id, source.current_balance, request.amount,
                )
                raise ValidationError(
                    "Insufficient balance in source account",
                    details={
                        "available": str(source.current_balance),
                        "required": str(request.amount),
                    },
                )

            shared = {
                "date": request.date,
                "category": TRANSFER_CATEGORY,
                "description": request.description,
                "amount": request.amount,
                "owner_id": owner_id,
                # Entries live in the accounts' dashboard, not the caller's filter
                "dashboard_id": source.dashboard_id,
                "notes": request.notes,
            }
            debit = self.ledger_service.create_entry(LedgerEntryCreate(
                entry_type=EntryType.DEBIT,
                subcategory=f"To: {destination.name}",
                account_id=source.id,
                counter_account_id=destination.id,
                **shared,
            ))
            credit = self.ledger_service.create_entry(LedgerEntryCreate(
                entry_type=EntryType.CREDIT,
                subcategory=f"From: {source.name}",
                account_id=destination.id,
                counter_account_id=source.id,
                linked_entry_id=debit.id,
                **shared,
            ))
            self.ledger_service.link_entry(debit, credit.id)

            self._apply_deltas({
                source.id: -request.amount,
                destination.id: request.amount,
            })
            self._audit("TRANSFER_CREATED", debit.id, owner_id, {
                "debit_entry_id": debit.id,
                "credit_entry_id": credit.id,
                **payload,
            })

        logger.info(
            "Transfer %s created for user %s (credit entry %s)",
            debit.id, owner_id, credit.id,
        )
        return self._to_response(debit, credit)

    def get_transfer(
        self,
        transfer_id: int,
        owner_id: str,
        dashboard_id: str | None = None,
    ) -> TransferResponse:
        """Get a live transfer by the id of either of its entries."""
        with self._unit_of_work(
            "get", owner_id, {"transfer_id": transfer_id}, commit=False
        ):
            entry = self.ledger_service.find_entry(
                transfer_id, owner_id, dashboard_id, category=TRANSFER_CATEGORY
            )
            if entry is None:
                raise NotFoundError("Transfer")
            return self._to_response(*self._split_pair(entry))

    def list_transfers(
        self,
        query: TransferQuery,
        owner_id: str,
        dashboard_id: str | None = None,
    ) -> TransferPage:
        """
        List the caller's live transfers, one row per transfer.

        Each transfer is represented by its DEBIT entry, whose
        account is the source and whose counter account is the
        destination. from/to filters are OR-ed; account_id replaces
        them and matches either side.
        """
        conditions = [
            *owner_scope(owner_id, dashboard_id),
            LedgerEntry.status == EntryStatus.ACTIVE,
            LedgerEntry.category == TRANSFER_CATEGORY,
            LedgerEntry.entry_type == EntryType.DEBIT,
            LedgerEntry.linked_entry_id.is_not(None),
        ]

        if query.account_id is not None:
            conditions.append(or_(
                LedgerEntry.account_id == query.account_id,
                LedgerEntry.counter_account_id == query.account_id,
            ))
        else:
            sides = []
            if query.from_account_id is not None:
                sides.append(LedgerEntry.account_id == query.from_account_id)
            if query.to_account_id is not None:
                sides.append(LedgerEntry.counter_account_id == query.to_account_id)
            if sides:
                conditions.append(or_(*sides))

        if query.start_date is not None:
            conditions.append(LedgerEntry.date >= query.start_date)
        if query.end_date is not None:
            conditions.append(LedgerEntry.date <= query.end_date)
        if query.min_amount is not None:
            conditions.append(LedgerEntry.amount >= query.min_amount)
        if query.max_amount is not None:
            conditions.append(LedgerEntry.amount <= query.max_amount)

        sort_column = (
            LedgerEntry.amount if query.sort_by == "amount" else LedgerEntry.date
        )
        if query.sort_order == "asc":
            order_by = [sort_column.asc(), LedgerEntry.id.asc()]
        else:
            order_by = [sort_column.desc(), LedgerEntry.id.desc()]

        with self._unit_of_work(
            "list", owner_id, query.model_dump(mode="json"), commit=False
        ):
            entries, total = self.ledger_service.find_entries(
                conditions, page=query.page, limit=query.limit, order_by=order_by
            )
            data = [self._to_response(*self._split_pair(e)) for e in entries]

        return TransferPage(
            data=data, total=total, page=query.page, limit=query.limit
        )

    def delete_transfer(
        self,
        transfer_id: int,
        owner_id: str,
        dashboard_id: str | None = None,
    ) -> None:
        """
        Cancel a transfer: tombstone both entries, reverse balances.

        The reversal is the exact inverse of creation, so both
        accounts return to their pre-transfer balances. Cancelling
        an already cancelled transfer raises NotFoundError.
        """
        logger.info("Cancelling transfer %s for user %s", transfer_id, owner_id)

        transfer = self.get_transfer(transfer_id, owner_id, dashboard_id)
        entry_ids = [transfer.from_entry.id, transfer.to_entry.id]

        with self._unit_of_work("delete", owner_id, {"transfer_id": transfer_id}):
            self.account_service.lock_accounts(
                [transfer.from_account_id, transfer.to_account_id],
                owner_id,
                dashboard_id,
            )
            changed = self.ledger_service.soft_delete_entries(
                entry_ids, owner_id, deleted_by=owner_id, dashboard_id=dashboard_id
            )
            if changed != len(entry_ids):
                # Cancelled by a concurrent request between lookup and lock
                raise NotFoundError("Transfer")

            self._apply_deltas({
                transfer.from_account_id: transfer.amount,
                transfer.to_account_id: -transfer.amount,
            })
            self._audit("TRANSFER_CANCELLED", transfer.id, owner_id, {
                "entry_ids": entry_ids,
                "amount": str(transfer.amount),
                "from_account_id": transfer.from_account_id,
                "to_account_id": transfer.to_account_id,
            })

        logger.info("Transfer %s cancelled by user %s", transfer.id, owner_id)
