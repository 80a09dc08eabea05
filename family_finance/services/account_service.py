"""
Account service — the account directory.

Owns account records and their stored balances. Other services
ask it to look accounts up and to move balances; nothing else
writes to the accounts table.

Balances change in two ways:
- adjust_balance applies a delta as a single SQL increment,
  inside whatever transaction the caller has open
- recalculate_balance rebuilds both balances from the ledger,
  for reconciliation
"""

import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from family_finance.exceptions import NotFoundError, ValidationError
from family_finance.models.account import Account
from family_finance.models.audit_log import AuditLog
from family_finance.schemas.account import (
    AccountCreate,
    AccountStatusUpdate,
    ReconcileRequest,
    ReconciliationResult,
)
from family_finance.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)

RECONCILE_TOLERANCE = Decimal("0.01")


class AccountService:

    def __init__(self, db: Session):
        self.db = db
        self.ledger_service = LedgerService(db)

    def _scoped(self, owner_id: str, dashboard_id: str | None) -> list:
        conditions = [Account.owner_id == owner_id]
        if dashboard_id is not None:
            conditions.append(Account.dashboard_id == dashboard_id)
        return conditions

    def create_account(
        self,
        request: AccountCreate,
        owner_id: str,
        dashboard_id: str | None = None,
    ) -> Account:
        """
        Create a new account.

        The current balance starts at the initial balance and the
        available balance follows the account type's rule.
        """
        account = Account(
            owner_id=owner_id,
            dashboard_id=dashboard_id,
            name=request.name,
            account_type=request.account_type,
            currency=request.currency,
            initial_balance=request.initial_balance,
            current_balance=request.initial_balance,
            credit_limit=request.credit_limit,
        )
        account.available_balance = account.available_for(request.initial_balance)
        self.db.add(account)
        self.db.flush()

        logger.info(
            "Account %s created for user %s (%s)",
            account.id, owner_id, account.account_type.value,
        )
        return account

    def get_account(
        self,
        account_id: int,
        owner_id: str,
        dashboard_id: str | None = None,
    ) -> Account:
        """Get an account owned by the caller, or raise NotFoundError."""
        account = self.db.execute(
            select(Account).where(
                Account.id == account_id,
                *self._scoped(owner_id, dashboard_id),
            )
        ).scalar_one_or_none()

        if not account:
            raise NotFoundError(f"Account {account_id}")
        return account

    def change_status(
        self,
        account_id: int,
        request: AccountStatusUpdate,
        owner_id: str,
        dashboard_id: str | None = None,
    ) -> Account:
        """
        Move an account to a new status.

        Only INACTIVE <-> ACTIVE and any -> CLOSED are allowed.
        Transfers require both accounts to be ACTIVE. The caller
        commits.
        """
        account = self.get_account(account_id, owner_id, dashboard_id)
        if not account.can_transition_to(request.new_status):
            raise ValidationError(
                f"Cannot transition from {account.status.value} "
                f"to {request.new_status.value}",
                details={
                    "status": account.status.value,
                    "new_status": request.new_status.value,
                },
            )

        old_status = account.status
        account.status = request.new_status
        self.db.flush()

        logger.info(
            "Account %s status %s -> %s",
            account.id, old_status.value, account.status.value,
        )
        return account

    def list_accounts(
        self,
        owner_id: str,
        dashboard_id: str | None = None,
    ) -> list[Account]:
        """Get all accounts for a user."""
        accounts = self.db.execute(
            select(Account)
            .where(*self._scoped(owner_id, dashboard_id))
            .order_by(Account.id)
        ).scalars().all()
        return list(accounts)

    def lock_accounts(
        self,
        account_ids: list[int],
        owner_id: str,
        dashboard_id: str | None = None,
    ) -> dict[int, Account]:
        """
        Row-lock accounts for the rest of the current transaction.

        Locks are always taken in ascending id order, whichever
        side of a transfer an account is on, so two transfers
        running in opposite directions cannot deadlock.
        """
        locked: dict[int, Account] = {}
        for account_id in sorted(set(account_ids)):
            account = self.db.execute(
                select(Account)
                .where(
                    Account.id == account_id,
                    *self._scoped(owner_id, dashboard_id),
                )
                .with_for_update()
                .execution_options(populate_existing=True)
            ).scalar_one_or_none()
            if not account:
                raise NotFoundError(f"Account {account_id}")
            locked[account_id] = account
        return locked

    def adjust_balance(self, account_id: int, delta: Decimal) -> Account:
        """
        Move both balances of an account by delta.

        The increment happens in SQL (balance = balance + delta),
        never as read-modify-write in Python, so concurrent
        adjustments to the same row cannot lose an update. The
        caller commits.
        """
        self.db.flush()
        self.db.execute(
            update(Account)
            .where(Account.id == account_id)
            .values(
                current_balance=Account.current_balance + delta,
                available_balance=Account.available_balance + delta,
            )
            .execution_options(synchronize_session=False)
        )
        account = self.db.get(Account, account_id)
        if account is None:
            raise NotFoundError(f"Account {account_id}")
        self.db.refresh(account)
        return account

    def recalculate_balance(
        self,
        account_id: int,
        owner_id: str,
        dashboard_id: str | None = None,
    ) -> Account:
        """
        Rebuild an account's balances from its live ledger entries.

        current = initial balance + credits - debits. The result
        depends only on the ledger, so running it again changes
        nothing. The caller commits.
        """
        account = self.lock_accounts([account_id], owner_id, dashboard_id)[account_id]

        old_balance = account.current_balance
        new_balance = (
            account.initial_balance
            + self.ledger_service.get_signed_total(account.id)
        )
        account.current_balance = new_balance
        account.available_balance = account.available_for(new_balance)

        self.db.add(AuditLog(
            event_type="BALANCE_RECALCULATED",
            entity_id=account.id,
            owner_id=owner_id,
            details={
                "old_balance": str(old_balance),
                "new_balance": str(new_balance),
            },
        ))
        self.db.flush()

        if old_balance != new_balance:
            logger.warning(
                "Account %s balance drifted: stored=%s ledger=%s",
                account.id, old_balance, new_balance,
            )
        return account

    def reconcile_account(
        self,
        account_id: int,
        request: ReconcileRequest,
        owner_id: str,
        dashboard_id: str | None = None,
    ) -> ReconciliationResult:
        """
        Compare the ledger balance with a bank statement balance.

        Recalculates first, so the stored balance is repaired as a
        side effect. Differences under one cent count as reconciled.
        The caller commits.
        """
        account = self.recalculate_balance(account_id, owner_id, dashboard_id)
        difference = account.current_balance - request.statement_balance
        is_reconciled = abs(difference) < RECONCILE_TOLERANCE

        logger.info(
            "Account %s reconciled: calculated=%s statement=%s difference=%s ok=%s",
            account.id, account.current_balance, request.statement_balance,
            difference, is_reconciled,
        )
        return ReconciliationResult(
            account_id=account.id,
            calculated_balance=account.current_balance,
            statement_balance=request.statement_balance,
            difference=difference,
            is_reconciled=is_reconciled,
            reconciled_at=datetime.utcnow(),
            notes=request.notes,
        )
