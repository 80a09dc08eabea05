"""
Comprehensive tests for the AccountService.
"""

from decimal import Decimal

import pydantic
import pytest
from sqlalchemy import select

from family_finance.exceptions import NotFoundError, ValidationError
from family_finance.models.account import Account
from family_finance.models.audit_log import AuditLog
from family_finance.models.enums import AccountStatus, AccountType
from family_finance.schemas.account import (
    AccountCreate,
    AccountStatusUpdate,
    ReconcileRequest,
)
from family_finance.schemas.transfer import TransferCreate
from family_finance.services.account_service import AccountService
from family_finance.services.transfer_service import TransferService

OWNER = "user-1"


# --- Create Tests ---

class TestCreateAccount:

    def test_create_account_succeeds(self, db_session):
        service = AccountService(db_session)
        account = service.create_account(AccountCreate(
            name="  Main checking  ",
            account_type=AccountType.CHECKING,
            initial_balance=Decimal("150.00"),
        ), OWNER)
        db_session.commit()

        assert account.id is not None
        assert account.name == "Main checking"
        assert account.status == AccountStatus.ACTIVE
        assert account.current_balance == Decimal("150.00")
        assert account.available_balance == Decimal("150.00")

    def test_credit_card_available_includes_limit(self, db_session):
        service = AccountService(db_session)
        account = service.create_account(AccountCreate(
            name="Card",
            account_type=AccountType.CREDIT_CARD,
            initial_balance=Decimal("-250.00"),
            credit_limit=Decimal("1000.00"),
        ), OWNER)
        db_session.commit()

        assert account.current_balance == Decimal("-250.00")
        assert account.available_balance == Decimal("750.00")

    def test_credit_card_requires_limit(self):
        with pytest.raises(pydantic.ValidationError, match="credit_limit"):
            AccountCreate(name="Card", account_type=AccountType.CREDIT_CARD)

    def test_currency_is_uppercased(self):
        request = AccountCreate(
            name="Euro", account_type=AccountType.SAVINGS, currency="eur"
        )
        assert request.currency == "EUR"


# --- Lookup Tests ---

class TestGetAccount:

    def test_get_own_account(self, db_session, make_account):
        account = make_account("Wallet", "10.00")

        found = AccountService(db_session).get_account(account.id, OWNER)

        assert found.name == "Wallet"

    def test_other_users_account_not_found(self, db_session, make_account):
        account = make_account("Wallet", "10.00")

        with pytest.raises(NotFoundError, match=f"Account {account.id}"):
            AccountService(db_session).get_account(account.id, "user-2")

    def test_dashboard_scope(self, db_session, make_account):
        account = make_account("Wallet", "10.00", dashboard_id="home")
        service = AccountService(db_session)

        assert service.get_account(account.id, OWNER, "home").id == account.id
        with pytest.raises(NotFoundError):
            service.get_account(account.id, OWNER, "work")

    def test_list_accounts_only_returns_owned(self, db_session, make_account):
        make_account("Alpha")
        make_account("Bravo")
        make_account("Charlie", owner_id="user-2")

        accounts = AccountService(db_session).list_accounts(OWNER)

        assert [a.name for a in accounts] == ["Alpha", "Bravo"]


# --- Status Tests ---

class TestChangeStatus:

    @pytest.mark.parametrize("current, new", [
        (AccountStatus.ACTIVE, AccountStatus.INACTIVE),
        (AccountStatus.INACTIVE, AccountStatus.ACTIVE),
        (AccountStatus.ACTIVE, AccountStatus.CLOSED),
        (AccountStatus.INACTIVE, AccountStatus.CLOSED),
    ])
    def test_valid_transitions(self, db_session, make_account, current, new):
        account = make_account("Wallet")
        service = AccountService(db_session)
        if current != AccountStatus.ACTIVE:
            service.change_status(account.id, AccountStatusUpdate(new_status=current), OWNER)

        updated = service.change_status(account.id, AccountStatusUpdate(new_status=new), OWNER)
        db_session.commit()

        assert updated.status == new

    @pytest.mark.parametrize("new", [AccountStatus.ACTIVE, AccountStatus.INACTIVE])
    def test_closed_is_terminal(self, db_session, make_account, new):
        account = make_account("Wallet")
        service = AccountService(db_session)
        service.change_status(
            account.id, AccountStatusUpdate(new_status=AccountStatus.CLOSED), OWNER
        )
        db_session.commit()

        with pytest.raises(ValidationError, match="Cannot transition from CLOSED"):
            service.change_status(account.id, AccountStatusUpdate(new_status=new), OWNER)

    def test_other_users_account_not_found(self, db_session, make_account):
        account = make_account("Wallet")

        with pytest.raises(NotFoundError):
            AccountService(db_session).change_status(
                account.id,
                AccountStatusUpdate(new_status=AccountStatus.CLOSED),
                "user-2",
            )


# --- Locking Tests ---

class TestLockAccounts:

    def test_lock_returns_all_accounts(self, db_session, make_account):
        a = make_account("Alpha")
        b = make_account("Bravo")

        locked = AccountService(db_session).lock_accounts([b.id, a.id], OWNER)

        assert set(locked) == {a.id, b.id}

    def test_lock_missing_account_raises(self, db_session, make_account):
        a = make_account("Alpha")

        with pytest.raises(NotFoundError, match="Account 9999"):
            AccountService(db_session).lock_accounts([a.id, 9999], OWNER)


# --- Balance Tests ---

class TestAdjustBalance:

    def test_adjust_moves_both_balances(self, db_session, make_account):
        account = make_account("Alpha", "100.00")
        service = AccountService(db_session)

        updated = service.adjust_balance(account.id, Decimal("-25.50"))
        db_session.commit()

        assert updated.current_balance == Decimal("74.50")
        assert updated.available_balance == Decimal("74.50")

    def test_adjust_credit_card_keeps_limit_offset(self, db_session, make_account):
        card = make_account(
            "Card", "0.00",
            account_type=AccountType.CREDIT_CARD, credit_limit="500.00",
        )
        service = AccountService(db_session)

        updated = service.adjust_balance(card.id, Decimal("-120.00"))
        db_session.commit()

        assert updated.current_balance == Decimal("-120.00")
        assert updated.available_balance == Decimal("380.00")

    def test_adjust_missing_account(self, db_session):
        with pytest.raises(NotFoundError):
            AccountService(db_session).adjust_balance(9999, Decimal("1.00"))


class TestRecalculateBalance:

    def _transfer(self, db_session, source, destination, amount):
        return TransferService(db_session).create_transfer(TransferCreate(
            from_account_id=source.id,
            to_account_id=destination.id,
            amount=Decimal(amount),
        ), OWNER)

    def test_recalculate_matches_incremental_balance(self, db_session, make_account):
        a = make_account("Alpha", "100.00")
        b = make_account("Bravo", "0.00")
        self._transfer(db_session, a, b, "40.00")
        service = AccountService(db_session)

        recalculated = service.recalculate_balance(a.id, OWNER)
        db_session.commit()

        assert recalculated.current_balance == Decimal("60.00")

    def test_recalculate_is_idempotent(self, db_session, make_account):
        a = make_account("Alpha", "100.00")
        b = make_account("Bravo", "0.00")
        self._transfer(db_session, a, b, "40.00")
        service = AccountService(db_session)

        first = service.recalculate_balance(b.id, OWNER).current_balance
        db_session.commit()
        second = service.recalculate_balance(b.id, OWNER).current_balance
        db_session.commit()

        assert first == second == Decimal("40.00")

    def test_recalculate_repairs_drift(self, db_session, make_account):
        card = make_account(
            "Card", "0.00",
            account_type=AccountType.CREDIT_CARD, credit_limit="1000.00",
        )
        checking = make_account("Checking", "0.00")
        self._transfer(db_session, card, checking, "200.00")

        # Simulate a stale stored balance
        stored = db_session.get(Account, card.id)
        stored.current_balance = Decimal("999.00")
        stored.available_balance = Decimal("999.00")
        db_session.commit()

        repaired = AccountService(db_session).recalculate_balance(card.id, OWNER)
        db_session.commit()

        assert repaired.current_balance == Decimal("-200.00")
        assert repaired.available_balance == Decimal("800.00")

    def test_recalculate_is_audited(self, db_session, make_account):
        a = make_account("Alpha", "100.00")

        AccountService(db_session).recalculate_balance(a.id, OWNER)
        db_session.commit()

        audit = db_session.execute(
            select(AuditLog).where(AuditLog.event_type == "BALANCE_RECALCULATED")
        ).scalar_one()
        assert audit.entity_id == a.id

    def test_recalculate_other_users_account(self, db_session, make_account):
        a = make_account("Alpha", "100.00")

        with pytest.raises(NotFoundError):
            AccountService(db_session).recalculate_balance(a.id, "user-2")


class TestReconcileAccount:

    def test_matching_statement_is_reconciled(self, db_session, make_account):
        a = make_account("Alpha", "100.00")
        b = make_account("Bravo", "0.00")
        TransferService(db_session).create_transfer(TransferCreate(
            from_account_id=a.id, to_account_id=b.id, amount=Decimal("40.00"),
        ), OWNER)

        result = AccountService(db_session).reconcile_account(
            a.id, ReconcileRequest(statement_balance=Decimal("60.00"), notes="May"), OWNER
        )
        db_session.commit()

        assert result.is_reconciled is True
        assert result.calculated_balance == Decimal("60.00")
        assert result.difference == Decimal("0")
        assert result.notes == "May"

    def test_sub_cent_difference_is_tolerated(self, db_session, make_account):
        a = make_account("Alpha", "100.004")

        result = AccountService(db_session).reconcile_account(
            a.id, ReconcileRequest(statement_balance=Decimal("100.00")), OWNER
        )

        assert result.is_reconciled is True

    def test_one_cent_difference_is_reported(self, db_session, make_account):
        a = make_account("Alpha", "100.00")

        result = AccountService(db_session).reconcile_account(
            a.id, ReconcileRequest(statement_balance=Decimal("99.99")), OWNER
        )

        assert result.is_reconciled is False
        assert result.difference == Decimal("0.01")
