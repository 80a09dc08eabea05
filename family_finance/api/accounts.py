"""
Account API endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from family_finance.api.deps import get_current_user_id, get_dashboard_id
from family_finance.database import get_db
from family_finance.services.account_service import AccountService
from family_finance.schemas.account import (
    AccountCreate,
    AccountResponse,
    AccountStatusUpdate,
    ReconcileRequest,
    ReconciliationResult,
)
from family_finance.schemas.ledger import LedgerEntryResponse

router = APIRouter(prefix="/accounts", tags=["Accounts"])


@router.post("", response_model=AccountResponse, status_code=201)
def create_account(
    request: AccountCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    dashboard_id: str | None = Depends(get_dashboard_id),
):
    """Create a new account for the caller."""
    service = AccountService(db)
    account = service.create_account(request, user_id, dashboard_id)
    db.commit()
    return account


@router.get("", response_model=list[AccountResponse])
def list_accounts(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    dashboard_id: str | None = Depends(get_dashboard_id),
):
    """List the caller's accounts."""
    return AccountService(db).list_accounts(user_id, dashboard_id)


@router.get("/{account_id}", response_model=AccountResponse)
def get_account(
    account_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    dashboard_id: str | None = Depends(get_dashboard_id),
):
    """Get account details, including stored balances."""
    return AccountService(db).get_account(account_id, user_id, dashboard_id)


@router.patch("/{account_id}/status", response_model=AccountResponse)
def change_account_status(
    account_id: int,
    request: AccountStatusUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    dashboard_id: str | None = Depends(get_dashboard_id),
):
    """Deactivate, reactivate or close an account."""
    service = AccountService(db)
    try:
        account = service.change_status(account_id, request, user_id, dashboard_id)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return account


@router.get("/{account_id}/entries", response_model=list[LedgerEntryResponse])
def get_account_entries(
    account_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    dashboard_id: str | None = Depends(get_dashboard_id),
):
    """Get all live ledger entries for an account, newest first."""
    service = AccountService(db)
    account = service.get_account(account_id, user_id, dashboard_id)
    return service.ledger_service.get_entries_by_account(account.id)


@router.post("/{account_id}/recalculate", response_model=AccountResponse)
def recalculate_balance(
    account_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    dashboard_id: str | None = Depends(get_dashboard_id),
):
    """
    Rebuild the account's balances from its ledger entries.

    Safe to call any number of times.
    """
    service = AccountService(db)
    try:
        account = service.recalculate_balance(account_id, user_id, dashboard_id)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return account


@router.post("/{account_id}/reconcile", response_model=ReconciliationResult)
def reconcile_account(
    account_id: int,
    request: ReconcileRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    dashboard_id: str | None = Depends(get_dashboard_id),
):
    """Check the ledger balance against a bank statement balance."""
    service = AccountService(db)
    try:
        result = service.reconcile_account(account_id, request, user_id, dashboard_id)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return result
