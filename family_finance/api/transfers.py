"""
Transfer API endpoints.

The layer is thin: request shape is validated by the schemas,
TransferService owns the transaction, and typed errors are
rendered by the handlers in api/errors.py.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from family_finance.api.deps import get_current_user_id, get_dashboard_id
from family_finance.database import get_db
from family_finance.services.transfer_service import TransferService
from family_finance.schemas.transfer import (
    TransferCreate,
    TransferPage,
    TransferQuery,
    TransferResponse,
)

router = APIRouter(prefix="/transfers", tags=["Transfers"])


@router.post("", response_model=TransferResponse, status_code=201)
def create_transfer(
    request: TransferCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    dashboard_id: str | None = Depends(get_dashboard_id),
):
    """Transfer money between two of the caller's accounts."""
    return TransferService(db).create_transfer(request, user_id, dashboard_id)


@router.get("", response_model=TransferPage)
def list_transfers(
    query: Annotated[TransferQuery, Query()],
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    dashboard_id: str | None = Depends(get_dashboard_id),
):
    """List transfers with filters, pagination and ordering."""
    return TransferService(db).list_transfers(query, user_id, dashboard_id)


@router.get("/{transfer_id}", response_model=TransferResponse)
def get_transfer(
    transfer_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    dashboard_id: str | None = Depends(get_dashboard_id),
):
    """Get a transfer by the id of either of its entries."""
    return TransferService(db).get_transfer(transfer_id, user_id, dashboard_id)


@router.delete("/{transfer_id}", status_code=204)
def delete_transfer(
    transfer_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    dashboard_id: str | None = Depends(get_dashboard_id),
):
    """Cancel a transfer and restore both account balances."""
    TransferService(db).delete_transfer(transfer_id, user_id, dashboard_id)
    return Response(status_code=204)
