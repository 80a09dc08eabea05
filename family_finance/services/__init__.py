"""Business logic services."""

from family_finance.services.ledger_service import LedgerService
from family_finance.services.account_service import AccountService
from family_finance.services.transfer_service import TransferService

__all__ = ["LedgerService", "AccountService", "TransferService"]
