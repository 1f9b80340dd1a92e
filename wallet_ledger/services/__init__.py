"""Business logic services."""

from wallet_ledger.services.account_service import AccountService
from wallet_ledger.services.ledger_service import LedgerService
from wallet_ledger.services.transfer_engine import TransferEngine, Receipt
from wallet_ledger.services.query_service import QueryService

__all__ = [
    "AccountService",
    "LedgerService",
    "TransferEngine",
    "Receipt",
    "QueryService",
]
