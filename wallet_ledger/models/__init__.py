"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from wallet_ledger.models.base import Base
from wallet_ledger.models.enums import (
    TransactionKind,
    TransactionOutcome,
    Direction,
)
from wallet_ledger.models.account import Account
from wallet_ledger.models.transaction import Transaction

__all__ = [
    "Base",
    "TransactionKind",
    "TransactionOutcome",
    "Direction",
    "Account",
    "Transaction",
]
