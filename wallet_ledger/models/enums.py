"""
Shared enumerations for database models.

Mapped to database enums so an invalid kind or outcome is
rejected by the database, not just by Python validation.
"""

import enum


class TransactionKind(str, enum.Enum):
    """What a ledger record represents."""
    DEPOSIT = "DEPOSIT"
    TRANSFER = "TRANSFER"


class TransactionOutcome(str, enum.Enum):
    """Terminal result of a recorded attempt."""
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


class Direction(str, enum.Enum):
    """Which way value moved, seen from one account."""
    CREDIT = "CREDIT"
    DEBIT = "DEBIT"
