"""
Error taxonomy for the wallet ledger.

Every error raised by the stores and the transfer engine derives
from WalletError. The ``recorded`` flag tells the caller whether
the attempt left a ledger record behind: it is False for every
rejection ("nothing happened") and True only for a simulated
settlement failure, which is recorded but moves no money.
"""


class WalletError(Exception):
    """Base class for all wallet ledger errors."""

    recorded = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidAmountError(WalletError):
    """Amount is non-positive, non-finite, too precise, or too large."""


class InvalidDisplayNameError(WalletError):
    """Display name has no characters left to build a handle from."""


class AccountNotFoundError(WalletError):
    """An account id or handle did not resolve to an account."""


class SenderNotFoundError(AccountNotFoundError):
    """The sending account of a transfer does not exist."""


class ReceiverNotFoundError(AccountNotFoundError):
    """No account matches the receiver handle of a transfer."""


class SelfTransferError(WalletError):
    """Sender and receiver resolve to the same account."""


class InsufficientFundsError(WalletError):
    """A debit would take the balance below zero."""


class DuplicateHandleError(WalletError):
    """Another account already owns the derived payment handle."""


class DuplicateIdentityError(WalletError):
    """Another account already uses this email address."""


class DuplicateTransactionIdError(WalletError):
    """The ledger already holds a record with this transaction id."""

    def __init__(self, transaction_id: str):
        super().__init__(f"Duplicate transaction id {transaction_id}")
        self.transaction_id = transaction_id


class SimulatedFailureError(WalletError):
    """
    The settlement rail rejected the transfer.

    A FAILED record was written under ``transaction_id`` and no
    balance changed. Retrying means submitting a new transfer.
    """

    recorded = True

    def __init__(self, transaction_id: str):
        super().__init__("Payment Failed (Simulated)")
        self.transaction_id = transaction_id


class EngineUnavailableError(WalletError):
    """Retries were exhausted or the store was unreachable; nothing was committed."""
