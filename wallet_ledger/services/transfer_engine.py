"""
Transfer engine: deposits and transfers.

Each operation:
1. Validates the amount (nothing touches storage before this)
2. Resolves the accounts involved
3. Takes the per-account locks in ascending id order
4. Re-reads balances under a row lock and checks funds
5. Mutates balances and appends exactly one ledger record
6. Commits, then releases the locks

A failure anywhere in steps 4-6 rolls the whole unit back, so a
balance never moves without its record and a record is never
written for money that did not move.

Transfers also pass through fault injection: with probability
SIMULATE_FAILURE_RATE the settlement rail "fails", a FAILED
record is written with no balance change, and the caller gets
SimulatedFailureError carrying that record's transaction id.
"""

import logging
import random
from contextlib import contextmanager
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Callable, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from wallet_ledger.config import Settings, get_settings
from wallet_ledger.errors import (
    AccountNotFoundError,
    DuplicateTransactionIdError,
    EngineUnavailableError,
    InsufficientFundsError,
    InvalidAmountError,
    ReceiverNotFoundError,
    SelfTransferError,
    SenderNotFoundError,
    SimulatedFailureError,
)
from wallet_ledger.models.account import Account
from wallet_ledger.models.enums import TransactionKind, TransactionOutcome
from wallet_ledger.models.transaction import Transaction
from wallet_ledger.services.account_service import AccountService
from wallet_ledger.services.identifiers import generate_transaction_id
from wallet_ledger.services.ledger_service import LedgerService
from wallet_ledger.services.locks import AccountLockRegistry, account_locks


logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


class RandomSource(Protocol):
    def random(self) -> float: ...


@dataclass(frozen=True)
class Receipt:
    """Terminal result of a committed deposit or transfer."""
    transaction: Transaction
    balance: Decimal

    @property
    def transaction_id(self) -> str:
        return self.transaction.transaction_id

    @property
    def flagged(self) -> bool:
        return self.transaction.flagged


class TransferEngine:

    def __init__(
        self,
        db: Session,
        settings: Settings | None = None,
        rng: RandomSource | None = None,
        id_factory: Callable[[], str] | None = None,
        locks: AccountLockRegistry | None = None,
    ):
        self.db = db
        self.settings = settings or get_settings()
        self.rng = rng or random.Random()
        self.id_factory = id_factory or generate_transaction_id
        self.locks = locks or account_locks
        self.accounts = AccountService(db, self.settings)
        self.ledger = LedgerService(db)

    # --- Validation ---

    def validate_amount(self, amount) -> Decimal:
        """
        Return amount as a two-place Decimal or raise InvalidAmountError.

        Accepts Decimal, int, float, or a numeric string. Rejects
        bools, NaN and infinities, values <= 0, fractions of a
        cent, and anything above MAX_AMOUNT.
        """
        if isinstance(amount, bool):
            raise InvalidAmountError(f"Invalid amount: {amount!r}")
        try:
            value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
        except (InvalidOperation, ValueError, TypeError):
            raise InvalidAmountError(f"Invalid amount: {amount!r}")

        if not value.is_finite():
            raise InvalidAmountError(f"Amount must be finite, got {amount!r}")
        if value <= 0:
            raise InvalidAmountError("Amount must be positive")
        if value > self.settings.MAX_AMOUNT:
            raise InvalidAmountError(
                f"Amount exceeds the maximum of {self.settings.MAX_AMOUNT}"
            )
        if value != value.quantize(CENT):
            raise InvalidAmountError("Amount cannot have more than 2 decimal places")
        return value.quantize(CENT)

    def is_flagged(self, amount: Decimal) -> bool:
        return amount > self.settings.LARGE_TRANSFER_THRESHOLD

    def _settlement_fails(self) -> bool:
        return self.rng.random() < self.settings.SIMULATE_FAILURE_RATE

    @contextmanager
    def _store_errors(self):
        """Surface store failures outside an atomic unit as EngineUnavailableError."""
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("wallet.store.error")
            raise EngineUnavailableError("Ledger store is unavailable") from e

    # --- Atomic unit ---

    def _commit_unit(
        self,
        account_ids: tuple[int, ...],
        apply: Callable[[str], Receipt],
    ) -> Receipt:
        """
        Run apply(transaction_id) and commit it while holding the
        locks of account_ids.

        A transaction id collision rolls back and retries with a
        fresh id, up to TXN_ID_MAX_ATTEMPTS. Store errors roll back
        and surface as EngineUnavailableError. Everything else
        rolls back and propagates unchanged.
        """
        attempts = max(1, self.settings.TXN_ID_MAX_ATTEMPTS)
        for attempt in range(1, attempts + 1):
            transaction_id = self.id_factory()
            try:
                with self.locks.hold(*account_ids):
                    try:
                        receipt = apply(transaction_id)
                        self.db.commit()
                    except Exception:
                        self.db.rollback()
                        raise
                return receipt
            except DuplicateTransactionIdError:
                logger.warning(
                    "wallet.transaction_id.collision",
                    extra={"transaction_id": transaction_id, "attempt": attempt},
                )
            except SQLAlchemyError as e:
                logger.exception(
                    "wallet.store.error",
                    extra={"transaction_id": transaction_id},
                )
                raise EngineUnavailableError("Ledger store is unavailable") from e

        raise EngineUnavailableError(
            f"Could not allocate a unique transaction id after {attempts} attempts"
        )

    # --- Operations ---

    def account_for(self, external_id) -> Account:
        """Resolve a wallet by its public id."""
        with self._store_errors():
            return self.accounts.get_by_external_id(external_id)

    def deposit(self, account_id: int, amount) -> Receipt:
        """
        Add money to an account's wallet.

        Writes one SUCCESS/DEPOSIT record whose sender and
        receiver are both the account.
        """
        value = self.validate_amount(amount)
        with self._store_errors():
            return self._deposit(account_id, value)

    def _deposit(self, account_id: int, value: Decimal) -> Receipt:
        account = self.accounts.get(account_id)
        flagged = self.is_flagged(value)

        def apply(transaction_id: str) -> Receipt:
            balance = self.accounts.adjust_balance(account.id, value)
            record = self.ledger.append(Transaction(
                transaction_id=transaction_id,
                sender_id=account.id,
                receiver_id=account.id,
                amount=value,
                kind=TransactionKind.DEPOSIT,
                outcome=TransactionOutcome.SUCCESS,
                description="Added money to wallet",
                flagged=flagged,
            ))
            return Receipt(transaction=record, balance=balance)

        receipt = self._commit_unit((account.id,), apply)
        logger.info(
            "wallet.deposit.succeeded",
            extra={
                "transaction_id": receipt.transaction_id,
                "account_id": account.id,
                "amount": str(value),
                "balance": str(receipt.balance),
                "flagged": flagged,
            },
        )
        return receipt

    def transfer(self, sender_id: int, receiver_handle: str, amount) -> Receipt:
        """
        Send money from one account to the account owning a handle.

        Returns a Receipt for a settled transfer. Raises
        SimulatedFailureError after recording a FAILED attempt,
        and a rejection error (nothing recorded) otherwise.
        """
        value = self.validate_amount(amount)
        with self._store_errors():
            return self._transfer(sender_id, receiver_handle, value)

    def _transfer(self, sender_id: int, receiver_handle: str, value: Decimal) -> Receipt:
        try:
            sender = self.accounts.get(sender_id)
        except AccountNotFoundError:
            raise SenderNotFoundError("Sender not found")
        try:
            receiver = self.accounts.find_by_handle(receiver_handle)
        except AccountNotFoundError:
            raise ReceiverNotFoundError("Receiver not found")

        if sender.id == receiver.id:
            raise SelfTransferError("Cannot send money to self")

        flagged = self.is_flagged(value)
        settlement_fails = self._settlement_fails()

        def apply(transaction_id: str) -> Receipt:
            # Row locks in the same order as the process locks
            for account_id in sorted((sender.id, receiver.id)):
                self.accounts.lock_for_update(account_id)

            available = self.accounts.get(sender.id).balance
            if available < value:
                raise InsufficientFundsError(
                    f"Insufficient balance: available={available}, "
                    f"requested={value}"
                )

            if settlement_fails:
                record = self.ledger.append(Transaction(
                    transaction_id=transaction_id,
                    sender_id=sender.id,
                    receiver_id=receiver.id,
                    amount=value,
                    kind=TransactionKind.TRANSFER,
                    outcome=TransactionOutcome.FAILED,
                    description=f"Failed transfer to {receiver.display_name}",
                    flagged=flagged,
                ))
                return Receipt(transaction=record, balance=available)

            balance = self.accounts.adjust_balance(sender.id, -value)
            self.accounts.adjust_balance(receiver.id, value)
            record = self.ledger.append(Transaction(
                transaction_id=transaction_id,
                sender_id=sender.id,
                receiver_id=receiver.id,
                amount=value,
                kind=TransactionKind.TRANSFER,
                outcome=TransactionOutcome.SUCCESS,
                description=f"Sent to {receiver.display_name}",
                flagged=flagged,
            ))
            return Receipt(transaction=record, balance=balance)

        receipt = self._commit_unit((sender.id, receiver.id), apply)

        log_extra = {
            "transaction_id": receipt.transaction_id,
            "sender_id": sender.id,
            "receiver_id": receiver.id,
            "amount": str(value),
            "flagged": flagged,
        }
        if receipt.transaction.outcome == TransactionOutcome.FAILED:
            logger.warning("wallet.transfer.simulated_failure", extra=log_extra)
            raise SimulatedFailureError(receipt.transaction_id)

        logger.info("wallet.transfer.succeeded", extra=log_extra)
        return receipt
