"""
Account service: the account store.

Owns account identity (id, external id, email, handle) and the
balance column. Balance changes go through adjust_balance, a
single guarded UPDATE, so the database itself refuses a debit
that would take the balance below zero even when two callers
race on the same row.
"""

import logging
import re
import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from wallet_ledger.config import Settings, get_settings
from wallet_ledger.errors import (
    AccountNotFoundError,
    DuplicateHandleError,
    DuplicateIdentityError,
    InsufficientFundsError,
    InvalidDisplayNameError,
)
from wallet_ledger.models.account import Account
from wallet_ledger.schemas.account import AccountCreate


logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


def derive_handle(display_name: str, domain: str) -> str:
    """
    Build the payment handle for a display name.

    "Ada  Lovelace" with domain "qp" becomes "adalovelace@qp".
    """
    local_part = _WHITESPACE.sub("", display_name).lower()
    if not local_part:
        raise InvalidDisplayNameError(
            "Display name must contain a non-whitespace character"
        )
    return f"{local_part}@{domain}"


def normalize_handle(handle: str) -> str:
    return handle.strip().lower()


class AccountService:

    def __init__(self, db: Session, settings: Settings | None = None):
        self.db = db
        self.settings = settings or get_settings()

    def _email_taken(self, email: str) -> bool:
        return self.db.execute(
            select(Account.id).where(Account.email == email)
        ).first() is not None

    def _handle_taken(self, handle: str) -> bool:
        return self.db.execute(
            select(Account.id).where(Account.handle == handle)
        ).first() is not None

    def create_account(self, request: AccountCreate) -> Account:
        """
        Onboard a new account with a zero balance.

        Raises DuplicateIdentityError if the email is taken and
        DuplicateHandleError if the derived handle is taken. A
        concurrent insert that slips past the pre-checks is caught
        by the unique constraints at flush time.
        """
        email = request.email.strip().lower()
        handle = derive_handle(request.display_name, self.settings.HANDLE_DOMAIN)

        if self._email_taken(email):
            raise DuplicateIdentityError(f"Account with email '{email}' already exists")
        if self._handle_taken(handle):
            raise DuplicateHandleError(f"Handle '{handle}' is already taken")

        account = Account(
            display_name=request.display_name.strip(),
            email=email,
            handle=handle,
            balance=Decimal("0.00"),
        )
        self.db.add(account)
        try:
            self.db.flush()
        except IntegrityError:
            self.db.rollback()
            if self._email_taken(email):
                raise DuplicateIdentityError(
                    f"Account with email '{email}' already exists"
                )
            raise DuplicateHandleError(f"Handle '{handle}' is already taken")

        logger.info(
            "account.created",
            extra={"account_id": account.id, "handle": account.handle},
        )
        return account

    def get(self, account_id: int) -> Account:
        account = self.db.get(Account, account_id)
        if not account:
            raise AccountNotFoundError(f"Account {account_id} not found")
        return account

    def get_by_external_id(self, external_id: uuid.UUID) -> Account:
        account = self.db.execute(
            select(Account).where(Account.external_id == external_id)
        ).scalar_one_or_none()
        if not account:
            raise AccountNotFoundError(f"Account {external_id} not found")
        return account

    def find_by_handle(self, handle: str) -> Account:
        normalized = normalize_handle(handle)
        account = self.db.execute(
            select(Account).where(Account.handle == normalized)
        ).scalar_one_or_none()
        if not account:
            raise AccountNotFoundError(f"No account with handle '{normalized}'")
        return account

    def lock_for_update(self, account_id: int) -> Account:
        """
        Re-read an account row under a row lock.

        populate_existing discards whatever the session cached
        earlier, so the balance is the committed one.
        """
        account = self.db.get(
            Account,
            account_id,
            with_for_update=True,
            populate_existing=True,
        )
        if not account:
            raise AccountNotFoundError(f"Account {account_id} not found")
        return account

    def adjust_balance(self, account_id: int, delta: Decimal) -> Decimal:
        """
        Add delta (negative for a debit) to an account balance.

        The non-negative check and the write are one statement.
        Returns the new balance. Does not commit.
        """
        delta = Decimal(delta)
        result = self.db.execute(
            update(Account)
            .where(Account.id == account_id, Account.balance + delta >= 0)
            .values(balance=Account.balance + delta, updated_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            account = self.db.get(Account, account_id, populate_existing=True)
            if not account:
                raise AccountNotFoundError(f"Account {account_id} not found")
            raise InsufficientFundsError(
                f"Insufficient balance: available={account.balance}, "
                f"requested={-delta}"
            )

        account = self.db.get(Account, account_id, populate_existing=True)
        return account.balance
