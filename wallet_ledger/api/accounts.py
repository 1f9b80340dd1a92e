"""
Account API endpoints.
"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from wallet_ledger.models.base import get_db
from wallet_ledger.services.account_service import AccountService
from wallet_ledger.schemas.account import (
    AccountCreate,
    AccountResponse,
    AccountPublicResponse,
)

router = APIRouter(prefix="/accounts", tags=["Accounts"])


@router.post("", response_model=AccountResponse, status_code=201)
def create_account(
    request: AccountCreate,
    db: Session = Depends(get_db),
):
    """
    Open a wallet account.

    The payment handle is derived from the display name and
    cannot be changed later.
    """
    service = AccountService(db)
    account = service.create_account(request)
    db.commit()
    return account


@router.get("/by-handle/{handle}", response_model=AccountPublicResponse)
def get_account_by_handle(
    handle: str,
    db: Session = Depends(get_db),
):
    """Resolve a payment handle before sending money to it."""
    return AccountService(db).find_by_handle(handle)


@router.get("/{external_id}", response_model=AccountResponse)
def get_account(
    external_id: uuid.UUID,
    db: Session = Depends(get_db),
):
    """Get account details including the current balance."""
    return AccountService(db).get_by_external_id(external_id)
