"""
Map wallet errors to HTTP responses.

Every error body carries ``recorded`` so a client can tell a
rejected request from an attempt that was written to the ledger
without moving money.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from wallet_ledger.errors import (
    AccountNotFoundError,
    DuplicateHandleError,
    DuplicateIdentityError,
    EngineUnavailableError,
    InsufficientFundsError,
    InvalidAmountError,
    InvalidDisplayNameError,
    SelfTransferError,
    SimulatedFailureError,
    WalletError,
)


STATUS_CODES: dict[type[WalletError], int] = {
    InvalidAmountError: 422,
    InvalidDisplayNameError: 400,
    AccountNotFoundError: 404,
    SelfTransferError: 400,
    InsufficientFundsError: 409,
    DuplicateHandleError: 409,
    DuplicateIdentityError: 409,
    SimulatedFailureError: 400,
    EngineUnavailableError: 503,
}


def status_code_for(exc: WalletError) -> int:
    for error_type in type(exc).__mro__:
        if error_type in STATUS_CODES:
            return STATUS_CODES[error_type]
    return 500


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(WalletError)
    async def wallet_error_handler(request: Request, exc: WalletError) -> JSONResponse:
        content = {
            "detail": exc.message,
            "error": type(exc).__name__,
            "recorded": exc.recorded,
        }
        if isinstance(exc, SimulatedFailureError):
            content["transaction_id"] = exc.transaction_id
        return JSONResponse(status_code=status_code_for(exc), content=content)
