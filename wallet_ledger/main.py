"""
Wallet Ledger FastAPI application.

This is the entry point for the application.
All routers are registered here.
"""

import logging

from fastapi import FastAPI

from wallet_ledger.config import get_settings
from wallet_ledger.api.exceptions import register_exception_handlers
from wallet_ledger.api.health import router as health_router
from wallet_ledger.api.accounts import router as accounts_router
from wallet_ledger.api.wallet import router as wallet_router

settings = get_settings()
logging.basicConfig(level=settings.LOG_LEVEL)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Custodial wallet ledger with an atomic transfer engine",
)

# Register routers
app.include_router(health_router)
app.include_router(accounts_router)
app.include_router(wallet_router)
register_exception_handlers(app)
