"""
Application configuration.

All configuration is loaded from environment variables.
Never hardcode secrets or connection strings in code.
"""

import os
from decimal import Decimal, InvalidOperation
from functools import lru_cache

from dotenv import load_dotenv

# Load .env file into environment variables
load_dotenv()


def _failure_rate_from_env(raw: str | None) -> float:
    """
    Parse SIMULATE_FAILURE_RATE.

    Unset means the default 10%. A value that does not parse
    disables fault injection. Anything else is clamped to [0, 1].
    """
    if raw is None:
        return 0.10
    try:
        rate = float(raw)
    except ValueError:
        return 0.0
    if rate != rate:  # NaN
        return 0.0
    return max(0.0, min(1.0, rate))


def _decimal_from_env(name: str, default: str) -> Decimal:
    raw = os.getenv(name, default)
    try:
        return Decimal(raw)
    except InvalidOperation:
        raise ValueError(f"{name} must be a decimal number, got {raw!r}")


class Settings:
    """
    Application settings loaded from environment variables.

    Keyword arguments override individual values, which is how
    tests pin the failure rate or the flagging threshold without
    touching the process environment.
    """

    def __init__(self, **overrides):
        # Application
        self.APP_NAME: str = "Wallet Ledger"
        self.APP_VERSION: str = "0.1.0"
        self.DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

        # Server
        self.HOST: str = os.getenv("HOST", "0.0.0.0")
        self.PORT: int = int(os.getenv("PORT", "8000"))

        # Database
        self.DATABASE_URL: str = os.getenv(
            "DATABASE_URL",
            "postgresql+psycopg2://localhost:5432/wallet_ledger"
        )

        # Environment
        self.ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

        # Transfer engine
        self.SIMULATE_FAILURE_RATE: float = _failure_rate_from_env(
            os.getenv("SIMULATE_FAILURE_RATE")
        )
        self.LARGE_TRANSFER_THRESHOLD: Decimal = _decimal_from_env(
            "LARGE_TRANSFER_THRESHOLD", "50000"
        )
        self.MAX_AMOUNT: Decimal = _decimal_from_env("MAX_AMOUNT", "10000000")
        self.TXN_ID_MAX_ATTEMPTS: int = int(os.getenv("TXN_ID_MAX_ATTEMPTS", "3"))

        # Accounts
        self.HANDLE_DOMAIN: str = os.getenv("HANDLE_DOMAIN", "qp")

        for key, value in overrides.items():
            if not hasattr(self, key):
                raise AttributeError(f"Unknown setting {key!r}")
            setattr(self, key, value)

        self.SIMULATE_FAILURE_RATE = max(
            0.0, min(1.0, float(self.SIMULATE_FAILURE_RATE))
        )


@lru_cache()
def get_settings() -> Settings:
    """
    Return cached settings instance.

    Using lru_cache means the Settings object is created once
    and reused for all subsequent calls. This avoids reading
    environment variables repeatedly.
    """
    return Settings()
