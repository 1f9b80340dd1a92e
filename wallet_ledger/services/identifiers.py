"""
Transaction identifier generation.

Identifiers look like ``QP`` + base-36 milliseconds since the
epoch + a random base-36 suffix, uppercased. The timestamp part
sorts roughly by creation time, which helps when reading logs.
Uniqueness is only probabilistic; the ledger's unique key is
what actually guarantees it.
"""

import secrets
import time

ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
PREFIX = "QP"
RANDOM_LENGTH = 8


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("value must be non-negative")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_transaction_id(now_ms: int | None = None) -> str:
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    suffix = "".join(secrets.choice(ALPHABET) for _ in range(RANDOM_LENGTH))
    return f"{PREFIX}{to_base36(now_ms)}{suffix}".upper()
