"""
Per-account mutual exclusion.

The transfer engine holds the lock of every account it touches
from the funds check until the database commit. Locks are always
taken in ascending account id order, so two transfers moving
money in opposite directions between the same pair of accounts
cannot deadlock.

This only serializes callers inside one process. Across
processes the row locks taken with SELECT ... FOR UPDATE and the
guarded balance UPDATE in AccountService do the same job.
"""

import threading
from contextlib import ExitStack, contextmanager


class AccountLockRegistry:

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[int, threading.Lock] = {}

    def _lock_for(self, account_id: int) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(account_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[account_id] = lock
            return lock

    @contextmanager
    def hold(self, *account_ids: int):
        """Acquire the locks of all given accounts in a fixed global order."""
        with ExitStack() as stack:
            for account_id in sorted(set(account_ids)):
                lock = self._lock_for(account_id)
                lock.acquire()
                stack.callback(lock.release)
            yield


# Shared by every TransferEngine in the process
account_locks = AccountLockRegistry()
