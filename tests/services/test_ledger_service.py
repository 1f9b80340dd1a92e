"""
Tests for the LedgerService (the append-only transaction log).
"""

from datetime import datetime
from decimal import Decimal

import pytest
from sqlalchemy import event

from wallet_ledger.errors import AccountNotFoundError, DuplicateTransactionIdError
from wallet_ledger.models.enums import TransactionKind, TransactionOutcome
from wallet_ledger.models.transaction import Transaction
from wallet_ledger.services.ledger_service import LedgerService


def make_record(transaction_id, sender, receiver, amount="10.00", **kwargs):
    return Transaction(
        transaction_id=transaction_id,
        sender_id=sender.id,
        receiver_id=receiver.id,
        amount=Decimal(amount),
        kind=kwargs.pop("kind", TransactionKind.TRANSFER),
        outcome=kwargs.pop("outcome", TransactionOutcome.SUCCESS),
        description=kwargs.pop("description", "Test"),
        flagged=kwargs.pop("flagged", False),
        **kwargs,
    )


class TestAppend:

    def test_append_stores_record(self, make_account, db_session):
        ada = make_account("Ada")
        bob = make_account("Bob")
        ledger = LedgerService(db_session)

        ledger.append(make_record("QPTEST0001", ada, bob))
        db_session.commit()

        stored = ledger.get_by_transaction_id("QPTEST0001")
        assert stored is not None
        assert stored.sender_id == ada.id
        assert stored.receiver_id == bob.id
        assert stored.created_at is not None

    def test_duplicate_transaction_id_rejected(self, make_account, db_session):
        ada = make_account("Ada")
        bob = make_account("Bob")
        ledger = LedgerService(db_session)
        ledger.append(make_record("QPTEST0001", ada, bob, amount="10.00"))
        db_session.commit()

        with pytest.raises(DuplicateTransactionIdError) as exc_info:
            ledger.append(make_record("QPTEST0001", bob, ada, amount="99.00"))

        assert exc_info.value.transaction_id == "QPTEST0001"

        # The first record is untouched
        db_session.rollback()
        stored = ledger.get_by_transaction_id("QPTEST0001")
        assert stored.amount == Decimal("10.00")
        assert ledger.count() == 1

    def test_unknown_account_rejected(self, make_account, db_session):
        ada = make_account("Ada")
        ledger = LedgerService(db_session)
        record = make_record("QPTEST0002", ada, ada)
        record.receiver_id = 999

        with pytest.raises(AccountNotFoundError):
            ledger.append(record)


class TestListFor:

    def test_includes_sent_and_received(self, make_account, db_session):
        ada = make_account("Ada")
        bob = make_account("Bob")
        cyd = make_account("Cyd")
        ledger = LedgerService(db_session)
        ledger.append(make_record("QP1", ada, bob))
        ledger.append(make_record("QP2", bob, ada))
        ledger.append(make_record("QP3", bob, cyd))
        db_session.commit()

        ids = {r.transaction_id for r in ledger.list_for(ada.id)}
        assert ids == {"QP1", "QP2"}

    def test_newest_first(self, make_account, db_session):
        ada = make_account("Ada")
        bob = make_account("Bob")
        ledger = LedgerService(db_session)
        ledger.append(make_record("QP-OLD", ada, bob, created_at=datetime(2026, 1, 1)))
        ledger.append(make_record("QP-NEW", ada, bob, created_at=datetime(2026, 3, 1)))
        ledger.append(make_record("QP-MID", ada, bob, created_at=datetime(2026, 2, 1)))
        db_session.commit()

        ids = [r.transaction_id for r in ledger.list_for(ada.id)]
        assert ids == ["QP-NEW", "QP-MID", "QP-OLD"]

    def test_timestamp_ties_broken_by_insertion_order(self, make_account, db_session):
        ada = make_account("Ada")
        bob = make_account("Bob")
        ledger = LedgerService(db_session)
        same_time = datetime(2026, 5, 5, 12, 0, 0)
        for txn_id in ("QP-A", "QP-B", "QP-C"):
            ledger.append(make_record(txn_id, ada, bob, created_at=same_time))
        db_session.commit()

        ids = [r.transaction_id for r in ledger.list_for(bob.id)]
        assert ids == ["QP-C", "QP-B", "QP-A"]

    def test_empty_for_account_without_activity(self, make_account, db_session):
        ada = make_account("Ada")
        assert LedgerService(db_session).list_for(ada.id) == []

    def test_counterparties_load_in_a_fixed_number_of_queries(
        self, make_account, db_session
    ):
        ada = make_account("Ada")
        others = [make_account(name) for name in ("Bob", "Cyd", "Dee", "Eve")]
        ledger = LedgerService(db_session)
        for n, other in enumerate(others):
            ledger.append(make_record(f"QPOUT{n}", ada, other))
            ledger.append(make_record(f"QPIN{n}", other, ada))
        db_session.commit()
        db_session.expire_all()

        statements = []
        bind = db_session.get_bind()

        def count(conn, cursor, statement, parameters, context, executemany):
            statements.append(statement)

        event.listen(bind, "before_cursor_execute", count)
        try:
            records = ledger.list_for(ada.id)
            names = {
                (record.sender.display_name, record.receiver.display_name)
                for record in records
            }
        finally:
            event.remove(bind, "before_cursor_execute", count)

        assert len(records) == 8
        assert ("Ada", "Eve") in names
        assert len(statements) <= 3
