"""
Transaction record model.

One row per engine call that got past validation: a deposit,
a settled transfer, or a transfer the settlement rail failed.
Rows are immutable. transaction_id is the uniqueness key that
backs identifier regeneration in the transfer engine.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    String, Boolean, DateTime, Numeric, ForeignKey,
    CheckConstraint, Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from wallet_ledger.models.base import Base
from wallet_ledger.models.enums import TransactionKind, TransactionOutcome


class Transaction(Base):
    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transactions_amount_positive"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    transaction_id: Mapped[str] = mapped_column(
        String(40), unique=True, nullable=False, index=True
    )
    # sender_id == receiver_id for deposits
    sender_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id"), nullable=False, index=True
    )
    receiver_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id"), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 2), nullable=False
    )
    kind: Mapped[TransactionKind] = mapped_column(
        SAEnum(
            TransactionKind,
            name="transaction_kind_enum",
            create_constraint=True,
        ),
        nullable=False,
    )
    outcome: Mapped[TransactionOutcome] = mapped_column(
        SAEnum(
            TransactionOutcome,
            name="transaction_outcome_enum",
            create_constraint=True,
        ),
        nullable=False,
    )
    description: Mapped[str] = mapped_column(
        String(255), nullable=False
    )
    flagged: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, index=True
    )

    # Relationships
    sender: Mapped["Account"] = relationship(foreign_keys=[sender_id])
    receiver: Mapped["Account"] = relationship(foreign_keys=[receiver_id])

    def __repr__(self) -> str:
        return (
            f"<Transaction {self.transaction_id} {self.kind.value} "
            f"{self.amount} ({self.outcome.value})>"
        )
