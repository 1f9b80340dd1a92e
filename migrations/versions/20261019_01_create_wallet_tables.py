"""create accounts and transactions tables

Revision ID: 5f2c8e1a9b30
Revises: 
Create Date: 2026-10-19 09:00:00.000000
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "5f2c8e1a9b30"
down_revision = None
branch_labels = None
depends_on = None


transaction_kind_enum = sa.Enum(
    "DEPOSIT", "TRANSFER", name="transaction_kind_enum", create_constraint=True
)
transaction_outcome_enum = sa.Enum(
    "SUCCESS", "FAILED", name="transaction_outcome_enum", create_constraint=True
)


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("external_id", sa.Uuid(), nullable=False, unique=True),
        sa.Column("display_name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("handle", sa.String(length=120), nullable=False),
        sa.Column("balance", sa.Numeric(19, 2), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("balance >= 0", name="ck_accounts_balance_non_negative"),
    )
    op.create_index("ix_accounts_handle", "accounts", ["handle"], unique=True)

    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("transaction_id", sa.String(length=40), nullable=False),
        sa.Column("sender_id", sa.Integer(), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("receiver_id", sa.Integer(), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("amount", sa.Numeric(19, 2), nullable=False),
        sa.Column("kind", transaction_kind_enum, nullable=False),
        sa.Column("outcome", transaction_outcome_enum, nullable=False),
        sa.Column("description", sa.String(length=255), nullable=False),
        sa.Column("flagged", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("amount > 0", name="ck_transactions_amount_positive"),
    )
    op.create_index("ix_transactions_transaction_id", "transactions", ["transaction_id"], unique=True)
    op.create_index("ix_transactions_sender_id", "transactions", ["sender_id"])
    op.create_index("ix_transactions_receiver_id", "transactions", ["receiver_id"])
    op.create_index("ix_transactions_created_at", "transactions", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_transactions_created_at", table_name="transactions")
    op.drop_index("ix_transactions_receiver_id", table_name="transactions")
    op.drop_index("ix_transactions_sender_id", table_name="transactions")
    op.drop_index("ix_transactions_transaction_id", table_name="transactions")
    op.drop_table("transactions")
    op.drop_index("ix_accounts_handle", table_name="accounts")
    op.drop_table("accounts")
    transaction_outcome_enum.drop(op.get_bind(), checkfirst=True)
    transaction_kind_enum.drop(op.get_bind(), checkfirst=True)
