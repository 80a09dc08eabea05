"""accounts, ledger entries and audit log

Revision ID: 0001
Revises:
Create Date: 2026-10-17 09:00:00
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


account_type_enum = sa.Enum(
    "CHECKING", "SAVINGS", "CREDIT_CARD", "INVESTMENT", "CASH", "OTHER",
    name="account_type_enum",
)
account_status_enum = sa.Enum(
    "ACTIVE", "INACTIVE", "CLOSED", name="account_status_enum"
)
entry_type_enum = sa.Enum("DEBIT", "CREDIT", name="entry_type_enum")
entry_status_enum = sa.Enum("ACTIVE", "DELETED", name="entry_status_enum")


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("owner_id", sa.String(64), nullable=False),
        sa.Column("dashboard_id", sa.String(64), nullable=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("account_type", account_type_enum, nullable=False),
        sa.Column("status", account_status_enum, nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("initial_balance", sa.Numeric(19, 4), nullable=False),
        sa.Column("current_balance", sa.Numeric(19, 4), nullable=False),
        sa.Column("available_balance", sa.Numeric(19, 4), nullable=False),
        sa.Column("credit_limit", sa.Numeric(19, 4), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_accounts_owner_id", "accounts", ["owner_id"])
    op.create_index("ix_accounts_dashboard_id", "accounts", ["dashboard_id"])

    op.create_table(
        "ledger_entries",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.Column("entry_type", entry_type_enum, nullable=False),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("subcategory", sa.String(150), nullable=True),
        sa.Column("description", sa.String(255), nullable=False),
        sa.Column("amount", sa.Numeric(19, 4), nullable=False),
        sa.Column(
            "account_id", sa.Integer(),
            sa.ForeignKey("accounts.id"), nullable=False,
        ),
        sa.Column(
            "counter_account_id", sa.Integer(),
            sa.ForeignKey("accounts.id"), nullable=True,
        ),
        sa.Column(
            "linked_entry_id", sa.Integer(),
            sa.ForeignKey("ledger_entries.id"), nullable=True, unique=True,
        ),
        sa.Column("owner_id", sa.String(64), nullable=False),
        sa.Column("dashboard_id", sa.String(64), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("status", entry_status_enum, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.Column("deleted_by", sa.String(64), nullable=True),
    )
    op.create_index("ix_ledger_entries_account_id", "ledger_entries", ["account_id"])
    op.create_index(
        "ix_ledger_entries_counter_account_id", "ledger_entries", ["counter_account_id"]
    )
    op.create_index("ix_ledger_entries_owner_id", "ledger_entries", ["owner_id"])
    op.create_index("ix_ledger_entries_dashboard_id", "ledger_entries", ["dashboard_id"])
    op.create_index(
        "ix_ledger_entries_owner_category", "ledger_entries", ["owner_id", "category"]
    )

    op.create_table(
        "audit_log",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("event_type", sa.String(100), nullable=False),
        sa.Column("entity_id", sa.Integer(), nullable=True),
        sa.Column("owner_id", sa.String(64), nullable=False),
        sa.Column("details", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_audit_log_entity_id", "audit_log", ["entity_id"])


def downgrade() -> None:
    op.drop_table("audit_log")
    op.drop_table("ledger_entries")
    op.drop_table("accounts")
    for enum in (
        entry_status_enum, entry_type_enum, account_status_enum, account_type_enum
    ):
        enum.drop(op.get_bind(), checkfirst=True)
