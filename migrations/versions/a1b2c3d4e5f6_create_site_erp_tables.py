"""create sites, ledgers, site expenses, site transactions, labour and audit tables

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "a1b2c3d4e5f6"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


site_status = sa.Enum("ACTIVE", "ON_HOLD", "COMPLETED", name="sitestatus")
ledger_type = sa.Enum(
    "MATERIAL_SUPPLIER", "FUEL_STATION", "LABOUR_CONTRACTOR", "STAFF", "VEHICLE_RENTAL", "PARTY",
    name="ledgertype",
)
txn_source = sa.Enum(
    "SITE_EXPENSE", "SITE_RECEIPT", "VOUCHER", "STAFF_EXPENSE", "LABOUR_PAYMENT", "MANUAL",
    name="txnsource",
)
txn_nature = sa.Enum("DEBIT", "CREDIT", name="txnnature")
payment_mode = sa.Enum("CASH", "BANK", "UPI", "CHEQUE", name="paymentmode")
audit_action = sa.Enum("CREATE", "UPDATE", "DELETE", "RESTORE", "HARD_DELETE", name="auditaction")


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
    ]


def _soft_delete():
    return [
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.Column("deleted_by", sa.String(length=50), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "sites",
        sa.Column("id", sa.String(length=30), nullable=False),
        sa.Column("site_name", sa.String(length=200), nullable=False),
        sa.Column("tender_no", sa.String(length=100), nullable=True),
        sa.Column("sd_amount", sa.Numeric(precision=15, scale=2), nullable=True),
        sa.Column("department", sa.String(length=100), nullable=True),
        sa.Column("status", site_status, nullable=False),
        *_soft_delete(),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "ledgers",
        sa.Column("id", sa.String(length=30), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("ledger_type", ledger_type, nullable=False),
        sa.Column("site_id", sa.String(length=30), nullable=True),
        sa.Column("mobile", sa.String(length=20), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("opening_balance", sa.Numeric(precision=15, scale=2), nullable=False, server_default="0"),
        *_soft_delete(),
        *_timestamps(),
        sa.ForeignKeyConstraint(["site_id"], ["sites.id"]),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "site_expenses",
        sa.Column("id", sa.String(length=30), nullable=False),
        sa.Column("site_id", sa.String(length=30), nullable=False),
        sa.Column("expense_date", sa.DateTime(), nullable=False),
        sa.Column("expense_title", sa.String(length=200), nullable=False, server_default=""),
        sa.Column("summary", sa.Text(), nullable=False, server_default=""),
        sa.Column("payment_details", sa.Text(), nullable=True),
        sa.Column("amount", sa.Numeric(precision=15, scale=2), nullable=False),
        *_soft_delete(),
        *_timestamps(),
        sa.ForeignKeyConstraint(["site_id"], ["sites.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_site_expenses_site_id", "site_expenses", ["site_id"])

    op.create_table(
        "site_transactions",
        sa.Column("id", sa.String(length=30), nullable=False),
        sa.Column("site_id", sa.String(length=30), nullable=False),
        sa.Column("txn_date", sa.DateTime(), nullable=False),
        sa.Column("source", txn_source, nullable=False),
        sa.Column("source_id", sa.String(length=50), nullable=False),
        sa.Column("nature", txn_nature, nullable=False),
        sa.Column("amount", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=True),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column("meta", sa.JSON(), nullable=True),
        *_soft_delete(),
        *_timestamps(),
        sa.ForeignKeyConstraint(["site_id"], ["sites.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("source", "source_id", name="uq_site_transactions_source_source_id"),
    )
    op.create_index("ix_site_transactions_site_id", "site_transactions", ["site_id"])
    op.create_index("ix_site_transactions_txn_date", "site_transactions", ["txn_date"])

    op.create_table(
        "material_supplier_ledger",
        sa.Column("id", sa.String(length=30), nullable=False),
        sa.Column("ledger_id", sa.String(length=30), nullable=False),
        sa.Column("site_id", sa.String(length=30), nullable=True),
        sa.Column("entry_date", sa.DateTime(), nullable=False),
        sa.Column("receipt_no", sa.String(length=100), nullable=True),
        sa.Column("parchi_photo", sa.String(length=500), nullable=True),
        sa.Column("otp", sa.String(length=50), nullable=True),
        sa.Column("vehicle_no", sa.String(length=50), nullable=True),
        sa.Column("vehicle_photo", sa.String(length=500), nullable=True),
        sa.Column("material", sa.String(length=200), nullable=False),
        sa.Column("size", sa.String(length=100), nullable=True),
        sa.Column("qty", sa.Numeric(precision=15, scale=3), nullable=False, server_default="0"),
        sa.Column("rate", sa.Numeric(precision=15, scale=2), nullable=False, server_default="0"),
        sa.Column("royalty_qty", sa.Numeric(precision=15, scale=3), nullable=True),
        sa.Column("royalty_rate", sa.Numeric(precision=15, scale=2), nullable=True),
        sa.Column("royalty_amt", sa.Numeric(precision=15, scale=2), nullable=True),
        sa.Column("gst_percent", sa.Numeric(precision=5, scale=2), nullable=True),
        sa.Column("tax_amt", sa.Numeric(precision=15, scale=2), nullable=True),
        sa.Column("total_amt", sa.Numeric(precision=15, scale=2), nullable=True),
        sa.Column("payment_amt", sa.Numeric(precision=15, scale=2), nullable=True),
        sa.Column("balance_amt", sa.Numeric(precision=15, scale=2), nullable=True),
        sa.Column("remarks", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["ledger_id"], ["ledgers.id"]),
        sa.ForeignKeyConstraint(["site_id"], ["sites.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_material_supplier_ledger_ledger_id", "material_supplier_ledger", ["ledger_id"])
    op.create_index("ix_material_supplier_ledger_site_id", "material_supplier_ledger", ["site_id"])

    op.create_table(
        "labour_contractors",
        sa.Column("id", sa.String(length=30), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("mobile", sa.String(length=20), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "labour_contracts",
        sa.Column("id", sa.String(length=30), nullable=False),
        sa.Column("contractor_id", sa.String(length=30), nullable=False),
        sa.Column("site_id", sa.String(length=30), nullable=False),
        sa.Column("agreed_amount", sa.Numeric(precision=15, scale=2), nullable=False, server_default="0"),
        sa.Column("start_date", sa.DateTime(), nullable=True),
        sa.Column("end_date", sa.DateTime(), nullable=True),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.ForeignKeyConstraint(["contractor_id"], ["labour_contractors.id"]),
        sa.ForeignKeyConstraint(["site_id"], ["sites.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_labour_contracts_contractor_id", "labour_contracts", ["contractor_id"])
    op.create_index("ix_labour_contracts_site_id", "labour_contracts", ["site_id"])

    op.create_table(
        "labour_payments",
        sa.Column("id", sa.String(length=30), nullable=False),
        sa.Column("contractor_id", sa.String(length=30), nullable=False),
        sa.Column("site_id", sa.String(length=30), nullable=False),
        sa.Column("contract_id", sa.String(length=30), nullable=True),
        sa.Column("payment_date", sa.DateTime(), nullable=False),
        sa.Column("amount", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("mode", payment_mode, nullable=False),
        sa.Column("ref_no", sa.String(length=100), nullable=True),
        sa.Column("through", sa.String(length=100), nullable=True),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.ForeignKeyConstraint(["contractor_id"], ["labour_contractors.id"]),
        sa.ForeignKeyConstraint(["site_id"], ["sites.id"]),
        sa.ForeignKeyConstraint(["contract_id"], ["labour_contracts.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_labour_payments_contractor_id", "labour_payments", ["contractor_id"])
    op.create_index("ix_labour_payments_site_id", "labour_payments", ["site_id"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(length=50), nullable=True),
        sa.Column("module", sa.String(length=50), nullable=False),
        sa.Column("record_id", sa.String(length=50), nullable=False),
        sa.Column("action", audit_action, nullable=False),
        sa.Column("old_data", sa.JSON(), nullable=True),
        sa.Column("new_data", sa.JSON(), nullable=True),
        sa.Column("ip", sa.String(length=64), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()"), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_logs_module", "audit_logs", ["module"])
    op.create_index("ix_audit_logs_record_id", "audit_logs", ["record_id"])


def downgrade() -> None:
    op.drop_index("ix_audit_logs_record_id", table_name="audit_logs")
    op.drop_index("ix_audit_logs_module", table_name="audit_logs")
    op.drop_table("audit_logs")
    op.drop_index("ix_labour_payments_site_id", table_name="labour_payments")
    op.drop_index("ix_labour_payments_contractor_id", table_name="labour_payments")
    op.drop_table("labour_payments")
    op.drop_index("ix_labour_contracts_site_id", table_name="labour_contracts")
    op.drop_index("ix_labour_contracts_contractor_id", table_name="labour_contracts")
    op.drop_table("labour_contracts")
    op.drop_table("labour_contractors")
    op.drop_index("ix_material_supplier_ledger_site_id", table_name="material_supplier_ledger")
    op.drop_index("ix_material_supplier_ledger_ledger_id", table_name="material_supplier_ledger")
    op.drop_table("material_supplier_ledger")
    op.drop_index("ix_site_transactions_txn_date", table_name="site_transactions")
    op.drop_index("ix_site_transactions_site_id", table_name="site_transactions")
    op.drop_table("site_transactions")
    op.drop_index("ix_site_expenses_site_id", table_name="site_expenses")
    op.drop_table("site_expenses")
    op.drop_table("ledgers")
    op.drop_table("sites")

    bind = op.get_bind()
    for enum_type in (audit_action, payment_mode, txn_nature, txn_source, ledger_type, site_status):
        enum_type.drop(bind, checkfirst=True)
