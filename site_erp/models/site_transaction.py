import enum
from sqlalchemy import (
    JSON, Boolean, Column, DateTime, Enum, ForeignKey, Numeric, String, Text, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from site_erp.core.database import Base
from site_erp.models.site import generate_custom_id


class TxnSource(str, enum.Enum):
    SITE_EXPENSE = "SITE_EXPENSE"
    SITE_RECEIPT = "SITE_RECEIPT"
    VOUCHER = "VOUCHER"
    STAFF_EXPENSE = "STAFF_EXPENSE"
    LABOUR_PAYMENT = "LABOUR_PAYMENT"
    MANUAL = "MANUAL"


class TxnNature(str, enum.Enum):
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"


class SiteTransaction(Base):
    """
    Unified per-site debit/credit ledger.
    Rows with source SITE_EXPENSE are a projection of site_expenses and follow
    the originating expense through create/update/soft-delete/restore/delete.
    """
    __tablename__ = "site_transactions"
    __table_args__ = (
        UniqueConstraint("source", "source_id", name="uq_site_transactions_source_source_id"),
    )

    id = Column(String(30), primary_key=True, default=lambda: generate_custom_id("STXN"))
    site_id = Column(String(30), ForeignKey("sites.id"), nullable=False, index=True)
    txn_date = Column(DateTime, nullable=False, index=True)

    source = Column(Enum(TxnSource), nullable=False)
    source_id = Column(String(50), nullable=False)
    nature = Column(Enum(TxnNature), nullable=False)

    amount = Column(Numeric(15, 2), nullable=False)
    title = Column(String(200), nullable=True)
    remarks = Column(Text, nullable=True)
    meta = Column(JSON, nullable=True)

    is_deleted = Column(Boolean, nullable=False, default=False)
    deleted_at = Column(DateTime, nullable=True)
    deleted_by = Column(String(50), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    site = relationship("Site", back_populates="transactions")
