from sqlalchemy import Column, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from site_erp.core.database import Base
from site_erp.models.site import generate_custom_id


class MaterialSupplierLedger(Base):
    """One material delivery from a supplier ledger to a site. Hard delete only."""
    __tablename__ = "material_supplier_ledger"

    id = Column(String(30), primary_key=True, default=lambda: generate_custom_id("MSL"))
    ledger_id = Column(String(30), ForeignKey("ledgers.id"), nullable=False, index=True)
    site_id = Column(String(30), ForeignKey("sites.id"), nullable=True, index=True)
    entry_date = Column(DateTime, nullable=False)

    receipt_no = Column(String(100), nullable=True)
    parchi_photo = Column(String(500), nullable=True)
    otp = Column(String(50), nullable=True)
    vehicle_no = Column(String(50), nullable=True)
    vehicle_photo = Column(String(500), nullable=True)

    material = Column(String(200), nullable=False)
    size = Column(String(100), nullable=True)
    qty = Column(Numeric(15, 3), nullable=False, default=0)
    rate = Column(Numeric(15, 2), nullable=False, default=0)

    royalty_qty = Column(Numeric(15, 3), nullable=True)
    royalty_rate = Column(Numeric(15, 2), nullable=True)
    royalty_amt = Column(Numeric(15, 2), nullable=True)
    gst_percent = Column(Numeric(5, 2), nullable=True)
    tax_amt = Column(Numeric(15, 2), nullable=True)
    total_amt = Column(Numeric(15, 2), nullable=True)
    payment_amt = Column(Numeric(15, 2), nullable=True)
    balance_amt = Column(Numeric(15, 2), nullable=True)

    remarks = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    ledger = relationship("Ledger", back_populates="material_rows")
    site = relationship("Site")
