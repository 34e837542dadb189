import enum
from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from site_erp.core.database import Base
from site_erp.models.site import generate_custom_id


class LedgerType(str, enum.Enum):
    MATERIAL_SUPPLIER = "MATERIAL_SUPPLIER"
    FUEL_STATION = "FUEL_STATION"
    LABOUR_CONTRACTOR = "LABOUR_CONTRACTOR"
    STAFF = "STAFF"
    VEHICLE_RENTAL = "VEHICLE_RENTAL"
    PARTY = "PARTY"


class Ledger(Base):
    """Named account (supplier, fuel station, staff...) against which rows are recorded."""
    __tablename__ = "ledgers"

    id = Column(String(30), primary_key=True, default=lambda: generate_custom_id("LDG"))
    name = Column(String(200), nullable=False)
    ledger_type = Column(Enum(LedgerType), nullable=False)
    site_id = Column(String(30), ForeignKey("sites.id"), nullable=True)
    mobile = Column(String(20), nullable=True)
    address = Column(Text, nullable=True)
    opening_balance = Column(Numeric(15, 2), nullable=False, default=0)

    is_deleted = Column(Boolean, nullable=False, default=False)
    deleted_at = Column(DateTime, nullable=True)
    deleted_by = Column(String(50), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    site = relationship("Site")
    material_rows = relationship("MaterialSupplierLedger", back_populates="ledger")
