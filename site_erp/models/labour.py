import enum
from sqlalchemy import Column, DateTime, Enum, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from site_erp.core.database import Base
from site_erp.models.site import generate_custom_id


class PaymentMode(str, enum.Enum):
    CASH = "CASH"
    BANK = "BANK"
    UPI = "UPI"
    CHEQUE = "CHEQUE"


class LabourContractor(Base):
    __tablename__ = "labour_contractors"

    id = Column(String(30), primary_key=True, default=lambda: generate_custom_id("LABC"))
    name = Column(String(200), nullable=False)
    mobile = Column(String(20), nullable=True)
    address = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    contracts = relationship("LabourContract", back_populates="contractor")
    payments = relationship("LabourPayment", back_populates="contractor")


class LabourContract(Base):
    """A contractor's agreed deal for one site."""
    __tablename__ = "labour_contracts"

    id = Column(String(30), primary_key=True, default=lambda: generate_custom_id("LABK"))
    contractor_id = Column(String(30), ForeignKey("labour_contractors.id"), nullable=False, index=True)
    site_id = Column(String(30), ForeignKey("sites.id"), nullable=False, index=True)
    agreed_amount = Column(Numeric(15, 2), nullable=False, default=0)
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    remarks = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    contractor = relationship("LabourContractor", back_populates="contracts")
    site = relationship("Site")
    payments = relationship("LabourPayment", back_populates="contract")


class LabourPayment(Base):
    __tablename__ = "labour_payments"

    id = Column(String(30), primary_key=True, default=lambda: generate_custom_id("LABP"))
    contractor_id = Column(String(30), ForeignKey("labour_contractors.id"), nullable=False, index=True)
    site_id = Column(String(30), ForeignKey("sites.id"), nullable=False, index=True)
    contract_id = Column(String(30), ForeignKey("labour_contracts.id"), nullable=True)
    payment_date = Column(DateTime, nullable=False)
    amount = Column(Numeric(15, 2), nullable=False)
    mode = Column(Enum(PaymentMode), nullable=False, default=PaymentMode.CASH)
    ref_no = Column(String(100), nullable=True)
    through = Column(String(100), nullable=True)
    remarks = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    contractor = relationship("LabourContractor", back_populates="payments")
    site = relationship("Site")
    contract = relationship("LabourContract", back_populates="payments")
