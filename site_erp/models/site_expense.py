from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from site_erp.core.database import Base
from site_erp.models.site import generate_custom_id


class SiteExpense(Base):
    """Manually entered site expense; mirrored into site_transactions on every write."""
    __tablename__ = "site_expenses"

    id = Column(String(30), primary_key=True, default=lambda: generate_custom_id("SEXP"))
    site_id = Column(String(30), ForeignKey("sites.id"), nullable=False, index=True)
    expense_date = Column(DateTime, nullable=False)
    expense_title = Column(String(200), nullable=False, default="")
    summary = Column(Text, nullable=False, default="")
    payment_details = Column(Text, nullable=True)
    amount = Column(Numeric(15, 2), nullable=False)

    is_deleted = Column(Boolean, nullable=False, default=False)
    deleted_at = Column(DateTime, nullable=True)
    deleted_by = Column(String(50), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    site = relationship("Site", back_populates="expenses")
