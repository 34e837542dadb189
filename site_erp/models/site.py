import enum
import secrets
import string
from sqlalchemy import Boolean, Column, DateTime, Enum, Numeric, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from site_erp.core.database import Base


def generate_custom_id(prefix: str, length: int = 8) -> str:
    random_part = ''.join(secrets.choice(string.ascii_uppercase)
                          for _ in range(length))
    return f"{prefix}-{random_part}"


class SiteStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    ON_HOLD = "ON_HOLD"
    COMPLETED = "COMPLETED"


class Site(Base):
    """A construction project/location; the cost centre for expenses and transactions."""
    __tablename__ = "sites"

    id = Column(String(30), primary_key=True,
                default=lambda: generate_custom_id("SITE"))
    site_name = Column(String(200), nullable=False)
    tender_no = Column(String(100), nullable=True)
    sd_amount = Column(Numeric(15, 2), nullable=True)
    department = Column(String(100), nullable=True)
    status = Column(Enum(SiteStatus), nullable=False, default=SiteStatus.ACTIVE)

    is_deleted = Column(Boolean, nullable=False, default=False)
    deleted_at = Column(DateTime, nullable=True)
    deleted_by = Column(String(50), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())

    expenses = relationship("SiteExpense", back_populates="site")
    transactions = relationship("SiteTransaction", back_populates="site")

    def __repr__(self):
        return f"<Site(id='{self.id}', name='{self.site_name}')>"
