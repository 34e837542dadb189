import enum
from sqlalchemy import JSON, Column, DateTime, Enum, Integer, String
from sqlalchemy.sql import func
from site_erp.core.database import Base


class AuditAction(str, enum.Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    RESTORE = "RESTORE"
    HARD_DELETE = "HARD_DELETE"


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)

    user_id = Column(String(50), nullable=True)
    module = Column(String(50), nullable=False, index=True)   # SiteExpense / SiteTransaction / ...
    record_id = Column(String(50), nullable=False, index=True)
    action = Column(Enum(AuditAction), nullable=False)

    old_data = Column(JSON, nullable=True)
    new_data = Column(JSON, nullable=True)
    ip = Column(String(64), nullable=True)

    created_at = Column(DateTime, server_default=func.now())
