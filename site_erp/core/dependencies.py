from dataclasses import dataclass
from typing import Optional

from fastapi import Header, Request

from site_erp.core.database import SessionLocal

SYSTEM_USER = "SYSTEM"


def get_db():
    """Dependency to get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@dataclass
class AuditContext:
    """Who performed a mutation and from where; recorded on every audit entry."""
    user_id: str
    ip: Optional[str]


def get_client_ip(request: Request) -> Optional[str]:
    """Get the real client IP, handling proxies."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def get_audit_context(
    request: Request,
    x_user_id: Optional[str] = Header(None),
) -> AuditContext:
    """
    Resolve the acting user for audit logging.
    There is no authentication layer; callers identify themselves via the
    X-User-Id header and anonymous writes are attributed to SYSTEM.
    """
    user_id = (x_user_id or "").strip() or SYSTEM_USER
    return AuditContext(user_id=user_id, ip=get_client_ip(request))
