from datetime import date, datetime
from decimal import Decimal
import enum
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import inspect
from sqlalchemy.orm import Session

from site_erp.models.audit_log import AuditAction, AuditLog


def _json_value(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, enum.Enum):
        return value.value
    return value


def snapshot(row) -> Dict[str, Any]:
    """JSON-safe copy of an ORM row's column values, keyed by attribute name."""
    mapper = inspect(row).mapper
    return {attr.key: _json_value(getattr(row, attr.key)) for attr in mapper.column_attrs}


def log_action(
    db: Session,
    module: str,
    record_id: str,
    action: AuditAction,
    old_data: Optional[Dict[str, Any]] = None,
    new_data: Optional[Dict[str, Any]] = None,
    user_id: Optional[str] = None,
    ip: Optional[str] = None,
) -> AuditLog:
    """
    Stage an audit entry in the caller's unit of work.
    Nothing is committed here: the entry lands (or rolls back) together with
    the mutation it describes.
    """
    entry = AuditLog(
        user_id=user_id,
        module=module,
        record_id=str(record_id),
        action=action,
        old_data=old_data,
        new_data=new_data,
        ip=ip,
    )
    db.add(entry)
    return entry


def get_audit_logs(
    db: Session,
    module: Optional[str] = None,
    record_id: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
) -> Tuple[List[AuditLog], int]:
    """Audit entries newest first, optionally for one module/record."""
    query = db.query(AuditLog)
    if module:
        query = query.filter(AuditLog.module == module)
    if record_id:
        query = query.filter(AuditLog.record_id == record_id)

    total = query.count()
    rows = (
        query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )
    return rows, total
