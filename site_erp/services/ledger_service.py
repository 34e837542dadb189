from sqlalchemy.orm import Session, joinedload
from sqlalchemy import or_
from typing import Optional, List, Tuple

from site_erp.common.exceptions import NotFoundError
from site_erp.models.audit_log import AuditAction
from site_erp.models.ledger import Ledger, LedgerType
from site_erp.models.site import Site
from site_erp.services.audit_log_service import log_action, snapshot
from site_erp.utils.parsing import utcnow

from site_erp.logger_config import logger

MODULE = "Ledger"

# ==================== QUERY OPERATIONS ====================

def get_ledger_by_id(db: Session, ledger_id: str) -> Optional[Ledger]:
    """Get ledger by ID."""
    return db.query(Ledger).filter(Ledger.id == ledger_id).first()


def get_all_ledgers(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    search: Optional[str] = None,
    ledger_type: Optional[LedgerType] = None,
    site_id: Optional[str] = None,
) -> Tuple[List[Ledger], int]:
    """Active ledgers, filterable by type and site."""
    query = (
        db.query(Ledger)
        .options(joinedload(Ledger.site))
        .filter(Ledger.is_deleted.is_(False))
    )

    if ledger_type:
        query = query.filter(Ledger.ledger_type == ledger_type)

    if site_id:
        query = query.filter(Ledger.site_id == site_id)

    if search:
        search_term = f"%{search}%"
        query = query.filter(
            or_(
                Ledger.name.ilike(search_term),
                Ledger.mobile.ilike(search_term),
            )
        )

    count = query.count()
    ledgers = query.order_by(Ledger.name).offset(skip).limit(limit).all()
    return ledgers, count


def _check_site(db: Session, site_id: Optional[str]) -> None:
    if site_id and not db.query(Site.id).filter(Site.id == site_id).first():
        raise NotFoundError(f"Site {site_id} not found")


# ==================== MUTATIONS ====================

def create_ledger(
    db: Session,
    data: dict,
    user_id: Optional[str] = None,
    ip: Optional[str] = None,
) -> Ledger:
    """Create a new ledger account."""
    _check_site(db, data.get("site_id"))

    ledger = Ledger(**data)
    ledger.name = ledger.name.strip()
    db.add(ledger)

    try:
        db.flush()
        log_action(db, MODULE, ledger.id, AuditAction.CREATE,
                   new_data=snapshot(ledger), user_id=user_id, ip=ip)
        db.commit()
        db.refresh(ledger)
    except Exception:
        db.rollback()
        logger.exception("Error creating ledger")
        raise

    logger.info(f"Ledger {ledger.id} ({ledger.ledger_type.value}) created")
    return ledger


def update_ledger(
    db: Session,
    ledger_id: str,
    updates: dict,
    user_id: Optional[str] = None,
    ip: Optional[str] = None,
) -> Ledger:
    ledger = get_ledger_by_id(db, ledger_id)
    if not ledger:
        raise NotFoundError("Ledger not found")

    if "site_id" in updates:
        _check_site(db, updates["site_id"])

    old_data = snapshot(ledger)
    for field, value in updates.items():
        if value is None and field in ("name", "ledger_type", "opening_balance"):
            continue
        setattr(ledger, field, value)

    try:
        db.flush()
        log_action(db, MODULE, ledger.id, AuditAction.UPDATE,
                   old_data=old_data, new_data=snapshot(ledger), user_id=user_id, ip=ip)
        db.commit()
        db.refresh(ledger)
    except Exception:
        db.rollback()
        logger.exception(f"Error updating ledger {ledger_id}")
        raise

    return ledger


def delete_ledger(
    db: Session,
    ledger_id: str,
    user_id: Optional[str] = None,
    ip: Optional[str] = None,
) -> Ledger:
    """Soft delete; material rows recorded against the ledger stay in place."""
    ledger = get_ledger_by_id(db, ledger_id)
    if not ledger:
        raise NotFoundError("Ledger not found")

    old_data = snapshot(ledger)
    ledger.is_deleted = True
    ledger.deleted_at = utcnow()
    ledger.deleted_by = user_id

    try:
        db.flush()
        log_action(db, MODULE, ledger.id, AuditAction.DELETE,
                   old_data=old_data, new_data=snapshot(ledger), user_id=user_id, ip=ip)
        db.commit()
        db.refresh(ledger)
    except Exception:
        db.rollback()
        logger.exception(f"Error deleting ledger {ledger_id}")
        raise

    return ledger
