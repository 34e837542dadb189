from sqlalchemy.orm import Session
from sqlalchemy import or_
from typing import Optional, List, Tuple
from decimal import Decimal

from site_erp.common.exceptions import NotFoundError
from site_erp.models.audit_log import AuditAction
from site_erp.models.site import Site, SiteStatus
from site_erp.services.audit_log_service import log_action, snapshot
from site_erp.utils.parsing import utcnow

from site_erp.logger_config import logger

MODULE = "Site"

# ==================== QUERY OPERATIONS ====================

def get_site_by_id(db: Session, site_id: str) -> Optional[Site]:
    """Get site by ID."""
    return db.query(Site).filter(Site.id == site_id).first()


def get_all_sites(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    search: Optional[str] = None,
    status: Optional[SiteStatus] = None,
) -> Tuple[List[Site], int]:
    """Active sites with optional search on name/tender/department."""
    query = db.query(Site).filter(Site.is_deleted.is_(False))

    if status:
        query = query.filter(Site.status == status)

    if search:
        search_term = f"%{search}%"
        query = query.filter(
            or_(
                Site.site_name.ilike(search_term),
                Site.tender_no.ilike(search_term),
                Site.department.ilike(search_term),
            )
        )

    count = query.count()
    sites = query.order_by(Site.site_name).offset(skip).limit(limit).all()
    return sites, count


# ==================== MUTATIONS ====================

def create_site(
    db: Session,
    site_name: str,
    tender_no: Optional[str] = None,
    sd_amount: Optional[Decimal] = None,
    department: Optional[str] = None,
    status: SiteStatus = SiteStatus.ACTIVE,
    user_id: Optional[str] = None,
    ip: Optional[str] = None,
) -> Site:
    """Create a new site."""
    site = Site(
        site_name=site_name.strip(),
        tender_no=tender_no,
        sd_amount=sd_amount,
        department=department,
        status=status,
    )
    db.add(site)

    try:
        db.flush()
        log_action(db, MODULE, site.id, AuditAction.CREATE,
                   new_data=snapshot(site), user_id=user_id, ip=ip)
        db.commit()
        db.refresh(site)
    except Exception:
        db.rollback()
        logger.exception("Error creating site")
        raise

    logger.info(f"Site {site.id} ({site.site_name}) created")
    return site


def update_site(
    db: Session,
    site_id: str,
    updates: dict,
    user_id: Optional[str] = None,
    ip: Optional[str] = None,
) -> Site:
    """Apply the given column updates to a site."""
    site = get_site_by_id(db, site_id)
    if not site:
        raise NotFoundError("Site not found")

    old_data = snapshot(site)
    for field in ("site_name", "tender_no", "sd_amount", "department", "status"):
        if field in updates and not (field in ("site_name", "status") and updates[field] is None):
            setattr(site, field, updates[field])

    try:
        db.flush()
        log_action(db, MODULE, site.id, AuditAction.UPDATE,
                   old_data=old_data, new_data=snapshot(site), user_id=user_id, ip=ip)
        db.commit()
        db.refresh(site)
    except Exception:
        db.rollback()
        logger.exception(f"Error updating site {site_id}")
        raise

    return site


def delete_site(
    db: Session,
    site_id: str,
    user_id: Optional[str] = None,
    ip: Optional[str] = None,
) -> Site:
    """Soft delete a site; its expenses and transactions are kept."""
    site = get_site_by_id(db, site_id)
    if not site:
        raise NotFoundError("Site not found")

    old_data = snapshot(site)
    site.is_deleted = True
    site.deleted_at = utcnow()
    site.deleted_by = user_id

    try:
        db.flush()
        log_action(db, MODULE, site.id, AuditAction.DELETE,
                   old_data=old_data, new_data=snapshot(site), user_id=user_id, ip=ip)
        db.commit()
        db.refresh(site)
    except Exception:
        db.rollback()
        logger.exception(f"Error deleting site {site_id}")
        raise

    logger.info(f"Site {site_id} soft-deleted by {user_id}")
    return site
