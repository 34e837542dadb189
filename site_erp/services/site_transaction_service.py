from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from site_erp.common.exceptions import NotFoundError, ValidationError
from site_erp.logger_config import logger
from site_erp.models.audit_log import AuditAction
from site_erp.models.site import Site
from site_erp.models.site_transaction import SiteTransaction, TxnNature, TxnSource
from site_erp.services.audit_log_service import log_action, snapshot
from site_erp.utils.parsing import clean_str, parse_date, parse_range_end, to_amount, utcnow

MODULE = "SiteTransaction"


def _enum_value(enum_cls, value, field: str):
    if value is None or value == "":
        return None
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().upper())
    except ValueError:
        raise ValidationError(f"Invalid {field}") from None


def _filtered_query(
    db: Session,
    deleted: bool,
    site_id: Optional[str] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    source: Optional[str] = None,
    nature: Optional[str] = None,
):
    query = (
        db.query(SiteTransaction)
        .options(joinedload(SiteTransaction.site))
        .filter(SiteTransaction.is_deleted.is_(deleted))
    )

    if site_id:
        query = query.filter(SiteTransaction.site_id == site_id)

    start = parse_date(date_from)
    if start:
        query = query.filter(SiteTransaction.txn_date >= start)
    end = parse_range_end(date_to)
    if end:
        query = query.filter(SiteTransaction.txn_date <= end)

    source_enum = _enum_value(TxnSource, source, "source")
    if source_enum:
        query = query.filter(SiteTransaction.source == source_enum)
    nature_enum = _enum_value(TxnNature, nature, "nature")
    if nature_enum:
        query = query.filter(SiteTransaction.nature == nature_enum)

    return query


# ================= GET TRANSACTIONS ===================

def get_site_transaction(db: Session, txn_id: str) -> Optional[SiteTransaction]:
    return db.query(SiteTransaction).filter(SiteTransaction.id == txn_id).first()


def get_active_transactions(db: Session, **filters) -> List[SiteTransaction]:
    """Active transactions, newest txn_date first. Filters: site_id, date_from, date_to, source, nature."""
    query = _filtered_query(db, False, **filters)
    return query.order_by(SiteTransaction.txn_date.desc(), SiteTransaction.id).all()


def get_transactions_by_site(db: Session, site_id: str, **filters) -> List[SiteTransaction]:
    filters["site_id"] = site_id
    return get_active_transactions(db, **filters)


def get_deleted_transactions(db: Session, **filters) -> List[SiteTransaction]:
    query = _filtered_query(db, True, **filters)
    return query.order_by(SiteTransaction.deleted_at.desc(), SiteTransaction.id).all()


# ================= MUTATIONS ===================

def create_site_transaction(
    db: Session,
    data: Dict[str, Any],
    user_id: Optional[str] = None,
    ip: Optional[str] = None,
) -> SiteTransaction:
    site_id = clean_str(data.get("site_id"))
    source = _enum_value(TxnSource, data.get("source"), "source")
    source_id = clean_str(data.get("source_id"))
    nature = _enum_value(TxnNature, data.get("nature"), "nature")

    if not site_id or not source or not source_id or not nature:
        raise ValidationError("siteId, source, sourceId and nature are required")

    amount = to_amount(data.get("amount"))
    if amount is None or amount <= 0:
        raise ValidationError("Invalid amount")

    txn_date = parse_date(data.get("txn_date"))
    if txn_date is None:
        raise ValidationError("Invalid txnDate")

    if not db.query(Site.id).filter(Site.id == site_id).first():
        raise NotFoundError(f"Site {site_id} not found")

    existing = (
        db.query(SiteTransaction.id)
        .filter(SiteTransaction.source == source, SiteTransaction.source_id == source_id)
        .first()
    )
    if existing:
        raise ValidationError(f"Transaction for {source.value} {source_id} already exists")

    try:
        txn = SiteTransaction(
            site_id=site_id,
            txn_date=txn_date,
            source=source,
            source_id=source_id,
            nature=nature,
            amount=amount,
            title=clean_str(data.get("title")) or None,
            remarks=clean_str(data.get("remarks")) or None,
            meta=data.get("meta"),
        )
        db.add(txn)
        db.flush()
        log_action(db, MODULE, txn.id, AuditAction.CREATE,
                   new_data=snapshot(txn), user_id=user_id, ip=ip)
        db.commit()
        db.refresh(txn)
    except IntegrityError:
        # lost a race with a concurrent insert of the same (source, sourceId)
        db.rollback()
        raise ValidationError(f"Transaction for {source.value} {source_id} already exists")
    except Exception:
        db.rollback()
        logger.exception("Error creating site transaction")
        raise

    logger.info(f"Site transaction {txn.id} created ({source.value} {source_id})")
    return txn


def _apply_update(db: Session, txn: SiteTransaction, data: Dict[str, Any]) -> None:
    if data.get("site_id") is not None:
        site_id = clean_str(data["site_id"])
        if not site_id or not db.query(Site.id).filter(Site.id == site_id).first():
            raise NotFoundError(f"Site {site_id} not found")
        txn.site_id = site_id

    if data.get("txn_date") is not None:
        txn_date = parse_date(data["txn_date"])
        if txn_date is None:
            raise ValidationError("Invalid txnDate")
        txn.txn_date = txn_date

    if data.get("source") is not None:
        txn.source = _enum_value(TxnSource, data["source"], "source")
    if data.get("source_id") is not None:
        txn.source_id = clean_str(data["source_id"])
    if data.get("nature") is not None:
        txn.nature = _enum_value(TxnNature, data["nature"], "nature")

    if data.get("amount") is not None:
        amount = to_amount(data["amount"])
        if amount is None or amount <= 0:
            raise ValidationError("Invalid amount")
        txn.amount = amount

    if "title" in data:
        txn.title = clean_str(data["title"]) or None
    if "remarks" in data:
        txn.remarks = clean_str(data["remarks"]) or None
    if "meta" in data:
        txn.meta = data["meta"]


def update_site_transaction(
    db: Session,
    txn_id: str,
    data: Dict[str, Any],
    user_id: Optional[str] = None,
    ip: Optional[str] = None,
) -> SiteTransaction:
    txn = get_site_transaction(db, txn_id)
    if not txn:
        raise NotFoundError("Transaction not found")

    old_data = snapshot(txn)

    try:
        _apply_update(db, txn, data)
        db.flush()
        log_action(db, MODULE, txn.id, AuditAction.UPDATE,
                   old_data=old_data, new_data=snapshot(txn), user_id=user_id, ip=ip)
        db.commit()
        db.refresh(txn)
    except IntegrityError:
        db.rollback()
        raise ValidationError("Another transaction already uses this source and sourceId")
    except ValueError:
        db.rollback()
        raise
    except Exception:
        db.rollback()
        logger.exception(f"Error updating site transaction {txn_id}")
        raise

    return txn


def _set_deleted(db: Session, txn_id: str, deleted: bool, user_id, ip) -> SiteTransaction:
    txn = get_site_transaction(db, txn_id)
    if not txn:
        raise NotFoundError("Transaction not found")

    old_data = snapshot(txn)
    try:
        txn.is_deleted = deleted
        txn.deleted_at = utcnow() if deleted else None
        txn.deleted_by = user_id if deleted else None
        db.flush()
        log_action(db, MODULE, txn.id,
                   AuditAction.DELETE if deleted else AuditAction.RESTORE,
                   old_data=old_data, new_data=snapshot(txn), user_id=user_id, ip=ip)
        db.commit()
        db.refresh(txn)
    except Exception:
        db.rollback()
        logger.exception(f"Error changing deleted state of site transaction {txn_id}")
        raise
    return txn


def soft_delete_site_transaction(db: Session, txn_id: str, user_id=None, ip=None) -> SiteTransaction:
    return _set_deleted(db, txn_id, True, user_id, ip)


def restore_site_transaction(db: Session, txn_id: str, user_id=None, ip=None) -> SiteTransaction:
    return _set_deleted(db, txn_id, False, user_id, ip)


def hard_delete_site_transaction(db: Session, txn_id: str, user_id=None, ip=None) -> bool:
    txn = get_site_transaction(db, txn_id)
    if not txn:
        raise NotFoundError("Transaction not found")

    old_data = snapshot(txn)
    try:
        db.delete(txn)
        log_action(db, MODULE, txn_id, AuditAction.HARD_DELETE,
                   old_data=old_data, user_id=user_id, ip=ip)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception(f"Error hard-deleting site transaction {txn_id}")
        raise

    logger.info(f"Site transaction {txn_id} permanently deleted by {user_id}")
    return True
