"""
Material supplier ledger rows: bulk entry with photo uploads, edits and hard deletes.

These rows feed the auto material expenses of the site expense view, so any
change here is reflected on the next read of that view.
"""

from typing import Any, Dict, List, Optional

from fastapi import UploadFile
from sqlalchemy.orm import Session

from site_erp.common.exceptions import NotFoundError, ValidationError
from site_erp.core.config import settings
from site_erp.logger_config import logger
from site_erp.models.ledger import Ledger
from site_erp.models.material_supplier_ledger import MaterialSupplierLedger
from site_erp.models.site import Site
from site_erp.utils.file_storage import LocalFileStorage, get_file_storage
from site_erp.utils.parsing import (
    clean_str,
    parse_date,
    to_decimal,
    to_decimal_or_zero,
    to_null_if_empty,
)

VEHICLE_FOLDER = "material-ledger/vehicle"
RECEIPT_FOLDER = "material-ledger/receipt"

TEXT_FIELDS = ("receipt_no", "parchi_photo", "otp", "vehicle_no", "vehicle_photo", "size", "remarks")
REQUIRED_NUMBER_FIELDS = ("qty", "rate")
OPTIONAL_NUMBER_FIELDS = (
    "royalty_qty", "royalty_rate", "royalty_amt",
    "gst_percent", "tax_amt", "total_amt",
    "payment_amt", "balance_amt",
)


def _row_values(r: Dict[str, Any]) -> Dict[str, Any]:
    """Column values for a new row from a loosely typed payload."""
    values = {
        "receipt_no": to_null_if_empty(r.get("receipt_no")),
        "otp": to_null_if_empty(r.get("otp")),
        "vehicle_no": to_null_if_empty(r.get("vehicle_no")),
        "material": clean_str(r.get("material")) or "",
        "size": to_null_if_empty(r.get("size")),
        "remarks": to_null_if_empty(r.get("remarks")),
    }
    for field in REQUIRED_NUMBER_FIELDS:
        values[field] = to_decimal_or_zero(r.get(field))
    for field in OPTIONAL_NUMBER_FIELDS:
        values[field] = to_decimal(r.get(field))
    return values


def _apply_patch(db: Session, row: MaterialSupplierLedger, patch: Dict[str, Any]) -> None:
    """Apply only the keys present in `patch`; blank optional values clear the column."""
    if patch.get("entry_date"):
        entry_date = parse_date(patch["entry_date"])
        if entry_date is None:
            raise ValidationError(f"Invalid entryDate for id {row.id}")
        row.entry_date = entry_date

    if "site_id" in patch:
        site_id = to_null_if_empty(patch["site_id"])
        if site_id and not db.query(Site.id).filter(Site.id == site_id).first():
            raise NotFoundError(f"Site {site_id} not found")
        row.site_id = site_id

    if "material" in patch:
        row.material = clean_str(patch["material"]) or ""

    for field in TEXT_FIELDS:
        if field in patch:
            setattr(row, field, to_null_if_empty(patch[field]))

    for field in REQUIRED_NUMBER_FIELDS:
        if field in patch:
            setattr(row, field, to_decimal_or_zero(patch[field]))

    for field in OPTIONAL_NUMBER_FIELDS:
        if field in patch:
            setattr(row, field, to_decimal(patch[field]))


# ==================== QUERY OPERATIONS ====================

def get_ledger_rows(
    db: Session,
    ledger_id: str,
    site_id: Optional[str] = None,
) -> List[MaterialSupplierLedger]:
    """Rows of one supplier ledger, newest entry first."""
    query = db.query(MaterialSupplierLedger).filter(MaterialSupplierLedger.ledger_id == ledger_id)
    if site_id:
        query = query.filter(MaterialSupplierLedger.site_id == site_id)
    return query.order_by(MaterialSupplierLedger.entry_date.desc(), MaterialSupplierLedger.id).all()


# ==================== MUTATIONS ====================

def create_bulk(
    db: Session,
    entry_date: Any,
    ledger_id: Optional[str],
    site_id: Optional[str],
    rows: List[Dict[str, Any]],
    unloading_files: List[UploadFile],
    receipt_files: List[UploadFile],
    storage: Optional[LocalFileStorage] = None,
) -> int:
    """
    Insert a batch of deliveries sharing one entry date, ledger and site.

    Each row carries exactly one unloading (vehicle) photo and one receipt
    (parchi) photo, matched by position. Counts are checked before anything
    is stored; rows are inserted all-or-nothing and stored files are removed
    again if the insert fails.
    """
    dt = parse_date(entry_date)
    if dt is None:
        raise ValidationError("Invalid entryDate")
    if not rows:
        raise ValidationError("rows required")
    ledger_id = to_null_if_empty(ledger_id)
    if not ledger_id:
        raise ValidationError("ledgerId required")
    if len(rows) > settings.MAX_BULK_FILES:
        raise ValidationError(f"At most {settings.MAX_BULK_FILES} rows can be uploaded at once")
    if len(unloading_files) != len(rows) or len(receipt_files) != len(rows):
        raise ValidationError("Files count must match rows count")

    if not db.query(Ledger.id).filter(Ledger.id == ledger_id).first():
        raise NotFoundError("Ledger not found")

    site_id = to_null_if_empty(site_id)
    if site_id and not db.query(Site.id).filter(Site.id == site_id).first():
        raise NotFoundError(f"Site {site_id} not found")

    storage = storage or get_file_storage()
    stored_urls: List[str] = []

    try:
        for i, r in enumerate(rows):
            vehicle_url = storage.save(unloading_files[i], VEHICLE_FOLDER)
            stored_urls.append(vehicle_url)
            receipt_url = storage.save(receipt_files[i], RECEIPT_FOLDER)
            stored_urls.append(receipt_url)

            row = MaterialSupplierLedger(
                ledger_id=ledger_id,
                site_id=site_id,
                entry_date=dt,
                vehicle_photo=vehicle_url,
                parchi_photo=receipt_url,
                **_row_values(r),
            )
            db.add(row)

        db.commit()
    except Exception:
        db.rollback()
        for url in stored_urls:
            storage.delete(url)
        logger.exception(f"Error creating material ledger rows for ledger {ledger_id}")
        raise

    logger.info(f"Created {len(rows)} material ledger rows for ledger {ledger_id}")
    return len(rows)


def update_one(db: Session, row_id: str, patch: Dict[str, Any]) -> MaterialSupplierLedger:
    row = db.query(MaterialSupplierLedger).filter(MaterialSupplierLedger.id == row_id).first()
    if not row:
        raise NotFoundError("Record not found")

    try:
        _apply_patch(db, row, patch)
        db.commit()
        db.refresh(row)
    except ValueError:
        db.rollback()
        raise
    except Exception:
        db.rollback()
        logger.exception(f"Error updating material ledger row {row_id}")
        raise

    return row


def bulk_update(db: Session, rows: List[Dict[str, Any]]) -> int:
    """Patch several rows; any missing id or invalid value rejects the whole batch."""
    if not rows:
        raise ValidationError("rows required")

    try:
        for patch in rows:
            row_id = clean_str(patch.get("id"))
            if not row_id:
                raise ValidationError("Row id missing in bulk update")

            row = db.query(MaterialSupplierLedger).filter(MaterialSupplierLedger.id == row_id).first()
            if not row:
                raise NotFoundError(f"Record not found: {row_id}")

            _apply_patch(db, row, patch)

        db.commit()
    except ValueError:
        db.rollback()
        raise
    except Exception:
        db.rollback()
        logger.exception("Error bulk updating material ledger rows")
        raise

    logger.info(f"Bulk updated {len(rows)} material ledger rows")
    return len(rows)


def delete_one(db: Session, row_id: str) -> bool:
    row = db.query(MaterialSupplierLedger).filter(MaterialSupplierLedger.id == row_id).first()
    if not row:
        raise NotFoundError("Record not found")

    db.delete(row)
    try:
        db.commit()
    except Exception:
        db.rollback()
        logger.exception(f"Error deleting material ledger row {row_id}")
        raise
    return True


def bulk_delete(db: Session, ids: List[str]) -> int:
    """Hard delete by id; unknown ids are ignored and the deleted count returned."""
    ids = [i for i in (clean_str(x) for x in ids or []) if i]
    if not ids:
        raise ValidationError("ids required")

    try:
        count = (
            db.query(MaterialSupplierLedger)
            .filter(MaterialSupplierLedger.id.in_(ids))
            .delete(synchronize_session=False)
        )
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Error bulk deleting material ledger rows")
        raise

    logger.info(f"Deleted {count} material ledger rows")
    return count
