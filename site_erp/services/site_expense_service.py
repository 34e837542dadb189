"""
Manual site expenses and their site_transactions mirror.

Every write to a SiteExpense runs as one unit of work together with the
matching SiteTransaction (source=SITE_EXPENSE, source_id=expense.id) and an
audit entry, so the expense and its mirror are never observed out of step.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session, joinedload

from site_erp.common.exceptions import NotFoundError, ValidationError
from site_erp.logger_config import logger
from site_erp.models.audit_log import AuditAction
from site_erp.models.site import Site
from site_erp.models.site_expense import SiteExpense
from site_erp.models.site_transaction import SiteTransaction, TxnNature, TxnSource
from site_erp.services.audit_log_service import log_action, snapshot
from site_erp.services.auto_expense_service import (
    get_auto_labour_expenses,
    get_auto_material_expenses,
)
from site_erp.services.expense_rows import ExpenseRow, ManualExpenseRow, sort_expense_rows
from site_erp.utils.parsing import clean_str, parse_date, to_amount, utcnow

MODULE = "SiteExpense"
TXN_SOURCE = TxnSource.SITE_EXPENSE
TXN_NATURE = TxnNature.DEBIT
DEFAULT_TXN_TITLE = "Site Expense"


# ==================== HELPERS ====================

def _require_site(db: Session, site_id: Optional[str]) -> str:
    site_id = clean_str(site_id)
    if not site_id:
        raise ValidationError("siteId is required")
    if not db.query(Site.id).filter(Site.id == site_id).first():
        raise NotFoundError(f"Site {site_id} not found")
    return site_id


def _valid_date(value: Any):
    parsed = parse_date(value)
    if parsed is None:
        raise ValidationError("Invalid expenseDate")
    return parsed


def _valid_amount(value: Any):
    amount = to_amount(value)
    if amount is None or amount <= 0:
        raise ValidationError("Invalid amount")
    return amount


def _get_mirror(db: Session, expense_id: str) -> Optional[SiteTransaction]:
    return (
        db.query(SiteTransaction)
        .filter(SiteTransaction.source == TXN_SOURCE, SiteTransaction.source_id == expense_id)
        .one_or_none()
    )


def upsert_transaction_for_expense(db: Session, expense: SiteExpense) -> SiteTransaction:
    """
    Create or refresh the SITE_EXPENSE transaction keyed by (source, expense.id).
    Soft-delete flags are left untouched; they are toggled only by
    soft delete / restore.
    """
    title = (
        (expense.expense_title or "").strip()
        or (expense.summary or "").strip()
        or DEFAULT_TXN_TITLE
    )
    values = {
        "site_id": expense.site_id,
        "txn_date": expense.expense_date,
        "nature": TXN_NATURE,
        "amount": expense.amount,
        "title": title,
        "remarks": (expense.payment_details or "").strip() or None,
        "meta": {
            "paymentDetails": expense.payment_details or "",
            "expenseTitle": expense.expense_title or "",
            "summary": expense.summary or "",
        },
    }

    txn = _get_mirror(db, expense.id)
    if txn is None:
        txn = SiteTransaction(source=TXN_SOURCE, source_id=expense.id, **values)
        db.add(txn)
    else:
        for key, value in values.items():
            setattr(txn, key, value)
    db.flush()
    return txn


# ==================== QUERY OPERATIONS ====================

def get_site_expense(db: Session, expense_id: str) -> Optional[SiteExpense]:
    return db.query(SiteExpense).filter(SiteExpense.id == expense_id).first()


def _manual_rows(db: Session, site_id: Optional[str] = None) -> List[ManualExpenseRow]:
    query = (
        db.query(SiteExpense)
        .options(joinedload(SiteExpense.site))
        .filter(SiteExpense.is_deleted.is_(False))
    )
    if site_id:
        query = query.filter(SiteExpense.site_id == site_id)
    expenses = query.order_by(SiteExpense.expense_date.desc()).all()
    return [ManualExpenseRow(e) for e in expenses]


def get_all_site_expenses(db: Session) -> List[ExpenseRow]:
    """Active manual expenses merged with derived material/labour expenses."""
    rows: List[ExpenseRow] = []
    rows.extend(_manual_rows(db))
    rows.extend(get_auto_material_expenses(db))
    rows.extend(get_auto_labour_expenses(db))
    return sort_expense_rows(rows)


def get_expenses_by_site(db: Session, site_id: str) -> List[ExpenseRow]:
    """Merged expense view for a single site."""
    rows: List[ExpenseRow] = []
    rows.extend(_manual_rows(db, site_id))
    rows.extend(get_auto_material_expenses(db, site_id))
    rows.extend(get_auto_labour_expenses(db, site_id))
    return sort_expense_rows(rows)


def get_deleted_site_expenses(db: Session, site_id: Optional[str] = None) -> List[SiteExpense]:
    """Soft-deleted manual expenses, most recently deleted first."""
    query = (
        db.query(SiteExpense)
        .options(joinedload(SiteExpense.site))
        .filter(SiteExpense.is_deleted.is_(True))
    )
    if site_id:
        query = query.filter(SiteExpense.site_id == site_id)
    return query.order_by(SiteExpense.deleted_at.desc()).all()


# ==================== MUTATIONS ====================

def create_site_expense(
    db: Session,
    data: Dict[str, Any],
    user_id: Optional[str] = None,
    ip: Optional[str] = None,
) -> SiteExpense:
    """
    Create a manual expense, its DEBIT transaction mirror and a CREATE audit
    entry in one commit.

    data keys: site_id, expense_date, amount, and optionally expense_title,
    expense_summary, payment_details.
    """
    expense_date = _valid_date(data.get("expense_date"))
    amount = _valid_amount(data.get("amount"))
    site_id = _require_site(db, data.get("site_id"))

    try:
        expense = SiteExpense(
            site_id=site_id,
            expense_date=expense_date,
            expense_title=clean_str(data.get("expense_title")) or "",
            summary=clean_str(data.get("expense_summary")) or "",
            payment_details=clean_str(data.get("payment_details")) or None,
            amount=amount,
        )
        db.add(expense)
        db.flush()  # get expense.id for the mirror

        upsert_transaction_for_expense(db, expense)
        log_action(
            db, MODULE, expense.id, AuditAction.CREATE,
            new_data=snapshot(expense), user_id=user_id, ip=ip,
        )

        db.commit()
        db.refresh(expense)
    except Exception:
        db.rollback()
        logger.exception("Error creating site expense")
        raise

    logger.info(f"Site expense {expense.id} created for site {site_id} by {user_id}")
    return expense


def update_site_expense(
    db: Session,
    expense_id: str,
    data: Dict[str, Any],
    user_id: Optional[str] = None,
    ip: Optional[str] = None,
) -> SiteExpense:
    """Apply a partial patch and refresh the mirror in place (never duplicates it)."""
    expense = get_site_expense(db, expense_id)
    if not expense:
        raise NotFoundError("Expense not found")

    old_data = snapshot(expense)

    try:
        if data.get("site_id") is not None:
            expense.site_id = _require_site(db, data["site_id"])

        if data.get("expense_date") is not None:
            expense.expense_date = _valid_date(data["expense_date"])

        if "expense_title" in data:
            expense.expense_title = clean_str(data["expense_title"]) or ""

        if "expense_summary" in data:
            expense.summary = clean_str(data["expense_summary"]) or ""

        if "payment_details" in data:
            expense.payment_details = clean_str(data["payment_details"]) or None

        if data.get("amount") is not None:
            expense.amount = _valid_amount(data["amount"])

        db.flush()
        upsert_transaction_for_expense(db, expense)
        log_action(
            db, MODULE, expense.id, AuditAction.UPDATE,
            old_data=old_data, new_data=snapshot(expense), user_id=user_id, ip=ip,
        )

        db.commit()
        db.refresh(expense)
    except ValueError:
        db.rollback()
        raise
    except Exception:
        db.rollback()
        logger.exception(f"Error updating site expense {expense_id}")
        raise

    logger.info(f"Site expense {expense_id} updated by {user_id}")
    return expense


def _set_deleted_state(
    db: Session,
    expense_id: str,
    deleted: bool,
    user_id: Optional[str],
    ip: Optional[str],
) -> SiteExpense:
    expense = get_site_expense(db, expense_id)
    if not expense:
        raise NotFoundError("Expense not found")

    old_data = snapshot(expense)
    deleted_at = utcnow() if deleted else None
    deleted_by = user_id if deleted else None

    try:
        expense.is_deleted = deleted
        expense.deleted_at = deleted_at
        expense.deleted_by = deleted_by

        # The mirror must already exist; a missing one means the pair has
        # drifted and the whole operation is refused.
        txn = _get_mirror(db, expense_id)
        if txn is None:
            raise NotFoundError(f"Transaction mirror for expense {expense_id} not found")
        txn.is_deleted = deleted
        txn.deleted_at = deleted_at
        txn.deleted_by = deleted_by

        db.flush()
        log_action(
            db, MODULE, expense_id,
            AuditAction.DELETE if deleted else AuditAction.RESTORE,
            old_data=old_data, new_data=snapshot(expense), user_id=user_id, ip=ip,
        )

        db.commit()
        db.refresh(expense)
    except ValueError:
        db.rollback()
        raise
    except Exception:
        db.rollback()
        logger.exception(f"Error changing deleted state of site expense {expense_id}")
        raise

    return expense


def soft_delete_site_expense(
    db: Session,
    expense_id: str,
    user_id: Optional[str] = None,
    ip: Optional[str] = None,
) -> SiteExpense:
    """Move an expense and its mirror to deleted records."""
    expense = _set_deleted_state(db, expense_id, True, user_id, ip)
    logger.info(f"Site expense {expense_id} soft-deleted by {user_id}")
    return expense


def restore_site_expense(
    db: Session,
    expense_id: str,
    user_id: Optional[str] = None,
    ip: Optional[str] = None,
) -> SiteExpense:
    """Bring a soft-deleted expense and its mirror back."""
    expense = _set_deleted_state(db, expense_id, False, user_id, ip)
    logger.info(f"Site expense {expense_id} restored by {user_id}")
    return expense


def hard_delete_site_expense(
    db: Session,
    expense_id: str,
    user_id: Optional[str] = None,
    ip: Optional[str] = None,
) -> bool:
    """Permanently remove an expense and every mirror row for it. No recovery path."""
    expense = get_site_expense(db, expense_id)
    if not expense:
        raise NotFoundError("Expense not found")

    old_data = snapshot(expense)

    try:
        db.query(SiteTransaction).filter(
            SiteTransaction.source == TXN_SOURCE,
            SiteTransaction.source_id == expense_id,
        ).delete(synchronize_session=False)
        db.delete(expense)
        log_action(
            db, MODULE, expense_id, AuditAction.HARD_DELETE,
            old_data=old_data, user_id=user_id, ip=ip,
        )
        db.commit()
    except Exception:
        db.rollback()
        logger.exception(f"Error hard-deleting site expense {expense_id}")
        raise

    logger.info(f"Site expense {expense_id} permanently deleted by {user_id}")
    return True
