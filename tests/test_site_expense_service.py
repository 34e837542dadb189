from datetime import datetime
from decimal import Decimal

import pytest

from site_erp.common.exceptions import NotFoundError, ValidationError
from site_erp.models import AuditAction, AuditLog, SiteExpense, SiteTransaction, TxnNature, TxnSource
from site_erp.services.site_expense_service import (
    create_site_expense,
    get_all_site_expenses,
    get_deleted_site_expenses,
    get_expenses_by_site,
    hard_delete_site_expense,
    restore_site_expense,
    soft_delete_site_expense,
    update_site_expense,
)


def mirrors_for(db, expense_id):
    return (
        db.query(SiteTransaction)
        .filter(SiteTransaction.source == TxnSource.SITE_EXPENSE, SiteTransaction.source_id == expense_id)
        .all()
    )


@pytest.fixture
def expense(db, make_site):
    make_site("S1")
    return create_site_expense(db, {
        "site_id": "S1",
        "expense_date": "2024-03-01",
        "expense_title": "Diesel",
        "expense_summary": "JCB fuel",
        "payment_details": "Cash",
        "amount": 500,
    }, user_id="U1", ip="10.0.0.1")


def test_create_writes_expense_mirror_and_audit(db, expense):
    assert expense.id.startswith("SEXP-")
    assert expense.amount == Decimal("500.00")
    assert expense.expense_date == datetime(2024, 3, 1)

    mirrors = mirrors_for(db, expense.id)
    assert len(mirrors) == 1
    txn = mirrors[0]
    assert txn.site_id == "S1"
    assert txn.nature == TxnNature.DEBIT
    assert txn.amount == Decimal("500.00")
    assert txn.txn_date == expense.expense_date
    assert txn.title == "Diesel"
    assert txn.remarks == "Cash"
    assert txn.meta == {"paymentDetails": "Cash", "expenseTitle": "Diesel", "summary": "JCB fuel"}
    assert txn.is_deleted is False

    audit = db.query(AuditLog).filter(AuditLog.record_id == expense.id).one()
    assert audit.module == "SiteExpense"
    assert audit.action == AuditAction.CREATE
    assert audit.user_id == "U1"
    assert audit.ip == "10.0.0.1"
    assert audit.new_data["amount"] == 500.0


def test_mirror_title_falls_back_to_summary_then_default(db, make_site):
    make_site("S1")
    with_summary = create_site_expense(
        db, {"site_id": "S1", "expense_date": "2024-03-01", "expense_summary": "Tea", "amount": 40}
    )
    bare = create_site_expense(db, {"site_id": "S1", "expense_date": "2024-03-01", "amount": 40})

    assert mirrors_for(db, with_summary.id)[0].title == "Tea"
    assert mirrors_for(db, bare.id)[0].title == "Site Expense"
    assert mirrors_for(db, bare.id)[0].remarks is None


@pytest.mark.parametrize("payload, message", [
    ({"site_id": "S1", "expense_date": "2024-03-01", "amount": 0}, "Invalid amount"),
    ({"site_id": "S1", "expense_date": "2024-03-01", "amount": -10}, "Invalid amount"),
    ({"site_id": "S1", "expense_date": "2024-03-01", "amount": "abc"}, "Invalid amount"),
    ({"site_id": "S1", "expense_date": "2024-03-01", "amount": Decimal("1e30")}, "Invalid amount"),
    ({"site_id": "S1", "expense_date": "2024-03-01", "amount": "10000000000000"}, "Invalid amount"),
    ({"site_id": "S1", "expense_date": "not-a-date", "amount": 10}, "Invalid expenseDate"),
    ({"site_id": "", "expense_date": "2024-03-01", "amount": 10}, "siteId is required"),
])
def test_create_rejects_invalid_input(db, make_site, payload, message):
    make_site("S1")

    with pytest.raises(ValidationError, match=message):
        create_site_expense(db, payload)

    assert db.query(SiteExpense).count() == 0
    assert db.query(SiteTransaction).count() == 0


def test_create_for_unknown_site_is_not_found(db):
    with pytest.raises(NotFoundError):
        create_site_expense(db, {"site_id": "NOPE", "expense_date": "2024-03-01", "amount": 10})


def test_update_refreshes_mirror_in_place(db, make_site, expense):
    make_site("S2", site_name="Canal Lining")

    updated = update_site_expense(db, expense.id, {
        "amount": "750.5",
        "site_id": "S2",
        "expense_title": "",
        "expense_summary": "Generator diesel",
    }, user_id="U2")

    assert updated.amount == Decimal("750.50")
    assert updated.expense_title == ""
    mirrors = mirrors_for(db, expense.id)
    assert len(mirrors) == 1
    assert mirrors[0].amount == Decimal("750.50")
    assert mirrors[0].site_id == "S2"
    assert mirrors[0].title == "Generator diesel"

    actions = [a.action for a in db.query(AuditLog).filter(AuditLog.record_id == expense.id)]
    assert AuditAction.UPDATE in actions


def test_update_recreates_missing_mirror(db, expense):
    db.query(SiteTransaction).delete()
    db.commit()

    update_site_expense(db, expense.id, {"amount": 600})

    mirrors = mirrors_for(db, expense.id)
    assert len(mirrors) == 1
    assert mirrors[0].amount == Decimal("600.00")


def test_update_with_invalid_amount_changes_nothing(db, expense):
    with pytest.raises(ValidationError):
        update_site_expense(db, expense.id, {"expense_title": "Changed", "amount": 0})

    db.refresh(expense)
    assert expense.expense_title == "Diesel"
    assert mirrors_for(db, expense.id)[0].amount == Decimal("500.00")


def test_update_unknown_expense(db):
    with pytest.raises(NotFoundError):
        update_site_expense(db, "SEXP-MISSING", {"amount": 10})


def test_soft_delete_and_restore_move_both_rows(db, expense):
    deleted = soft_delete_site_expense(db, expense.id, user_id="U1")

    assert deleted.is_deleted is True
    assert deleted.deleted_by == "U1"
    assert deleted.deleted_at is not None
    txn = mirrors_for(db, expense.id)[0]
    assert txn.is_deleted is True
    assert txn.deleted_by == "U1"
    assert [e.id for e in get_deleted_site_expenses(db)] == [expense.id]
    assert get_expenses_by_site(db, "S1") == []

    restored = restore_site_expense(db, expense.id, user_id="U1")

    assert restored.is_deleted is False
    assert restored.deleted_at is None
    assert restored.deleted_by is None
    txn = mirrors_for(db, expense.id)[0]
    assert txn.is_deleted is False
    assert txn.deleted_at is None
    assert [r.id for r in get_expenses_by_site(db, "S1")] == [expense.id]

    actions = {a.action for a in db.query(AuditLog).filter(AuditLog.record_id == expense.id)}
    assert {AuditAction.DELETE, AuditAction.RESTORE} <= actions


def test_soft_delete_without_mirror_rolls_back(db, expense):
    db.query(SiteTransaction).delete()
    db.commit()

    with pytest.raises(NotFoundError):
        soft_delete_site_expense(db, expense.id)

    db.refresh(expense)
    assert expense.is_deleted is False
    assert db.query(AuditLog).filter(AuditLog.action == AuditAction.DELETE).count() == 0


def test_hard_delete_removes_expense_and_mirror(db, expense):
    assert hard_delete_site_expense(db, expense.id, user_id="U1") is True

    assert db.query(SiteExpense).count() == 0
    assert mirrors_for(db, expense.id) == []
    audit = db.query(AuditLog).filter(AuditLog.action == AuditAction.HARD_DELETE).one()
    assert audit.record_id == expense.id
    assert audit.old_data["id"] == expense.id


def test_hard_delete_unknown_expense(db):
    with pytest.raises(NotFoundError):
        hard_delete_site_expense(db, "SEXP-MISSING")


def test_merged_view_orders_by_date_then_id(db, make_site, make_supplier, make_material_row):
    make_site("S1")
    supplier = make_supplier("Alpha Traders")
    make_material_row(supplier, material="Cement", total_amt="900", entry_date=datetime(2024, 3, 5))
    older = create_site_expense(db, {"site_id": "S1", "expense_date": "2024-03-01", "amount": 100})
    newest = create_site_expense(db, {"site_id": "S1", "expense_date": "2024-03-10", "amount": 100})
    same_day = create_site_expense(db, {"site_id": "S1", "expense_date": "2024-03-05", "amount": 100})

    rows = get_all_site_expenses(db)

    assert [r.id for r in rows] == [
        newest.id,
        "AUTO_MSL_S1_cement",  # "AUTO..." sorts before "SEXP-..." on the same date
        same_day.id,
        older.id,
    ]
    assert [r.is_auto for r in rows] == [False, True, False, False]
