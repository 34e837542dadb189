"""
Auto expense projection.

Derives read-only expense rows from ledger data on every call:
- material supplier ledger rows grouped by (site, material), material matched
  by its slug (case and punctuation ignored, so every group owns its id),
  amount = sum(total_amt or qty * rate), dated at the most
  recent delivery, paid-to listing the contributing suppliers;
- labour payments grouped by (site, contractor).

Nothing is cached or persisted; output is a pure function of current ledger
state and row ids are stable for the same site + material / contractor.
"""

import re
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from site_erp.logger_config import logger
from site_erp.models.labour import LabourContractor, LabourPayment
from site_erp.models.ledger import Ledger
from site_erp.models.material_supplier_ledger import MaterialSupplierLedger
from site_erp.models.site import Site
from site_erp.services.expense_rows import (
    LABOUR_SOURCE,
    MATERIAL_SOURCE,
    AutoExpenseRow,
    SiteInfo,
    sort_expense_rows,
)
from site_erp.utils.parsing import TWO_PLACES, to_decimal, to_decimal_or_zero, utcnow

MATERIAL_AUTO_SOURCE = "MATERIAL_SUPPLIER_LEDGER"
MATERIAL_SUMMARY = "Material Purchase (Auto)"
LABOUR_TITLE = "Labour Payment"

MAX_LISTED_SUPPLIERS = 3
MAX_SLUG_LENGTH = 50
UNKNOWN_LEDGER = "Unknown Ledger"
UNKNOWN_SITE = "N/A"

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def row_total(row) -> Decimal:
    """Stored total when present, else qty * rate."""
    total = to_decimal(row.total_amt)
    if total is not None:
        return total
    return to_decimal_or_zero(row.qty) * to_decimal_or_zero(row.rate)


def slugify_material(material: str) -> str:
    slug = _NON_ALNUM.sub("_", (material or "").strip().lower()).strip("_")
    return slug[:MAX_SLUG_LENGTH] or "material"


def make_material_auto_id(site_id: str, material: str) -> str:
    return f"AUTO_MSL_{site_id}_{slugify_material(material)}"


def make_labour_auto_id(site_id: str, contractor_id: str) -> str:
    return f"AUTO_LAB_{site_id}_{contractor_id}"


def format_supplier_names(names: List[str]) -> str:
    """'A, B, C' for up to three suppliers, 'A, B, C +N more' beyond that."""
    if len(names) <= MAX_LISTED_SUPPLIERS:
        return ", ".join(names)
    shown = ", ".join(names[:MAX_LISTED_SUPPLIERS])
    return f"{shown} +{len(names) - MAX_LISTED_SUPPLIERS} more"


class _MaterialGroup:
    __slots__ = ("site_id", "material", "amount", "max_date", "suppliers")

    def __init__(self, site_id, material, max_date):
        self.site_id = site_id
        self.material = material
        self.amount = Decimal("0")
        self.max_date = max_date
        self.suppliers: List[str] = []


def aggregate_material_rows(
    rows: Iterable,
    site_names: Dict[str, str],
    ledger_names: Dict[str, str],
) -> List[AutoExpenseRow]:
    """
    Group material ledger rows into one auto expense per (site, material).

    `rows` need site_id, entry_date, material, qty, rate, total_amt and
    ledger_id attributes. The first row seen for a group decides the
    material's displayed casing.
    """
    groups: Dict[str, _MaterialGroup] = {}

    for r in rows:
        if not r.site_id:
            continue
        material = (r.material or "").strip()
        if not material:
            continue

        key = make_material_auto_id(r.site_id, material)
        entry_date = r.entry_date or utcnow()

        group = groups.get(key)
        if group is None:
            group = _MaterialGroup(r.site_id, material, entry_date)
            groups[key] = group
        elif entry_date > group.max_date:
            group.max_date = entry_date

        group.amount += row_total(r)

        supplier = ledger_names.get(r.ledger_id) if r.ledger_id else None
        supplier = supplier or UNKNOWN_LEDGER
        if supplier not in group.suppliers:
            group.suppliers.append(supplier)

    auto_rows = [
        AutoExpenseRow(
            id=make_material_auto_id(g.site_id, g.material),
            site=SiteInfo(id=g.site_id, site_name=site_names.get(g.site_id, UNKNOWN_SITE)),
            expense_date=g.max_date,
            expense_title=g.material,
            summary=MATERIAL_SUMMARY,
            payment_details=format_supplier_names(g.suppliers),
            amount=g.amount.quantize(TWO_PLACES),
            auto_source=MATERIAL_AUTO_SOURCE,
            source=MATERIAL_SOURCE,
        )
        for g in groups.values()
    ]
    return sort_expense_rows(auto_rows)


def _site_names(db: Session) -> Dict[str, str]:
    return {site_id: name for site_id, name in db.query(Site.id, Site.site_name).all()}


def get_auto_material_expenses(db: Session, site_id: Optional[str] = None) -> List[AutoExpenseRow]:
    """Auto expense rows from the material supplier ledger, optionally for one site."""
    site_names = _site_names(db)

    query = db.query(MaterialSupplierLedger)
    if site_id:
        query = query.filter(MaterialSupplierLedger.site_id == site_id)
    ledger_rows = query.order_by(
        MaterialSupplierLedger.entry_date.desc(), MaterialSupplierLedger.id
    ).all()

    # one lookup for every supplier referenced by the rows
    ledger_ids = {r.ledger_id for r in ledger_rows if r.ledger_id}
    ledger_names: Dict[str, str] = {}
    if ledger_ids:
        ledger_names = {
            ledger_id: name
            for ledger_id, name in db.query(Ledger.id, Ledger.name).filter(Ledger.id.in_(ledger_ids)).all()
        }

    auto_rows = aggregate_material_rows(ledger_rows, site_names, ledger_names)
    logger.debug(f"Derived {len(auto_rows)} material auto expenses from {len(ledger_rows)} ledger rows")
    return auto_rows


def get_auto_labour_expenses(db: Session, site_id: Optional[str] = None) -> List[AutoExpenseRow]:
    """Auto expense rows totalling labour payments per (site, contractor)."""
    site_names = _site_names(db)

    query = db.query(
        LabourPayment.site_id,
        LabourPayment.contractor_id,
        func.coalesce(func.sum(LabourPayment.amount), 0),
        func.max(LabourPayment.payment_date),
    )
    if site_id:
        query = query.filter(LabourPayment.site_id == site_id)
    grouped = query.group_by(LabourPayment.site_id, LabourPayment.contractor_id).all()

    contractor_ids = {contractor_id for _, contractor_id, _, _ in grouped if contractor_id}
    contractor_names: Dict[str, str] = {}
    if contractor_ids:
        contractor_names = {
            cid: name
            for cid, name in db.query(LabourContractor.id, LabourContractor.name)
            .filter(LabourContractor.id.in_(contractor_ids))
            .all()
        }

    rows = [
        AutoExpenseRow(
            id=make_labour_auto_id(g_site_id, contractor_id),
            site=SiteInfo(id=g_site_id, site_name=site_names.get(g_site_id, UNKNOWN_SITE)),
            expense_date=max_date or utcnow(),
            expense_title=LABOUR_TITLE,
            summary=LABOUR_TITLE,
            payment_details=contractor_names.get(contractor_id, "Labour Contractor"),
            amount=to_decimal_or_zero(total).quantize(TWO_PLACES),
            auto_source=LABOUR_SOURCE,
            source=LABOUR_SOURCE,
        )
        for g_site_id, contractor_id, total, max_date in grouped
    ]
    return sort_expense_rows(rows)
