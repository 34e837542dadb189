from collections import defaultdict
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from site_erp.logger_config import logger
from site_erp.models.labour import LabourPayment
from site_erp.models.material_supplier_ledger import MaterialSupplierLedger
from site_erp.models.site import Site
from site_erp.models.site_transaction import SiteTransaction, TxnNature
from site_erp.services.auto_expense_service import row_total
from site_erp.utils.parsing import TWO_PLACES, parse_date, parse_range_end, to_decimal_or_zero


def _money(value: Decimal) -> float:
    return float(value.quantize(TWO_PLACES))


def get_site_profit_data(
    db: Session,
    site_id: Optional[str] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
) -> List[Dict]:
    """
    Profit per active site.

    expenses        = active DEBIT transactions + material purchases + labour payments
    amount_received = active CREDIT transactions
    profit          = amount_received - expenses
    """
    start = parse_date(date_from)
    end = parse_range_end(date_to)

    sites_query = db.query(Site).filter(Site.is_deleted.is_(False))
    if site_id:
        sites_query = sites_query.filter(Site.id == site_id)
    sites = sites_query.order_by(Site.site_name).all()

    # transactions by site + nature
    txn_query = db.query(
        SiteTransaction.site_id,
        SiteTransaction.nature,
        func.coalesce(func.sum(SiteTransaction.amount), 0),
    ).filter(SiteTransaction.is_deleted.is_(False))
    if site_id:
        txn_query = txn_query.filter(SiteTransaction.site_id == site_id)
    if start:
        txn_query = txn_query.filter(SiteTransaction.txn_date >= start)
    if end:
        txn_query = txn_query.filter(SiteTransaction.txn_date <= end)

    debit: Dict[str, Decimal] = defaultdict(Decimal)
    credit: Dict[str, Decimal] = defaultdict(Decimal)
    for row_site_id, nature, total in txn_query.group_by(SiteTransaction.site_id, SiteTransaction.nature):
        if nature == TxnNature.DEBIT:
            debit[row_site_id] += to_decimal_or_zero(total)
        elif nature == TxnNature.CREDIT:
            credit[row_site_id] += to_decimal_or_zero(total)

    # material purchases; total_amt falls back to qty * rate per row
    mat_query = db.query(MaterialSupplierLedger).filter(MaterialSupplierLedger.site_id.isnot(None))
    if site_id:
        mat_query = mat_query.filter(MaterialSupplierLedger.site_id == site_id)
    if start:
        mat_query = mat_query.filter(MaterialSupplierLedger.entry_date >= start)
    if end:
        mat_query = mat_query.filter(MaterialSupplierLedger.entry_date <= end)

    material: Dict[str, Decimal] = defaultdict(Decimal)
    for r in mat_query.all():
        material[r.site_id] += row_total(r)

    # labour payments
    lab_query = db.query(
        LabourPayment.site_id,
        func.coalesce(func.sum(LabourPayment.amount), 0),
    )
    if site_id:
        lab_query = lab_query.filter(LabourPayment.site_id == site_id)
    if start:
        lab_query = lab_query.filter(LabourPayment.payment_date >= start)
    if end:
        lab_query = lab_query.filter(LabourPayment.payment_date <= end)

    labour: Dict[str, Decimal] = {
        row_site_id: to_decimal_or_zero(total)
        for row_site_id, total in lab_query.group_by(LabourPayment.site_id)
    }

    result = []
    for site in sites:
        material_cost = material.get(site.id, Decimal("0"))
        labour_cost = labour.get(site.id, Decimal("0"))
        expenses = debit.get(site.id, Decimal("0")) + material_cost + labour_cost
        received = credit.get(site.id, Decimal("0"))
        result.append({
            "site_id": site.id,
            "site_name": site.site_name,
            "department": site.department or "N/A",
            "status": site.status,
            "expenses": _money(expenses),
            "amount_received": _money(received),
            "profit": _money(received - expenses),
            "material_purchase_cost": _money(material_cost),
            "labour_contractor_cost": _money(labour_cost),
        })

    logger.debug(f"Computed profit for {len(result)} sites")
    return result
