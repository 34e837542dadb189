from collections import defaultdict
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from site_erp.common.exceptions import NotFoundError, ValidationError
from site_erp.logger_config import logger
from site_erp.models.labour import LabourContract, LabourContractor, LabourPayment, PaymentMode
from site_erp.models.site import Site
from site_erp.utils.parsing import (
    TWO_PLACES,
    clean_str,
    parse_date,
    parse_range_end,
    to_amount,
    to_decimal_or_zero,
    to_null_if_empty,
)


class LabourLedgerService:
    """
    Labour contractors, their per-site contracts and the payments made against them.
    Everything here is hard delete; deletes are refused while dependent rows exist.
    """
    def __init__(self, db: Session):
        self.db = db

    # ================= HELPERS ===================

    def _commit(self, obj=None, action: str = "saving labour ledger"):
        try:
            self.db.commit()
            if obj is not None:
                self.db.refresh(obj)
        except Exception:
            self.db.rollback()
            logger.exception(f"Error {action}")
            raise

    def _require_contractor(self, contractor_id: Optional[str]) -> LabourContractor:
        contractor = self.get_contractor(contractor_id) if contractor_id else None
        if not contractor:
            raise NotFoundError("Contractor not found")
        return contractor

    def _require_site(self, site_id: Optional[str]) -> str:
        if not site_id or not self.db.query(Site.id).filter(Site.id == site_id).first():
            raise NotFoundError(f"Site {site_id} not found")
        return site_id

    # ================= CONTRACTORS ===================

    def get_contractor(self, contractor_id: str) -> Optional[LabourContractor]:
        return self.db.query(LabourContractor).filter(LabourContractor.id == contractor_id).first()

    def list_contractors(self) -> List[LabourContractor]:
        return (
            self.db.query(LabourContractor)
            .order_by(LabourContractor.created_at.desc(), LabourContractor.id)
            .all()
        )

    def create_contractor(self, data: Dict[str, Any]) -> LabourContractor:
        name = clean_str(data.get("name"))
        if not name:
            raise ValidationError("name is required")

        contractor = LabourContractor(
            name=name,
            mobile=to_null_if_empty(data.get("mobile")),
            address=to_null_if_empty(data.get("address")),
            notes=to_null_if_empty(data.get("notes")),
        )
        self.db.add(contractor)
        self._commit(contractor, "creating labour contractor")
        logger.info(f"Labour contractor {contractor.id} created")
        return contractor

    def update_contractor(self, contractor_id: str, data: Dict[str, Any]) -> LabourContractor:
        contractor = self._require_contractor(contractor_id)

        if data.get("name") is not None:
            name = clean_str(data["name"])
            if not name:
                raise ValidationError("name is required")
            contractor.name = name
        for field in ("mobile", "address", "notes"):
            if field in data:
                setattr(contractor, field, to_null_if_empty(data[field]))

        self._commit(contractor, f"updating labour contractor {contractor_id}")
        return contractor

    def delete_contractor(self, contractor_id: str) -> bool:
        contractor = self._require_contractor(contractor_id)

        contracts = (
            self.db.query(func.count(LabourContract.id))
            .filter(LabourContract.contractor_id == contractor_id)
            .scalar()
        )
        payments = (
            self.db.query(func.count(LabourPayment.id))
            .filter(LabourPayment.contractor_id == contractor_id)
            .scalar()
        )
        if contracts or payments:
            raise ValidationError("Cannot delete contractor: contracts/payments exist")

        self.db.delete(contractor)
        self._commit(action=f"deleting labour contractor {contractor_id}")
        return True

    # ================= CONTRACTS ===================

    def get_contract(self, contract_id: str) -> Optional[LabourContract]:
        return self.db.query(LabourContract).filter(LabourContract.id == contract_id).first()

    def list_contracts(
        self,
        contractor_id: Optional[str] = None,
        site_id: Optional[str] = None,
    ) -> List[LabourContract]:
        query = self.db.query(LabourContract).options(
            joinedload(LabourContract.contractor), joinedload(LabourContract.site)
        )
        if contractor_id:
            query = query.filter(LabourContract.contractor_id == contractor_id)
        if site_id:
            query = query.filter(LabourContract.site_id == site_id)
        return query.order_by(LabourContract.created_at.desc(), LabourContract.id).all()

    def create_contract(self, data: Dict[str, Any]) -> LabourContract:
        contractor_id = clean_str(data.get("contractor_id"))
        site_id = clean_str(data.get("site_id"))
        if not contractor_id or not site_id:
            raise ValidationError("contractorId and siteId required")
        self._require_contractor(contractor_id)
        self._require_site(site_id)

        contract = LabourContract(
            contractor_id=contractor_id,
            site_id=site_id,
            agreed_amount=to_amount(data.get("agreed_amount")) or Decimal("0"),
            start_date=parse_date(data.get("start_date")),
            end_date=parse_date(data.get("end_date")),
            remarks=to_null_if_empty(data.get("remarks")),
        )
        self.db.add(contract)
        self._commit(contract, "creating labour contract")
        logger.info(f"Labour contract {contract.id} created for {contractor_id} at {site_id}")
        return contract

    def update_contract(self, contract_id: str, data: Dict[str, Any]) -> LabourContract:
        contract = self.get_contract(contract_id)
        if not contract:
            raise NotFoundError("Contract not found")

        if data.get("contractor_id") is not None:
            contract.contractor_id = self._require_contractor(clean_str(data["contractor_id"])).id
        if data.get("site_id") is not None:
            contract.site_id = self._require_site(clean_str(data["site_id"]))
        if data.get("agreed_amount") is not None:
            contract.agreed_amount = to_amount(data["agreed_amount"]) or Decimal("0")
        if "start_date" in data:
            contract.start_date = parse_date(data["start_date"])
        if "end_date" in data:
            contract.end_date = parse_date(data["end_date"])
        if "remarks" in data:
            contract.remarks = to_null_if_empty(data["remarks"])

        self._commit(contract, f"updating labour contract {contract_id}")
        return contract

    def delete_contract(self, contract_id: str) -> bool:
        contract = self.get_contract(contract_id)
        if not contract:
            raise NotFoundError("Contract not found")

        payments = (
            self.db.query(func.count(LabourPayment.id))
            .filter(LabourPayment.contract_id == contract_id)
            .scalar()
        )
        if payments:
            raise ValidationError("Cannot delete contract: payments exist")

        self.db.delete(contract)
        self._commit(action=f"deleting labour contract {contract_id}")
        return True

    # ================= PAYMENTS ===================

    def get_payment(self, payment_id: str) -> Optional[LabourPayment]:
        return self.db.query(LabourPayment).filter(LabourPayment.id == payment_id).first()

    def list_payments(
        self,
        contractor_id: Optional[str] = None,
        site_id: Optional[str] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
    ) -> List[LabourPayment]:
        query = self.db.query(LabourPayment).options(
            joinedload(LabourPayment.contractor), joinedload(LabourPayment.site)
        )
        if contractor_id:
            query = query.filter(LabourPayment.contractor_id == contractor_id)
        if site_id:
            query = query.filter(LabourPayment.site_id == site_id)

        start = parse_date(date_from)
        if start:
            query = query.filter(LabourPayment.payment_date >= start)
        end = parse_range_end(date_to)
        if end:
            query = query.filter(LabourPayment.payment_date <= end)

        return query.order_by(LabourPayment.payment_date.desc(), LabourPayment.id).all()

    def _latest_contract_id(self, contractor_id: str, site_id: str) -> Optional[str]:
        latest = (
            self.db.query(LabourContract.id)
            .filter(LabourContract.contractor_id == contractor_id, LabourContract.site_id == site_id)
            .order_by(LabourContract.created_at.desc(), LabourContract.id.desc())
            .first()
        )
        return latest[0] if latest else None

    def create_payment(self, data: Dict[str, Any]) -> LabourPayment:
        contractor_id = clean_str(data.get("contractor_id"))
        site_id = clean_str(data.get("site_id"))
        payment_date = parse_date(data.get("payment_date"))
        if not contractor_id or not site_id or payment_date is None:
            raise ValidationError("contractorId, siteId and paymentDate are required")

        amount = to_amount(data.get("amount"))
        if amount is None or amount <= 0:
            raise ValidationError("amount must be > 0")

        self._require_contractor(contractor_id)
        self._require_site(site_id)

        contract_id = to_null_if_empty(data.get("contract_id"))
        if contract_id:
            if not self.get_contract(contract_id):
                raise NotFoundError("Contract not found")
        else:
            contract_id = self._latest_contract_id(contractor_id, site_id)

        payment = LabourPayment(
            contractor_id=contractor_id,
            site_id=site_id,
            contract_id=contract_id,
            payment_date=payment_date,
            amount=amount,
            mode=data.get("mode") or PaymentMode.CASH,
            ref_no=to_null_if_empty(data.get("ref_no")),
            through=to_null_if_empty(data.get("through")),
            remarks=to_null_if_empty(data.get("remarks")),
        )
        self.db.add(payment)
        self._commit(payment, "creating labour payment")
        logger.info(f"Labour payment {payment.id} of {amount} recorded for {contractor_id}")
        return payment

    def update_payment(self, payment_id: str, data: Dict[str, Any]) -> LabourPayment:
        payment = self.get_payment(payment_id)
        if not payment:
            raise NotFoundError("Payment not found")

        if data.get("contractor_id") is not None:
            payment.contractor_id = self._require_contractor(clean_str(data["contractor_id"])).id
        if data.get("site_id") is not None:
            payment.site_id = self._require_site(clean_str(data["site_id"]))
        if "contract_id" in data:
            contract_id = to_null_if_empty(data["contract_id"])
            if contract_id and not self.get_contract(contract_id):
                raise NotFoundError("Contract not found")
            payment.contract_id = contract_id
        if data.get("payment_date") is not None:
            payment_date = parse_date(data["payment_date"])
            if payment_date is None:
                raise ValidationError("Invalid paymentDate")
            payment.payment_date = payment_date
        if data.get("amount") is not None:
            amount = to_amount(data["amount"])
            if amount is None or amount <= 0:
                raise ValidationError("amount must be > 0")
            payment.amount = amount
        if data.get("mode") is not None:
            payment.mode = data["mode"]
        for field in ("ref_no", "through", "remarks"):
            if field in data:
                setattr(payment, field, to_null_if_empty(data[field]))

        self._commit(payment, f"updating labour payment {payment_id}")
        return payment

    def delete_payment(self, payment_id: str) -> bool:
        payment = self.get_payment(payment_id)
        if not payment:
            raise NotFoundError("Payment not found")
        self.db.delete(payment)
        self._commit(action=f"deleting labour payment {payment_id}")
        return True

    # ================= LEDGER SUMMARY ===================

    def get_contractor_ledger(self, contractor_id: str, site_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Contracts with paid/balance per contract plus contractor totals.
        A payment counts against its own contract; payments without one are
        attributed to the newest contract at the same site.
        """
        self._require_contractor(contractor_id)

        contracts = self.list_contracts(contractor_id=contractor_id, site_id=site_id)
        payments = self.list_payments(contractor_id=contractor_id, site_id=site_id)

        newest_by_site: Dict[str, str] = {}
        for c in contracts:  # already newest first
            newest_by_site.setdefault(c.site_id, c.id)

        paid_by_contract: Dict[str, Decimal] = defaultdict(Decimal)
        for p in payments:
            target = p.contract_id or newest_by_site.get(p.site_id)
            if target:
                paid_by_contract[target] += to_decimal_or_zero(p.amount)

        rows = []
        total_agreed = total_paid = total_balance = Decimal("0")
        for c in contracts:
            agreed = to_decimal_or_zero(c.agreed_amount)
            paid = paid_by_contract.get(c.id, Decimal("0"))
            balance = agreed - paid
            total_agreed += agreed
            total_paid += paid
            total_balance += balance
            rows.append({
                "contract_id": c.id,
                "site_id": c.site_id,
                "site_name": c.site.site_name if c.site else "",
                "agreed_amount": float(agreed.quantize(TWO_PLACES)),
                "paid_amount": float(paid.quantize(TWO_PLACES)),
                "balance_amount": float(balance.quantize(TWO_PLACES)),
                "remarks": c.remarks,
                "start_date": c.start_date,
                "end_date": c.end_date,
            })

        return {
            "summary": {
                "contractor_id": contractor_id,
                "total_agreed": float(total_agreed.quantize(TWO_PLACES)),
                "total_paid": float(total_paid.quantize(TWO_PLACES)),
                "total_balance": float(total_balance.quantize(TWO_PLACES)),
            },
            "contracts": rows,
            "payments": payments,
        }
