from decimal import Decimal
from pydantic import Field
from typing import List, Optional
from datetime import datetime

from site_erp.models.labour import PaymentMode
from site_erp.schemas.base import CamelModel, SiteRef


class ContractorCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    mobile: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None


class ContractorUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    mobile: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None


class ContractorRef(CamelModel):
    id: str
    name: str


class ContractorResponse(CamelModel):
    id: str
    name: str
    mobile: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


class ContractCreate(CamelModel):
    contractor_id: Optional[str] = None
    site_id: Optional[str] = None
    agreed_amount: Decimal = Decimal("0")
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    remarks: Optional[str] = None


class ContractUpdate(CamelModel):
    contractor_id: Optional[str] = None
    site_id: Optional[str] = None
    agreed_amount: Optional[Decimal] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    remarks: Optional[str] = None


class ContractResponse(CamelModel):
    id: str
    contractor_id: str
    site_id: str
    contractor: Optional[ContractorRef] = None
    site: Optional[SiteRef] = None
    agreed_amount: float
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    remarks: Optional[str] = None
    created_at: Optional[datetime] = None


class PaymentCreate(CamelModel):
    contractor_id: Optional[str] = None
    site_id: Optional[str] = None
    contract_id: Optional[str] = None
    payment_date: Optional[str] = None
    amount: Optional[Decimal] = None
    mode: PaymentMode = PaymentMode.CASH
    ref_no: Optional[str] = None
    through: Optional[str] = None
    remarks: Optional[str] = None


class PaymentUpdate(CamelModel):
    contractor_id: Optional[str] = None
    site_id: Optional[str] = None
    contract_id: Optional[str] = None
    payment_date: Optional[str] = None
    amount: Optional[Decimal] = None
    mode: Optional[PaymentMode] = None
    ref_no: Optional[str] = None
    through: Optional[str] = None
    remarks: Optional[str] = None


class PaymentResponse(CamelModel):
    id: str
    contractor_id: str
    site_id: str
    contract_id: Optional[str] = None
    contractor: Optional[ContractorRef] = None
    site: Optional[SiteRef] = None
    payment_date: datetime
    amount: float
    mode: PaymentMode
    ref_no: Optional[str] = None
    through: Optional[str] = None
    remarks: Optional[str] = None


class ContractLedgerRow(CamelModel):
    contract_id: str
    site_id: str
    site_name: str
    agreed_amount: float
    paid_amount: float
    balance_amount: float
    remarks: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class ContractorLedgerSummary(CamelModel):
    contractor_id: str
    total_agreed: float
    total_paid: float
    total_balance: float


class ContractorLedgerResponse(CamelModel):
    summary: ContractorLedgerSummary
    contracts: List[ContractLedgerRow]
    payments: List[PaymentResponse]
