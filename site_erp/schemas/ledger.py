from decimal import Decimal
from pydantic import Field
from typing import Optional
from datetime import datetime

from site_erp.models.ledger import LedgerType
from site_erp.schemas.base import CamelModel, SiteRef


class LedgerCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    ledger_type: LedgerType
    site_id: Optional[str] = None
    mobile: Optional[str] = None
    address: Optional[str] = None
    opening_balance: Decimal = Decimal("0")


class LedgerUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    ledger_type: Optional[LedgerType] = None
    site_id: Optional[str] = None
    mobile: Optional[str] = None
    address: Optional[str] = None
    opening_balance: Optional[Decimal] = None


class LedgerResponse(CamelModel):
    id: str
    name: str
    ledger_type: LedgerType
    site_id: Optional[str] = None
    site: Optional[SiteRef] = None
    mobile: Optional[str] = None
    address: Optional[str] = None
    opening_balance: float
    is_deleted: bool
    created_at: Optional[datetime] = None
