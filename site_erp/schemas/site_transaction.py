from decimal import Decimal
from typing import Any, Dict, Optional
from datetime import datetime

from site_erp.models.site_transaction import TxnNature, TxnSource
from site_erp.schemas.base import CamelModel, SiteRef


class SiteTransactionCreate(CamelModel):
    # Required-ness is enforced by the service so direct callers get the same errors
    site_id: Optional[str] = None
    txn_date: Optional[str] = None
    source: Optional[TxnSource] = None
    source_id: Optional[str] = None
    nature: Optional[TxnNature] = None
    amount: Optional[Decimal] = None
    title: Optional[str] = None
    remarks: Optional[str] = None
    meta: Optional[Dict[str, Any]] = None


class SiteTransactionUpdate(SiteTransactionCreate):
    pass


class SiteTransactionResponse(CamelModel):
    id: str
    site_id: str
    site: Optional[SiteRef] = None
    txn_date: datetime
    source: TxnSource
    source_id: str
    nature: TxnNature
    amount: float
    title: Optional[str] = None
    remarks: Optional[str] = None
    meta: Optional[Dict[str, Any]] = None
    is_deleted: bool
    deleted_at: Optional[datetime] = None
    deleted_by: Optional[str] = None
    created_at: Optional[datetime] = None
