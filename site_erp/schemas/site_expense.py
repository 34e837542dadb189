from decimal import Decimal
from pydantic import Field
from typing import Optional
from datetime import datetime

from site_erp.schemas.base import CamelModel, SiteRef


class SiteExpenseCreate(CamelModel):
    """Manual expense entry. Date/amount validity is checked by the service."""
    site_id: str = Field(..., min_length=1)
    expense_date: str = Field(..., min_length=1)
    expense_title: Optional[str] = None
    expense_summary: Optional[str] = None
    payment_details: Optional[str] = None
    amount: Decimal


class SiteExpenseUpdate(CamelModel):
    """Partial patch; only fields present in the payload are applied."""
    site_id: Optional[str] = None
    expense_date: Optional[str] = None
    expense_title: Optional[str] = None
    expense_summary: Optional[str] = None
    payment_details: Optional[str] = None
    amount: Optional[Decimal] = None


class SiteExpenseResponse(CamelModel):
    id: str
    site_id: str
    expense_date: datetime
    expense_title: str
    summary: str
    payment_details: Optional[str] = None
    amount: float
    is_deleted: bool
    deleted_at: Optional[datetime] = None
    deleted_by: Optional[str] = None
    created_at: Optional[datetime] = None
    site: Optional[SiteRef] = None


class ExpenseRowResponse(CamelModel):
    """A row of the merged expense view; isAuto rows are derived and read-only."""
    id: str
    site_id: str
    site: Optional[SiteRef] = None
    expense_date: datetime
    expense_title: str
    summary: str
    payment_details: Optional[str] = None
    amount: float
    is_auto: bool
    source: str
    auto_source: Optional[str] = None
    is_deleted: bool = False
    created_at: Optional[datetime] = None
