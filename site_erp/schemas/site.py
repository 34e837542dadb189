from decimal import Decimal
from pydantic import Field
from typing import Optional
from datetime import datetime

from site_erp.models.site import SiteStatus
from site_erp.schemas.base import CamelModel


class SiteCreate(CamelModel):
    site_name: str = Field(..., min_length=1, max_length=200)
    tender_no: Optional[str] = None
    sd_amount: Optional[Decimal] = None
    department: Optional[str] = None
    status: SiteStatus = SiteStatus.ACTIVE


class SiteUpdate(CamelModel):
    site_name: Optional[str] = Field(None, min_length=1, max_length=200)
    tender_no: Optional[str] = None
    sd_amount: Optional[Decimal] = None
    department: Optional[str] = None
    status: Optional[SiteStatus] = None


class SiteResponse(CamelModel):
    id: str
    site_name: str
    tender_no: Optional[str] = None
    sd_amount: Optional[float] = None
    department: Optional[str] = None
    status: SiteStatus
    is_deleted: bool
    created_at: Optional[datetime] = None
