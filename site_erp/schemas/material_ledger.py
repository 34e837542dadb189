from pydantic import Field
from typing import Any, List, Optional
from datetime import datetime

from site_erp.schemas.base import CamelModel


class MaterialRowFields(CamelModel):
    """Editable columns of a material ledger row; all optional for patching."""
    entry_date: Optional[str] = None
    site_id: Optional[str] = None
    receipt_no: Optional[str] = None
    parchi_photo: Optional[str] = None
    otp: Optional[str] = None
    vehicle_no: Optional[str] = None
    vehicle_photo: Optional[str] = None
    material: Optional[str] = None
    size: Optional[str] = None
    qty: Optional[Any] = None
    rate: Optional[Any] = None
    royalty_qty: Optional[Any] = None
    royalty_rate: Optional[Any] = None
    royalty_amt: Optional[Any] = None
    gst_percent: Optional[Any] = None
    tax_amt: Optional[Any] = None
    total_amt: Optional[Any] = None
    payment_amt: Optional[Any] = None
    balance_amt: Optional[Any] = None
    remarks: Optional[str] = None


class MaterialRowUpdate(MaterialRowFields):
    pass


class MaterialRowBulkUpdateItem(MaterialRowFields):
    id: str = Field(..., min_length=1)


class MaterialBulkUpdate(CamelModel):
    rows: List[MaterialRowBulkUpdateItem] = Field(..., min_length=1)


class MaterialBulkDelete(CamelModel):
    ids: List[str] = Field(..., min_length=1)


class CountResponse(CamelModel):
    count: int


class MaterialRowResponse(CamelModel):
    id: str
    ledger_id: str
    site_id: Optional[str] = None
    entry_date: datetime
    receipt_no: Optional[str] = None
    parchi_photo: Optional[str] = None
    otp: Optional[str] = None
    vehicle_no: Optional[str] = None
    vehicle_photo: Optional[str] = None
    material: str
    size: Optional[str] = None
    qty: float
    rate: float
    royalty_qty: Optional[float] = None
    royalty_rate: Optional[float] = None
    royalty_amt: Optional[float] = None
    gst_percent: Optional[float] = None
    tax_amt: Optional[float] = None
    total_amt: Optional[float] = None
    payment_amt: Optional[float] = None
    balance_amt: Optional[float] = None
    remarks: Optional[str] = None
