from typing import Any, Dict, Optional
from datetime import datetime

from site_erp.models.audit_log import AuditAction
from site_erp.models.site import SiteStatus
from site_erp.schemas.base import CamelModel


class SiteProfitRow(CamelModel):
    site_id: str
    site_name: str
    department: str
    status: SiteStatus
    expenses: float
    amount_received: float
    profit: float
    material_purchase_cost: float
    labour_contractor_cost: float


class AuditLogResponse(CamelModel):
    id: int
    user_id: Optional[str] = None
    module: str
    record_id: str
    action: AuditAction
    old_data: Optional[Dict[str, Any]] = None
    new_data: Optional[Dict[str, Any]] = None
    ip: Optional[str] = None
    created_at: Optional[datetime] = None
