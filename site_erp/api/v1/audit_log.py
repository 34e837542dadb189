from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from site_erp.common.response import ApiResponse
from site_erp.core.dependencies import get_db
from site_erp.schemas.report import AuditLogResponse
from site_erp.services.audit_log_service import get_audit_logs

router = APIRouter()


@router.get("", response_model=ApiResponse[List[AuditLogResponse]])
def list_audit_logs(
    module: Optional[str] = Query(None),
    record_id: Optional[str] = Query(None, alias="recordId"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
):
    rows, total = get_audit_logs(db, module=module, record_id=record_id, skip=skip, limit=limit)
    return ApiResponse(data=[AuditLogResponse.model_validate(r) for r in rows], count=total)
