from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from site_erp.common.response import ApiResponse
from site_erp.core.dependencies import get_db
from site_erp.schemas.report import SiteProfitRow
from site_erp.services.site_profit_service import get_site_profit_data
from site_erp.logger_config import logger

router = APIRouter()


@router.get("", response_model=ApiResponse[List[SiteProfitRow]])
def site_profit(
    site_id: Optional[str] = Query(None, alias="siteId"),
    date_from: Optional[str] = Query(None, alias="from"),
    date_to: Optional[str] = Query(None, alias="to"),
    db: Session = Depends(get_db),
):
    """Received vs spent per active site."""
    try:
        rows = get_site_profit_data(db, site_id=site_id, date_from=date_from, date_to=date_to)
        return ApiResponse(data=[SiteProfitRow.model_validate(r) for r in rows], count=len(rows))
    except Exception:
        logger.exception("Error computing site profit")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to compute site profit",
        )
