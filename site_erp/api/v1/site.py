from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from site_erp.common.exceptions import NotFoundError
from site_erp.common.response import ApiResponse
from site_erp.core.dependencies import AuditContext, get_audit_context, get_db
from site_erp.models.site import SiteStatus
from site_erp.schemas.site import SiteCreate, SiteResponse, SiteUpdate
from site_erp.services.site_service import (
    create_site,
    delete_site,
    get_all_sites,
    get_site_by_id,
    update_site,
)
from site_erp.logger_config import logger

router = APIRouter()


@router.get("", response_model=ApiResponse[List[SiteResponse]])
def list_sites(
    db: Session = Depends(get_db),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    search: Optional[str] = Query(None),
    site_status: Optional[SiteStatus] = Query(None, alias="status"),
):
    sites, count = get_all_sites(db, skip=skip, limit=limit, search=search, status=site_status)
    return ApiResponse(data=[SiteResponse.model_validate(s) for s in sites], count=count)


@router.get("/{site_id}", response_model=ApiResponse[SiteResponse])
def get_site(site_id: str, db: Session = Depends(get_db)):
    site = get_site_by_id(db, site_id)
    if not site:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Site not found")
    return ApiResponse(data=SiteResponse.model_validate(site))


@router.post("", response_model=ApiResponse[SiteResponse], status_code=status.HTTP_201_CREATED)
def create_new_site(
    data: SiteCreate,
    ctx: AuditContext = Depends(get_audit_context),
    db: Session = Depends(get_db),
):
    try:
        site = create_site(
            db,
            site_name=data.site_name,
            tender_no=data.tender_no,
            sd_amount=data.sd_amount,
            department=data.department,
            status=data.status,
            user_id=ctx.user_id,
            ip=ctx.ip,
        )
        return ApiResponse(message="Site created", data=SiteResponse.model_validate(site))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception:
        logger.exception("Error creating site")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create site",
        )


@router.put("/{site_id}", response_model=ApiResponse[SiteResponse])
def update_existing_site(
    site_id: str,
    data: SiteUpdate,
    ctx: AuditContext = Depends(get_audit_context),
    db: Session = Depends(get_db),
):
    try:
        site = update_site(db, site_id, data.model_dump(exclude_unset=True), user_id=ctx.user_id, ip=ctx.ip)
        return ApiResponse(message="Site updated", data=SiteResponse.model_validate(site))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception:
        logger.exception(f"Error updating site {site_id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update site",
        )


@router.delete("/{site_id}", response_model=ApiResponse[SiteResponse])
def delete_existing_site(
    site_id: str,
    ctx: AuditContext = Depends(get_audit_context),
    db: Session = Depends(get_db),
):
    try:
        site = delete_site(db, site_id, user_id=ctx.user_id, ip=ctx.ip)
        return ApiResponse(message="Site deleted", data=SiteResponse.model_validate(site))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except Exception:
        logger.exception(f"Error deleting site {site_id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete site",
        )
