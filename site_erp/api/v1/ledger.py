from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from site_erp.common.exceptions import NotFoundError
from site_erp.common.response import ApiResponse
from site_erp.core.dependencies import AuditContext, get_audit_context, get_db
from site_erp.models.ledger import LedgerType
from site_erp.schemas.ledger import LedgerCreate, LedgerResponse, LedgerUpdate
from site_erp.services.ledger_service import (
    create_ledger,
    delete_ledger,
    get_all_ledgers,
    get_ledger_by_id,
    update_ledger,
)
from site_erp.logger_config import logger

router = APIRouter()


@router.get("", response_model=ApiResponse[List[LedgerResponse]])
def list_ledgers(
    db: Session = Depends(get_db),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    search: Optional[str] = Query(None),
    ledger_type: Optional[LedgerType] = Query(None, alias="ledgerType"),
    site_id: Optional[str] = Query(None, alias="siteId"),
):
    ledgers, count = get_all_ledgers(
        db, skip=skip, limit=limit, search=search, ledger_type=ledger_type, site_id=site_id
    )
    return ApiResponse(data=[LedgerResponse.model_validate(l) for l in ledgers], count=count)


@router.get("/{ledger_id}", response_model=ApiResponse[LedgerResponse])
def get_ledger(ledger_id: str, db: Session = Depends(get_db)):
    ledger = get_ledger_by_id(db, ledger_id)
    if not ledger:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Ledger not found")
    return ApiResponse(data=LedgerResponse.model_validate(ledger))


@router.post("", response_model=ApiResponse[LedgerResponse], status_code=status.HTTP_201_CREATED)
def create_new_ledger(
    data: LedgerCreate,
    ctx: AuditContext = Depends(get_audit_context),
    db: Session = Depends(get_db),
):
    try:
        ledger = create_ledger(db, data.model_dump(), user_id=ctx.user_id, ip=ctx.ip)
        return ApiResponse(message="Ledger created", data=LedgerResponse.model_validate(ledger))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception:
        logger.exception("Error creating ledger")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create ledger",
        )


@router.put("/{ledger_id}", response_model=ApiResponse[LedgerResponse])
def update_existing_ledger(
    ledger_id: str,
    data: LedgerUpdate,
    ctx: AuditContext = Depends(get_audit_context),
    db: Session = Depends(get_db),
):
    try:
        ledger = update_ledger(
            db, ledger_id, data.model_dump(exclude_unset=True), user_id=ctx.user_id, ip=ctx.ip
        )
        return ApiResponse(message="Ledger updated", data=LedgerResponse.model_validate(ledger))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception:
        logger.exception(f"Error updating ledger {ledger_id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update ledger",
        )


@router.delete("/{ledger_id}", response_model=ApiResponse[LedgerResponse])
def delete_existing_ledger(
    ledger_id: str,
    ctx: AuditContext = Depends(get_audit_context),
    db: Session = Depends(get_db),
):
    try:
        ledger = delete_ledger(db, ledger_id, user_id=ctx.user_id, ip=ctx.ip)
        return ApiResponse(message="Ledger deleted", data=LedgerResponse.model_validate(ledger))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except Exception:
        logger.exception(f"Error deleting ledger {ledger_id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete ledger",
        )
