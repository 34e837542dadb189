from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from site_erp.common.exceptions import NotFoundError
from site_erp.common.response import ApiResponse
from site_erp.core.dependencies import AuditContext, get_audit_context, get_db
from site_erp.schemas.base import DeleteResponse
from site_erp.schemas.site_transaction import (
    SiteTransactionCreate,
    SiteTransactionResponse,
    SiteTransactionUpdate,
)
from site_erp.services import site_transaction_service as txn_service
from site_erp.logger_config import logger

router = APIRouter()


def _list_response(txns) -> ApiResponse:
    return ApiResponse(
        data=[SiteTransactionResponse.model_validate(t) for t in txns],
        count=len(txns),
    )


@router.get("", response_model=ApiResponse[List[SiteTransactionResponse]])
def list_transactions(
    site_id: Optional[str] = Query(None, alias="siteId"),
    date_from: Optional[str] = Query(None, alias="from"),
    date_to: Optional[str] = Query(None, alias="to"),
    source: Optional[str] = Query(None),
    nature: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    try:
        txns = txn_service.get_active_transactions(
            db, site_id=site_id, date_from=date_from, date_to=date_to, source=source, nature=nature
        )
        return _list_response(txns)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception:
        logger.exception("Error fetching site transactions")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch site transactions",
        )


@router.get("/deleted", response_model=ApiResponse[List[SiteTransactionResponse]])
def list_deleted_transactions(
    site_id: Optional[str] = Query(None, alias="siteId"),
    date_from: Optional[str] = Query(None, alias="from"),
    date_to: Optional[str] = Query(None, alias="to"),
    source: Optional[str] = Query(None),
    nature: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    try:
        txns = txn_service.get_deleted_transactions(
            db, site_id=site_id, date_from=date_from, date_to=date_to, source=source, nature=nature
        )
        return _list_response(txns)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception:
        logger.exception("Error fetching deleted site transactions")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch deleted site transactions",
        )


@router.get("/site/{site_id}", response_model=ApiResponse[List[SiteTransactionResponse]])
def list_transactions_by_site(
    site_id: str,
    date_from: Optional[str] = Query(None, alias="from"),
    date_to: Optional[str] = Query(None, alias="to"),
    source: Optional[str] = Query(None),
    nature: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    try:
        txns = txn_service.get_transactions_by_site(
            db, site_id, date_from=date_from, date_to=date_to, source=source, nature=nature
        )
        return _list_response(txns)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception:
        logger.exception(f"Error fetching site transactions for site {site_id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch site transactions",
        )


@router.post("", response_model=ApiResponse[SiteTransactionResponse], status_code=status.HTTP_201_CREATED)
def create_transaction(
    data: SiteTransactionCreate,
    ctx: AuditContext = Depends(get_audit_context),
    db: Session = Depends(get_db),
):
    """Direct entry (receipts, vouchers...). One row per (source, sourceId)."""
    try:
        txn = txn_service.create_site_transaction(db, data.model_dump(), user_id=ctx.user_id, ip=ctx.ip)
        return ApiResponse(
            message="Site transaction created",
            data=SiteTransactionResponse.model_validate(txn),
        )
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception:
        logger.exception("Error creating site transaction")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create site transaction",
        )


@router.put("/{txn_id}", response_model=ApiResponse[SiteTransactionResponse])
def update_transaction(
    txn_id: str,
    data: SiteTransactionUpdate,
    ctx: AuditContext = Depends(get_audit_context),
    db: Session = Depends(get_db),
):
    try:
        txn = txn_service.update_site_transaction(
            db, txn_id, data.model_dump(exclude_unset=True), user_id=ctx.user_id, ip=ctx.ip
        )
        return ApiResponse(
            message="Site transaction updated",
            data=SiteTransactionResponse.model_validate(txn),
        )
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception:
        logger.exception(f"Error updating site transaction {txn_id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update site transaction",
        )


@router.delete("/{txn_id}", response_model=ApiResponse[SiteTransactionResponse])
def delete_transaction(
    txn_id: str,
    ctx: AuditContext = Depends(get_audit_context),
    db: Session = Depends(get_db),
):
    try:
        txn = txn_service.soft_delete_site_transaction(db, txn_id, user_id=ctx.user_id, ip=ctx.ip)
        return ApiResponse(
            message="Site transaction moved to deleted records",
            data=SiteTransactionResponse.model_validate(txn),
        )
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except Exception:
        logger.exception(f"Error deleting site transaction {txn_id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete site transaction",
        )


@router.post("/{txn_id}/restore", response_model=ApiResponse[SiteTransactionResponse])
def restore_transaction(
    txn_id: str,
    ctx: AuditContext = Depends(get_audit_context),
    db: Session = Depends(get_db),
):
    try:
        txn = txn_service.restore_site_transaction(db, txn_id, user_id=ctx.user_id, ip=ctx.ip)
        return ApiResponse(
            message="Site transaction restored",
            data=SiteTransactionResponse.model_validate(txn),
        )
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except Exception:
        logger.exception(f"Error restoring site transaction {txn_id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to restore site transaction",
        )


@router.delete("/{txn_id}/hard", response_model=ApiResponse[DeleteResponse])
def hard_delete_transaction(
    txn_id: str,
    ctx: AuditContext = Depends(get_audit_context),
    db: Session = Depends(get_db),
):
    try:
        txn_service.hard_delete_site_transaction(db, txn_id, user_id=ctx.user_id, ip=ctx.ip)
        return ApiResponse(
            message="Site transaction permanently deleted",
            data=DeleteResponse(id=txn_id),
        )
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except Exception:
        logger.exception(f"Error hard-deleting site transaction {txn_id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete site transaction",
        )
