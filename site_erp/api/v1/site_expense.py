from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from site_erp.common.exceptions import NotFoundError
from site_erp.common.response import ApiResponse
from site_erp.core.dependencies import AuditContext, get_audit_context, get_db
from site_erp.schemas.base import DeleteResponse
from site_erp.schemas.site_expense import (
    ExpenseRowResponse,
    SiteExpenseCreate,
    SiteExpenseResponse,
    SiteExpenseUpdate,
)
from site_erp.services.site_expense_service import (
    create_site_expense,
    get_all_site_expenses,
    get_deleted_site_expenses,
    get_expenses_by_site,
    hard_delete_site_expense,
    restore_site_expense,
    soft_delete_site_expense,
    update_site_expense,
)
from site_erp.logger_config import logger

router = APIRouter()


@router.get("", response_model=ApiResponse[List[ExpenseRowResponse]])
def list_site_expenses(db: Session = Depends(get_db)):
    """Manual expenses merged with auto material/labour expenses, newest first."""
    try:
        rows = get_all_site_expenses(db)
        return ApiResponse(
            data=[ExpenseRowResponse.model_validate(r) for r in rows],
            count=len(rows),
        )
    except Exception:
        logger.exception("Error fetching site expenses")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch site expenses",
        )


@router.get("/deleted", response_model=ApiResponse[List[SiteExpenseResponse]])
def list_deleted_site_expenses(
    site_id: Optional[str] = Query(None, alias="siteId"),
    db: Session = Depends(get_db),
):
    try:
        expenses = get_deleted_site_expenses(db, site_id=site_id)
        return ApiResponse(
            data=[SiteExpenseResponse.model_validate(e) for e in expenses],
            count=len(expenses),
        )
    except Exception:
        logger.exception("Error fetching deleted site expenses")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch deleted site expenses",
        )


@router.get("/site/{site_id}", response_model=ApiResponse[List[ExpenseRowResponse]])
def list_site_expenses_by_site(site_id: str, db: Session = Depends(get_db)):
    try:
        rows = get_expenses_by_site(db, site_id)
        return ApiResponse(
            data=[ExpenseRowResponse.model_validate(r) for r in rows],
            count=len(rows),
        )
    except Exception:
        logger.exception(f"Error fetching site expenses for site {site_id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch site expenses",
        )


@router.post("", response_model=ApiResponse[SiteExpenseResponse], status_code=status.HTTP_201_CREATED)
def create_expense(
    data: SiteExpenseCreate,
    ctx: AuditContext = Depends(get_audit_context),
    db: Session = Depends(get_db),
):
    """Create a manual expense; its DEBIT site transaction is written in the same commit."""
    try:
        expense = create_site_expense(db, data.model_dump(), user_id=ctx.user_id, ip=ctx.ip)
        return ApiResponse(
            message="Site expense created",
            data=SiteExpenseResponse.model_validate(expense),
        )
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception:
        logger.exception("Error creating site expense")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create site expense",
        )


@router.put("/{expense_id}", response_model=ApiResponse[SiteExpenseResponse])
def update_expense(
    expense_id: str,
    data: SiteExpenseUpdate,
    ctx: AuditContext = Depends(get_audit_context),
    db: Session = Depends(get_db),
):
    try:
        expense = update_site_expense(
            db, expense_id, data.model_dump(exclude_unset=True), user_id=ctx.user_id, ip=ctx.ip
        )
        return ApiResponse(
            message="Site expense updated",
            data=SiteExpenseResponse.model_validate(expense),
        )
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception:
        logger.exception(f"Error updating site expense {expense_id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update site expense",
        )


@router.delete("/{expense_id}", response_model=ApiResponse[SiteExpenseResponse])
def delete_expense(
    expense_id: str,
    ctx: AuditContext = Depends(get_audit_context),
    db: Session = Depends(get_db),
):
    """Soft delete: moves the expense and its transaction to deleted records."""
    try:
        expense = soft_delete_site_expense(db, expense_id, user_id=ctx.user_id, ip=ctx.ip)
        return ApiResponse(
            message="Site expense moved to deleted records",
            data=SiteExpenseResponse.model_validate(expense),
        )
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception:
        logger.exception(f"Error deleting site expense {expense_id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete site expense",
        )


@router.patch("/{expense_id}/restore", response_model=ApiResponse[SiteExpenseResponse])
def restore_expense(
    expense_id: str,
    ctx: AuditContext = Depends(get_audit_context),
    db: Session = Depends(get_db),
):
    try:
        expense = restore_site_expense(db, expense_id, user_id=ctx.user_id, ip=ctx.ip)
        return ApiResponse(
            message="Site expense restored",
            data=SiteExpenseResponse.model_validate(expense),
        )
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception:
        logger.exception(f"Error restoring site expense {expense_id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to restore site expense",
        )


@router.delete("/{expense_id}/hard", response_model=ApiResponse[DeleteResponse])
def hard_delete_expense(
    expense_id: str,
    ctx: AuditContext = Depends(get_audit_context),
    db: Session = Depends(get_db),
):
    """Permanent delete of the expense and its transaction."""
    try:
        hard_delete_site_expense(db, expense_id, user_id=ctx.user_id, ip=ctx.ip)
        return ApiResponse(
            message="Site expense permanently deleted",
            data=DeleteResponse(id=expense_id),
        )
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception:
        logger.exception(f"Error hard-deleting site expense {expense_id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete site expense",
        )
