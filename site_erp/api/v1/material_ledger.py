import json
from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from sqlalchemy.orm import Session
from typing import List, Optional

from pydantic import ValidationError as SchemaValidationError

from site_erp.common.exceptions import NotFoundError
from site_erp.common.response import ApiResponse
from site_erp.core.dependencies import get_db
from site_erp.schemas.base import DeleteResponse
from site_erp.schemas.material_ledger import (
    CountResponse,
    MaterialBulkDelete,
    MaterialBulkUpdate,
    MaterialRowFields,
    MaterialRowResponse,
    MaterialRowUpdate,
)
from site_erp.services import material_ledger_service
from site_erp.utils.file_storage import LocalFileStorage, get_file_storage
from site_erp.logger_config import logger

router = APIRouter()


def _parse_rows(raw: str) -> List[dict]:
    """`rows` arrives as a JSON array string inside the multipart form."""
    try:
        parsed = json.loads(raw or "[]")
    except json.JSONDecodeError:
        raise ValueError("rows must be a JSON array")
    if not isinstance(parsed, list):
        raise ValueError("rows must be a JSON array")
    try:
        return [
            MaterialRowFields.model_validate(r).model_dump(exclude_unset=True)
            for r in parsed
        ]
    except SchemaValidationError:
        raise ValueError("rows contain invalid values")


@router.get("", response_model=ApiResponse[List[MaterialRowResponse]])
def list_ledger_rows(
    ledger_id: str = Query(..., alias="ledgerId"),
    site_id: Optional[str] = Query(None, alias="siteId"),
    db: Session = Depends(get_db),
):
    rows = material_ledger_service.get_ledger_rows(db, ledger_id, site_id=site_id)
    return ApiResponse(data=[MaterialRowResponse.model_validate(r) for r in rows], count=len(rows))


@router.post("/bulk", response_model=ApiResponse[CountResponse], status_code=status.HTTP_201_CREATED)
def create_bulk_rows(
    entry_date: str = Form(..., alias="entryDate"),
    ledger_id: str = Form(..., alias="ledgerId"),
    site_id: Optional[str] = Form(None, alias="siteId"),
    rows: str = Form(...),
    unloading_files: List[UploadFile] = File(default=[], alias="unloadingFiles"),
    receipt_files: List[UploadFile] = File(default=[], alias="receiptFiles"),
    storage: LocalFileStorage = Depends(get_file_storage),
    db: Session = Depends(get_db),
):
    """One delivery per row; unloadingFiles[i] and receiptFiles[i] belong to rows[i]."""
    try:
        count = material_ledger_service.create_bulk(
            db,
            entry_date=entry_date,
            ledger_id=ledger_id,
            site_id=site_id,
            rows=_parse_rows(rows),
            unloading_files=unloading_files,
            receipt_files=receipt_files,
            storage=storage,
        )
        return ApiResponse(message="Material ledger rows created", data=CountResponse(count=count))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception:
        logger.exception("Error creating material ledger rows")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create material ledger rows",
        )


@router.put("/bulk-update", response_model=ApiResponse[CountResponse])
def bulk_update_rows(data: MaterialBulkUpdate, db: Session = Depends(get_db)):
    try:
        count = material_ledger_service.bulk_update(
            db, [r.model_dump(exclude_unset=True) for r in data.rows]
        )
        return ApiResponse(message="Material ledger rows updated", data=CountResponse(count=count))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception:
        logger.exception("Error bulk updating material ledger rows")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update material ledger rows",
        )


@router.post("/bulk-delete", response_model=ApiResponse[CountResponse])
def bulk_delete_rows(data: MaterialBulkDelete, db: Session = Depends(get_db)):
    try:
        count = material_ledger_service.bulk_delete(db, data.ids)
        return ApiResponse(message="Material ledger rows deleted", data=CountResponse(count=count))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception:
        logger.exception("Error bulk deleting material ledger rows")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete material ledger rows",
        )


@router.put("/{row_id}", response_model=ApiResponse[MaterialRowResponse])
def update_row(row_id: str, data: MaterialRowUpdate, db: Session = Depends(get_db)):
    try:
        row = material_ledger_service.update_one(db, row_id, data.model_dump(exclude_unset=True))
        return ApiResponse(message="Material ledger row updated", data=MaterialRowResponse.model_validate(row))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception:
        logger.exception(f"Error updating material ledger row {row_id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update material ledger row",
        )


@router.delete("/{row_id}", response_model=ApiResponse[DeleteResponse])
def delete_row(row_id: str, db: Session = Depends(get_db)):
    try:
        material_ledger_service.delete_one(db, row_id)
        return ApiResponse(message="Material ledger row deleted", data=DeleteResponse(id=row_id))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except Exception:
        logger.exception(f"Error deleting material ledger row {row_id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete material ledger row",
        )
