from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from site_erp.common.exceptions import NotFoundError
from site_erp.common.response import ApiResponse
from site_erp.core.dependencies import get_db
from site_erp.schemas.base import DeleteResponse
from site_erp.schemas.labour import (
    ContractCreate,
    ContractorCreate,
    ContractorLedgerResponse,
    ContractorResponse,
    ContractorUpdate,
    ContractResponse,
    ContractUpdate,
    PaymentCreate,
    PaymentResponse,
    PaymentUpdate,
)
from site_erp.services.labour_ledger_service import LabourLedgerService
from site_erp.logger_config import logger

router = APIRouter()


def _handle(action: str, e: Exception):
    if isinstance(e, NotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, ValueError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    logger.exception(f"Error {action}")
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed {action}",
    )


# ================= CONTRACTORS ===================

@router.get("/contractors", response_model=ApiResponse[List[ContractorResponse]])
def list_contractors(db: Session = Depends(get_db)):
    contractors = LabourLedgerService(db).list_contractors()
    return ApiResponse(data=[ContractorResponse.model_validate(c) for c in contractors], count=len(contractors))


@router.post("/contractors", response_model=ApiResponse[ContractorResponse], status_code=status.HTTP_201_CREATED)
def create_contractor(data: ContractorCreate, db: Session = Depends(get_db)):
    try:
        contractor = LabourLedgerService(db).create_contractor(data.model_dump())
        return ApiResponse(message="Contractor created", data=ContractorResponse.model_validate(contractor))
    except Exception as e:
        _handle("creating contractor", e)


@router.put("/contractors/{contractor_id}", response_model=ApiResponse[ContractorResponse])
def update_contractor(contractor_id: str, data: ContractorUpdate, db: Session = Depends(get_db)):
    try:
        contractor = LabourLedgerService(db).update_contractor(contractor_id, data.model_dump(exclude_unset=True))
        return ApiResponse(message="Contractor updated", data=ContractorResponse.model_validate(contractor))
    except Exception as e:
        _handle("updating contractor", e)


@router.delete("/contractors/{contractor_id}", response_model=ApiResponse[DeleteResponse])
def delete_contractor(contractor_id: str, db: Session = Depends(get_db)):
    try:
        LabourLedgerService(db).delete_contractor(contractor_id)
        return ApiResponse(message="Contractor deleted", data=DeleteResponse(id=contractor_id))
    except Exception as e:
        _handle("deleting contractor", e)


# ================= CONTRACTS ===================

@router.get("/contracts", response_model=ApiResponse[List[ContractResponse]])
def list_contracts(
    contractor_id: Optional[str] = Query(None, alias="contractorId"),
    site_id: Optional[str] = Query(None, alias="siteId"),
    db: Session = Depends(get_db),
):
    contracts = LabourLedgerService(db).list_contracts(contractor_id=contractor_id, site_id=site_id)
    return ApiResponse(data=[ContractResponse.model_validate(c) for c in contracts], count=len(contracts))


@router.post("/contracts", response_model=ApiResponse[ContractResponse], status_code=status.HTTP_201_CREATED)
def create_contract(data: ContractCreate, db: Session = Depends(get_db)):
    try:
        contract = LabourLedgerService(db).create_contract(data.model_dump())
        return ApiResponse(message="Contract created", data=ContractResponse.model_validate(contract))
    except Exception as e:
        _handle("creating contract", e)


@router.put("/contracts/{contract_id}", response_model=ApiResponse[ContractResponse])
def update_contract(contract_id: str, data: ContractUpdate, db: Session = Depends(get_db)):
    try:
        contract = LabourLedgerService(db).update_contract(contract_id, data.model_dump(exclude_unset=True))
        return ApiResponse(message="Contract updated", data=ContractResponse.model_validate(contract))
    except Exception as e:
        _handle("updating contract", e)


@router.delete("/contracts/{contract_id}", response_model=ApiResponse[DeleteResponse])
def delete_contract(contract_id: str, db: Session = Depends(get_db)):
    try:
        LabourLedgerService(db).delete_contract(contract_id)
        return ApiResponse(message="Contract deleted", data=DeleteResponse(id=contract_id))
    except Exception as e:
        _handle("deleting contract", e)


# ================= PAYMENTS ===================

@router.get("/payments", response_model=ApiResponse[List[PaymentResponse]])
def list_payments(
    contractor_id: Optional[str] = Query(None, alias="contractorId"),
    site_id: Optional[str] = Query(None, alias="siteId"),
    date_from: Optional[str] = Query(None, alias="from"),
    date_to: Optional[str] = Query(None, alias="to"),
    db: Session = Depends(get_db),
):
    payments = LabourLedgerService(db).list_payments(
        contractor_id=contractor_id, site_id=site_id, date_from=date_from, date_to=date_to
    )
    return ApiResponse(data=[PaymentResponse.model_validate(p) for p in payments], count=len(payments))


@router.post("/payments", response_model=ApiResponse[PaymentResponse], status_code=status.HTTP_201_CREATED)
def create_payment(data: PaymentCreate, db: Session = Depends(get_db)):
    try:
        payment = LabourLedgerService(db).create_payment(data.model_dump())
        return ApiResponse(message="Payment recorded", data=PaymentResponse.model_validate(payment))
    except Exception as e:
        _handle("creating payment", e)


@router.put("/payments/{payment_id}", response_model=ApiResponse[PaymentResponse])
def update_payment(payment_id: str, data: PaymentUpdate, db: Session = Depends(get_db)):
    try:
        payment = LabourLedgerService(db).update_payment(payment_id, data.model_dump(exclude_unset=True))
        return ApiResponse(message="Payment updated", data=PaymentResponse.model_validate(payment))
    except Exception as e:
        _handle("updating payment", e)


@router.delete("/payments/{payment_id}", response_model=ApiResponse[DeleteResponse])
def delete_payment(payment_id: str, db: Session = Depends(get_db)):
    try:
        LabourLedgerService(db).delete_payment(payment_id)
        return ApiResponse(message="Payment deleted", data=DeleteResponse(id=payment_id))
    except Exception as e:
        _handle("deleting payment", e)


# ================= LEDGER SUMMARY ===================

@router.get("/ledger/{contractor_id}", response_model=ApiResponse[ContractorLedgerResponse])
def get_contractor_ledger(
    contractor_id: str,
    site_id: Optional[str] = Query(None, alias="siteId"),
    db: Session = Depends(get_db),
):
    try:
        ledger = LabourLedgerService(db).get_contractor_ledger(contractor_id, site_id=site_id)
        return ApiResponse(data=ContractorLedgerResponse.model_validate(ledger))
    except Exception as e:
        _handle("fetching contractor ledger", e)
