"""
Salary Router

Structures, slip generation and employee reconciliation.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from perfpay.core.schemas import ApiResponse
from perfpay.database import get_db
from perfpay.models.user import User
from perfpay.routers.auth_deps import get_current_org, get_current_user
from perfpay.schemas.salary import (
    SalarySlipResponse,
    SalaryStructureIn,
    SalaryStructureResponse,
    SlipGenerateRequest,
    SlipSubmission,
)
from perfpay.services import salary_service
from perfpay.services.reconciliation import SlipReconciler

router = APIRouter(
    prefix="/salary",
    tags=["salary"]
)


@router.post("/structure", response_model=SalaryStructureResponse)
def save_structure(
    data: SalaryStructureIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    org_id: int = Depends(get_current_org)
):
    return salary_service.save_structure(db, org_id, data, current_user)


@router.get("/structure/{user_id}", response_model=SalaryStructureResponse)
def get_structure(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    org_id: int = Depends(get_current_org)
):
    return salary_service.get_structure(db, user_id, org_id, current_user)


@router.get("/slips", response_model=ApiResponse[List[SalarySlipResponse]])
def list_slips(
    user_id: Optional[int] = None,
    month: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    org_id: int = Depends(get_current_org)
):
    result = salary_service.list_slips(db, org_id, current_user, user_id=user_id, month=month, page=page, limit=limit)
    records = [SalarySlipResponse.model_validate(s) for s in result.pop("records")]
    return ApiResponse.ok(records, metadata=result)


@router.post("/slips/generate", response_model=SalarySlipResponse)
def generate_slip(
    request: SlipGenerateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    org_id: int = Depends(get_current_org)
):
    return salary_service.generate_slip(db, request.user_id, org_id, request.month, current_user)


@router.get("/slips/{slip_id}", response_model=SalarySlipResponse)
def get_slip(
    slip_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    org_id: int = Depends(get_current_org)
):
    return salary_service.get_slip(db, slip_id, org_id, current_user)


@router.patch("/slips/{slip_id}", response_model=SalarySlipResponse)
def submit_slip(
    slip_id: int,
    payload: SlipSubmission,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    org_id: int = Depends(get_current_org)
):
    """Employee figures and, for admins, an explicit status."""
    return SlipReconciler(db, org_id).submit(slip_id, current_user, payload)
