from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from perfpay.database import get_db
from perfpay.models.user import User
from perfpay.routers.auth_deps import get_current_org, get_current_user
from perfpay.schemas.parameter import ParameterCreate, ParameterResponse, ParameterUpdate
from perfpay.services import parameter_service

router = APIRouter(
    prefix="/parameters",
    tags=["parameters"]
)


@router.get("", response_model=List[ParameterResponse])
def list_parameters(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    org_id: int = Depends(get_current_org)
):
    return parameter_service.list_parameters(db, org_id)


@router.post("", response_model=ParameterResponse, status_code=201)
def create_parameter(
    data: ParameterCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    org_id: int = Depends(get_current_org)
):
    return parameter_service.create_parameter(db, org_id, data, current_user)


@router.patch("/{parameter_id}", response_model=ParameterResponse)
def update_parameter(
    parameter_id: int,
    data: ParameterUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    org_id: int = Depends(get_current_org)
):
    return parameter_service.update_parameter(db, parameter_id, org_id, data, current_user)


@router.delete("/{parameter_id}", response_model=ParameterResponse)
def deactivate_parameter(
    parameter_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    org_id: int = Depends(get_current_org)
):
    """Soft delete; stored scores keep referencing the parameter."""
    return parameter_service.deactivate_parameter(db, parameter_id, org_id, current_user)
