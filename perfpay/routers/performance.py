"""
Performance Router

Scores, rankings and bonus finalization. Business rules live in
``ScoringEngine``; this module only resolves identity and tenant.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from perfpay.core.schemas import ApiResponse
from perfpay.database import get_db
from perfpay.models.user import User
from perfpay.routers.auth_deps import get_current_org, get_current_user
from perfpay.schemas.performance import (
    CompanyCalculationSummary,
    FinalizeSummary,
    PerformanceDetail,
    PerformanceResult,
    PeriodRequest,
)
from perfpay.services.periods import current_period
from perfpay.services.scoring_service import ScoringEngine

router = APIRouter(
    prefix="/performance",
    tags=["performance"]
)


@router.get("", response_model=ApiResponse[List[PerformanceDetail]])
def get_rankings(
    period: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    org_id: int = Depends(get_current_org)
):
    """Every active employee's score for the period, best first."""
    period = period or current_period()
    rankings = ScoringEngine(db, org_id).rank_company(period, current_user)
    return ApiResponse.ok(rankings, metadata={"period": period, "count": len(rankings)})


@router.post("/calculate", response_model=CompanyCalculationSummary)
def calculate_scores(
    request: PeriodRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    org_id: int = Depends(get_current_org)
):
    return ScoringEngine(db, org_id).calculate_company_period(request.period, current_user)


@router.post("/finalize", response_model=FinalizeSummary)
def finalize_bonuses(
    request: PeriodRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    org_id: int = Depends(get_current_org)
):
    """Lock the period's bonus records; finalized scores are never recomputed."""
    return ScoringEngine(db, org_id).finalize_period(request.period, current_user)


@router.get("/{user_id}", response_model=PerformanceDetail)
def get_user_performance(
    user_id: int,
    period: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    org_id: int = Depends(get_current_org)
):
    return ScoringEngine(db, org_id).performance_detail(user_id, period or current_period(), current_user)


@router.post("/{user_id}/recalculate", response_model=PerformanceResult)
def recalculate_user_performance(
    user_id: int,
    request: PeriodRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    org_id: int = Depends(get_current_org)
):
    return ScoringEngine(db, org_id).recalculate_performance(user_id, request.period, current_user)
