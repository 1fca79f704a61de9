"""
Salary Service Layer

Salary structures and system-side slip generation.

Architecture:
- Router -> Service (this module) -> Models
- ``compute_breakdown`` is pure: the same structure and bonus percentage
  always give the same figures
- ``generate_slip`` writes system-side columns only; employee-submitted
  columns belong to the reconciliation flow and survive regeneration
"""

from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import logging

from sqlalchemy.orm import Session

from perfpay.core.config import settings
from perfpay.core.exceptions import AlreadyFinalizedError, NotFoundError, PreconditionFailedError
from perfpay.models.performance import BonusRecord
from perfpay.models.salary import SYSTEM_FIELDS, SalarySlip, SalaryStructure, SlipStatus
from perfpay.models.user import User
from perfpay.schemas.salary import SalaryStructureIn
from perfpay.services.access import load_company_user, load_in_company, require_admin, require_self_or_admin
from perfpay.services.audit import AuditService
from perfpay.services.periods import parse_period

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SalaryBreakdown:
    basic: float
    hra: float
    da: float
    ta: float
    special_allow: float
    bonus_percentage: float
    bonus_amount: float
    pf: float
    esi: float
    tax: float
    other_deduct: float
    gross: float
    deductions: float
    net: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def structure_net(basic: float, hra: float, da: float, ta: float, special_allow: float,
                  pf: float, esi: float, tax: float, other_deduct: float) -> float:
    return basic + hra + da + ta + special_allow - pf - esi - tax - other_deduct


def compute_breakdown(structure: SalaryStructure, bonus_percentage: float) -> SalaryBreakdown:
    """
    System figures for one month.
    The bonus is a percentage of the structure's net salary, not of gross.
    """
    bonus_amount = structure.net_salary * bonus_percentage / 100
    gross = (
        structure.basic + structure.hra + structure.da + structure.ta
        + structure.special_allow + bonus_amount
    )
    deductions = structure.pf + structure.esi + structure.tax + structure.other_deduct
    return SalaryBreakdown(
        basic=structure.basic,
        hra=structure.hra,
        da=structure.da,
        ta=structure.ta,
        special_allow=structure.special_allow,
        bonus_percentage=bonus_percentage,
        bonus_amount=bonus_amount,
        pf=structure.pf,
        esi=structure.esi,
        tax=structure.tax,
        other_deduct=structure.other_deduct,
        gross=gross,
        deductions=deductions,
        net=gross - deductions,
    )


def compute_discrepancy(system_net: Optional[float], employee_net: Optional[float]) -> Optional[float]:
    if system_net is None or employee_net is None:
        return None
    return abs(system_net - employee_net)


# ----------------------------------------------------------------------
# Salary structures
# ----------------------------------------------------------------------
def save_structure(db: Session, company_id: int, data: SalaryStructureIn, actor: User) -> SalaryStructure:
    """Create or replace a user's salary structure; net salary is derived here."""
    require_admin(actor, "create or update salary structures")
    load_company_user(db, data.user_id, company_id)

    values = data.model_dump(exclude={"user_id", "currency"})
    values["net_salary"] = structure_net(
        data.basic, data.hra, data.da, data.ta, data.special_allow,
        data.pf, data.esi, data.tax, data.other_deduct,
    )
    values["currency"] = data.currency or settings.default_currency

    structure = db.query(SalaryStructure).filter(SalaryStructure.user_id == data.user_id).first()
    if structure is None:
        structure = SalaryStructure(user_id=data.user_id)
        db.add(structure)
    for field, value in values.items():
        setattr(structure, field, value)

    try:
        db.commit()
        db.refresh(structure)
    except Exception:
        db.rollback()
        raise
    logger.info(f"Saved salary structure for user {data.user_id}: net {structure.net_salary}")
    return structure


def get_structure(db: Session, user_id: int, company_id: int, actor: User) -> SalaryStructure:
    require_self_or_admin(actor, user_id, "You can only view your own salary structure")
    load_company_user(db, user_id, company_id)
    structure = db.query(SalaryStructure).filter(SalaryStructure.user_id == user_id).first()
    if structure is None:
        raise NotFoundError("Salary structure")
    return structure


# ----------------------------------------------------------------------
# Slip generation
# ----------------------------------------------------------------------
def generate_slip(db: Session, user_id: int, company_id: int, month: str, actor: User) -> SalarySlip:
    """
    Generate (or regenerate) the system side of a user's slip for ``month``.

    Regeneration overwrites system columns and resets the status to
    GENERATED; employee columns are left as they are and the discrepancy is
    recomputed against them.
    """
    require_admin(actor, "generate salary slips")
    parse_period(month)
    load_company_user(db, user_id, company_id)

    structure = db.query(SalaryStructure).filter(SalaryStructure.user_id == user_id).first()
    if structure is None:
        raise PreconditionFailedError(
            "No salary structure found for this user. Please set up salary structure first."
        )

    bonus = db.query(BonusRecord).filter(
        BonusRecord.user_id == user_id,
        BonusRecord.period == month
    ).first()
    bonus_percentage = bonus.bonus_percentage if bonus else 0.0
    breakdown = compute_breakdown(structure, bonus_percentage)

    slip = db.query(SalarySlip).filter(
        SalarySlip.user_id == user_id,
        SalarySlip.month == month
    ).first()
    if slip is not None and slip.status == SlipStatus.FINALIZED.value:
        raise AlreadyFinalizedError(f"Salary slip for {month} is finalized")

    before_state = _system_state(slip) if slip else None

    # Step 1: create-or-overwrite system columns
    if slip is None:
        slip = SalarySlip(user_id=user_id, company_id=company_id, month=month)
        db.add(slip)
    slip.system_gross = breakdown.gross
    slip.system_deductions = breakdown.deductions
    slip.system_net = breakdown.net
    slip.system_breakdown = breakdown.to_dict()
    slip.bonus_percentage = bonus_percentage or None
    slip.bonus_amount = breakdown.bonus_amount or None
    slip.status = SlipStatus.GENERATED.value
    slip.generated_at = datetime.now(timezone.utc)

    # Step 2: realign discrepancy with whatever the employee already submitted
    slip.discrepancy = compute_discrepancy(slip.system_net, slip.employee_net)

    db.flush()
    AuditService.log(
        db,
        action="generate_salary_slip",
        entity_type="salary_slip",
        entity_id=slip.id,
        user_id=actor.id,
        user_role=actor.role,
        details={"target_user_id": user_id, "month": month, "bonus_percentage": bonus_percentage},
        company_id=company_id,
        before_state=before_state,
        after_state=_system_state(slip),
    )
    try:
        db.commit()
        db.refresh(slip)
    except Exception:
        db.rollback()
        raise

    logger.info(f"Generated salary slip {slip.id} for user {user_id} ({month}): net {slip.system_net}")
    return slip


def _system_state(slip: SalarySlip) -> Dict[str, Any]:
    state = {field: getattr(slip, field) for field in SYSTEM_FIELDS}
    state["discrepancy"] = slip.discrepancy
    state["status"] = slip.status
    return state


# ----------------------------------------------------------------------
# Queries
# ----------------------------------------------------------------------
def list_slips(
    db: Session,
    company_id: int,
    actor: User,
    user_id: Optional[int] = None,
    month: Optional[str] = None,
    page: int = 1,
    limit: Optional[int] = None,
) -> Dict[str, Any]:
    """Paginated slips of a company; non-admins only ever see their own."""
    if not actor.is_admin:
        user_id = actor.id
    if month:
        parse_period(month)

    page = max(1, page)
    limit = min(settings.max_page_size, max(1, limit or settings.default_page_size))

    query = db.query(SalarySlip).filter(SalarySlip.company_id == company_id)
    if user_id:
        query = query.filter(SalarySlip.user_id == user_id)
    if month:
        query = query.filter(SalarySlip.month == month)

    total = query.count()
    records: List[SalarySlip] = query.order_by(
        SalarySlip.month.desc(), SalarySlip.id.asc()
    ).offset((page - 1) * limit).limit(limit).all()

    return {
        "records": records,
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": (total + limit - 1) // limit,
    }


def get_slip(db: Session, slip_id: int, company_id: int, actor: User) -> SalarySlip:
    slip = load_in_company(db, SalarySlip, slip_id, company_id, "Salary slip")
    require_self_or_admin(actor, slip.user_id, "You can only view your own salary slips")
    return slip
