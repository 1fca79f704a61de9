"""
Parameter Registry

Scoring dimensions and their weights, per company. Weights need not add up
to any particular total; the scoring engine normalizes by the weight it
actually scored.
"""
import logging
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from perfpay.core.exceptions import ValidationFailure
from perfpay.models.performance import ScoreDirection, ScoreParameter
from perfpay.models.user import User
from perfpay.schemas.parameter import ParameterCreate, ParameterUpdate
from perfpay.services.access import load_in_company, require_admin

logger = logging.getLogger(__name__)

# Default dimension set seeded for a new company
DEFAULT_PARAMETERS = [
    {"name": "Task Completion Speed", "weight": 15, "direction": ScoreDirection.HIGHER_IS_BETTER, "metric_key": "task_speed"},
    {"name": "Attendance Consistency", "weight": 10, "direction": ScoreDirection.HIGHER_IS_BETTER, "metric_key": "attendance_consistency"},
    {"name": "Health/Sickness Frequency", "weight": 10, "direction": ScoreDirection.LOWER_IS_BETTER, "metric_key": "sickness_frequency"},
    {"name": "Simultaneous Absence", "weight": 5, "direction": ScoreDirection.LOWER_IS_BETTER, "metric_key": "simultaneous_absence"},
    {"name": "Overtime & Extra Effort", "weight": 15, "direction": ScoreDirection.HIGHER_IS_BETTER, "metric_key": "overtime"},
    {"name": "Work Accuracy", "weight": 20, "direction": ScoreDirection.HIGHER_IS_BETTER, "metric_key": "work_accuracy"},
    {"name": "Backlog Management", "weight": 10, "direction": ScoreDirection.LOWER_IS_BETTER, "metric_key": "backlog"},
    {"name": "Leave Discipline", "weight": 10, "direction": ScoreDirection.HIGHER_IS_BETTER, "metric_key": "leave_discipline"},
    {"name": "WFH Productivity", "weight": 5, "direction": ScoreDirection.HIGHER_IS_BETTER, "metric_key": "wfh_productivity"},
    {"name": "Punctuality", "weight": 10, "direction": ScoreDirection.HIGHER_IS_BETTER, "metric_key": "punctuality"},
]


def _check_weight(weight: float):
    if weight is None or weight <= 0:
        raise ValidationFailure(f"Parameter weight must be positive, got {weight}")


def list_parameters(db: Session, company_id: int, include_inactive: bool = True) -> List[ScoreParameter]:
    query = db.query(ScoreParameter).filter(ScoreParameter.company_id == company_id)
    if not include_inactive:
        query = query.filter(ScoreParameter.is_active.is_(True))
    return query.order_by(ScoreParameter.sort_order.asc(), ScoreParameter.id.asc()).all()


def active_parameters(db: Session, company_id: int) -> List[ScoreParameter]:
    """Parameters the scoring engine evaluates, in display order."""
    return list_parameters(db, company_id, include_inactive=False)


def create_parameter(db: Session, company_id: int, data: ParameterCreate, actor: User) -> ScoreParameter:
    require_admin(actor, "manage performance parameters")
    _check_weight(data.weight)
    if not data.name.strip():
        raise ValidationFailure("Parameter name is required")

    sort_order = data.sort_order
    if sort_order is None:
        sort_order = db.query(ScoreParameter).filter(ScoreParameter.company_id == company_id).count() + 1

    parameter = ScoreParameter(
        company_id=company_id,
        name=data.name.strip(),
        description=data.description,
        weight=data.weight,
        direction=data.direction.value,
        metric_key=data.metric_key,
        sort_order=sort_order,
        is_active=True,
    )
    db.add(parameter)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ValidationFailure(f"A parameter named '{data.name}' already exists") from e
    db.refresh(parameter)
    logger.info(f"Created parameter '{parameter.name}' (weight {parameter.weight}) for company {company_id}")
    return parameter


def update_parameter(
    db: Session, parameter_id: int, company_id: int, data: ParameterUpdate, actor: User
) -> ScoreParameter:
    require_admin(actor, "manage performance parameters")
    parameter = load_in_company(db, ScoreParameter, parameter_id, company_id, "Parameter")

    changes = data.model_dump(exclude_unset=True)
    if "weight" in changes:
        _check_weight(changes["weight"])
    if changes.get("direction") is not None:
        changes["direction"] = changes["direction"].value

    for field, value in changes.items():
        setattr(parameter, field, value)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ValidationFailure("A parameter with that name already exists") from e
    db.refresh(parameter)
    return parameter


def deactivate_parameter(db: Session, parameter_id: int, company_id: int, actor: User) -> ScoreParameter:
    """Soft delete: stored scores keep pointing at the row."""
    return update_parameter(db, parameter_id, company_id, ParameterUpdate(is_active=False), actor)


def seed_default_parameters(db: Session, company_id: int) -> int:
    existing = {p.name for p in list_parameters(db, company_id)}
    created = 0
    for order, defaults in enumerate(DEFAULT_PARAMETERS, start=1):
        if defaults["name"] in existing:
            continue
        db.add(ScoreParameter(
            company_id=company_id,
            name=defaults["name"],
            weight=defaults["weight"],
            direction=defaults["direction"].value,
            metric_key=defaults["metric_key"],
            sort_order=order,
        ))
        created += 1
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    return created
