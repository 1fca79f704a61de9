"""
Performance Scoring Service

Turns per-parameter scores into one normalized figure per employee per
month and maps it to a bonus tier.

Stored scores act as a read-through cache with no background refresh:
- stored ParameterScore rows for (user, period) are reused untouched
- otherwise scores are derived from raw inputs and persisted together with
  the period's BonusRecord
The result's ``source`` field says which of the two happened. Rows are only
replaced through the explicit ``recalculate_performance`` admin operation.

A finalized BonusRecord locks its period: nothing in this module writes to it.
"""

from datetime import datetime, timezone
from typing import Iterable, List, Optional
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from perfpay.core.config import settings
from perfpay.core.exceptions import AccessDeniedError, AlreadyFinalizedError, ScoreConflictError
from perfpay.models.performance import BonusRecord, ParameterScore
from perfpay.models.user import User
from perfpay.schemas.performance import (
    BonusHistoryEntry,
    CompanyCalculationSummary,
    FinalizeSummary,
    PerformanceDetail,
    PerformanceResult,
    ScoreRow,
)
from perfpay.services.access import load_company_user, require_admin, require_self_or_admin
from perfpay.services.audit import AuditService
from perfpay.services.base import BaseService
from perfpay.services.history_service import history_for
from perfpay.services.metrics import measure
from perfpay.services.parameter_service import active_parameters
from perfpay.services.periods import parse_period
from perfpay.services.tier_policy import tier_for

logger = logging.getLogger(__name__)


def aggregate_total(scores: Iterable[ScoreRow]) -> float:
    """
    Weighted mean of the normalized scores, on a 0-100 scale, 2 decimals.
    Only parameters that actually received a score contribute weight.
    """
    total_weight = 0.0
    total_weighted = 0.0
    for row in scores:
        total_weight += row.weight
        total_weighted += row.weighted_score
    if total_weight <= 0:
        return 0.0
    total = round(total_weighted / total_weight * 100, 2)
    return max(0.0, min(100.0, total))


def weighted_score(normalized_score: float, weight: float) -> float:
    return normalized_score * weight / 100


class ScoringEngine(BaseService):

    def __init__(self, db: Session, company_id: int):
        super().__init__(db, org_id=company_id)
        self.company_id = company_id

    # ------------------------------------------------------------------
    # Core contract
    # ------------------------------------------------------------------
    def compute_performance(self, user_id: int, period: str) -> PerformanceResult:
        parse_period(period)
        load_company_user(self.db, user_id, self.company_id)

        stored = self._stored_scores(user_id, period)
        if stored:
            return self._result(user_id, period, stored, source="stored")

        return self._compute_fresh(user_id, period)

    def _stored_scores(self, user_id: int, period: str) -> List[ScoreRow]:
        rows = self.db.query(ParameterScore).filter(
            ParameterScore.user_id == user_id,
            ParameterScore.period == period
        ).order_by(ParameterScore.parameter_id.asc()).all()
        return [
            ScoreRow(
                parameter_id=r.parameter_id,
                parameter_name=r.parameter.name,
                weight=r.weight,
                raw_value=r.raw_value,
                normalized_score=r.normalized_score,
                weighted_score=r.weighted_score,
            )
            for r in rows
        ]

    def _bonus_record(self, user_id: int, period: str) -> Optional[BonusRecord]:
        return self.db.query(BonusRecord).filter(
            BonusRecord.user_id == user_id,
            BonusRecord.period == period
        ).first()

    def _ensure_unlocked(self, user_id: int, period: str) -> Optional[BonusRecord]:
        record = self._bonus_record(user_id, period)
        if record is not None and record.is_finalized:
            raise AlreadyFinalizedError(f"Bonus for user {user_id} in {period} is finalized")
        return record

    def _compute_fresh(self, user_id: int, period: str) -> PerformanceResult:
        record = self._ensure_unlocked(user_id, period)

        scores: List[ScoreRow] = []
        for param in active_parameters(self.db, self.company_id):
            metric = measure(self.db, param.metric_key, user_id, self.company_id, period)
            scores.append(ScoreRow(
                parameter_id=param.id,
                parameter_name=param.name,
                weight=param.weight,
                raw_value=metric.raw_value,
                normalized_score=metric.normalized_score,
                weighted_score=weighted_score(metric.normalized_score, param.weight),
            ))

        result = self._result(user_id, period, scores, source="computed")

        for row in scores:
            self.db.add(ParameterScore(
                user_id=user_id,
                parameter_id=row.parameter_id,
                period=period,
                raw_value=row.raw_value,
                normalized_score=row.normalized_score,
                weight=row.weight,
                weighted_score=row.weighted_score,
            ))

        if record is None:
            record = BonusRecord(user_id=user_id, period=period)
            self.db.add(record)
        record.total_score = result.total_score
        record.bonus_percentage = result.bonus_percentage
        record.tier = result.tier
        record.tier_color = result.tier_color
        record.breakdown = [row.model_dump() for row in scores]

        try:
            self.db.commit()
        except IntegrityError as e:
            # Unique (user, period, parameter) / (user, period): another request got there first
            self.db.rollback()
            self.log_warning(f"Concurrent score write for user {user_id} in {period}")
            raise ScoreConflictError(user_id, period) from e

        self.log_info(
            f"Computed performance for user {user_id} in {period}: "
            f"{result.total_score} -> {result.tier} ({result.bonus_percentage}%)"
        )
        return result

    def _result(self, user_id: int, period: str, scores: List[ScoreRow], source: str) -> PerformanceResult:
        total = aggregate_total(scores)
        tier = tier_for(total)
        return PerformanceResult(
            user_id=user_id,
            period=period,
            total_score=total,
            bonus_percentage=tier.bonus_percentage,
            tier=tier.tier,
            tier_color=tier.tier_color,
            scores=scores,
            source=source,
        )

    # ------------------------------------------------------------------
    # Administrative operations
    # ------------------------------------------------------------------
    def recalculate_performance(self, user_id: int, period: str, actor: User) -> PerformanceResult:
        """Explicitly discard stored scores for the period and derive them again."""
        require_admin(actor, "recalculate performance scores")
        parse_period(period)
        load_company_user(self.db, user_id, self.company_id)
        record = self._ensure_unlocked(user_id, period)
        before = {"total_score": record.total_score, "tier": record.tier} if record else None

        self.db.query(ParameterScore).filter(
            ParameterScore.user_id == user_id,
            ParameterScore.period == period
        ).delete(synchronize_session="fetch")

        AuditService.log(
            self.db,
            action="recalculate_performance",
            entity_type="bonus_record",
            entity_id=record.id if record else None,
            user_id=actor.id,
            user_role=actor.role,
            details={"target_user_id": user_id, "period": period},
            company_id=self.company_id,
            before_state=before,
        )
        return self._compute_fresh(user_id, period)

    def calculate_company_period(self, period: str, actor: User) -> CompanyCalculationSummary:
        require_admin(actor, "trigger score calculation")
        parse_period(period)

        calculated = 0
        reused = 0
        for user in self._active_users():
            result = self.compute_performance(user.id, period)
            if result.source == "computed":
                calculated += 1
            else:
                reused += 1
        self.log_info(f"Company {self.company_id} scoring for {period}: {calculated} computed, {reused} reused")
        return CompanyCalculationSummary(period=period, calculated=calculated, reused=reused)

    def rank_company(self, period: str, actor: User) -> List[PerformanceDetail]:
        if not actor.can_view_rankings:
            raise AccessDeniedError("Only reviewers and admins can view rankings")
        parse_period(period)

        rankings = []
        for user in self._active_users():
            result = self.compute_performance(user.id, period)
            rankings.append(PerformanceDetail(
                **result.model_dump(),
                user_name=user.full_name,
                employee_code=user.employee_code,
            ))
        rankings.sort(key=lambda r: r.total_score, reverse=True)
        return rankings

    def performance_detail(self, user_id: int, period: str, actor: User) -> PerformanceDetail:
        """One employee's scores plus the trailing bonus history."""
        require_self_or_admin_or_reviewer(actor, user_id)
        user = load_company_user(self.db, user_id, self.company_id)
        result = self.compute_performance(user_id, period)
        history = history_for(self.db, user_id, period, settings.history_window)
        return PerformanceDetail(
            **result.model_dump(),
            user_name=user.full_name,
            employee_code=user.employee_code,
            history=[BonusHistoryEntry.model_validate(h) for h in history],
        )

    def finalize_period(self, period: str, actor: User) -> FinalizeSummary:
        """Lock every bonus record of the company for ``period``."""
        require_admin(actor, "finalize bonuses")
        parse_period(period)

        company_users = [u.id for u in self.db.query(User.id).filter(User.company_id == self.company_id)]
        records = self.db.query(BonusRecord).filter(
            BonusRecord.user_id.in_(company_users),
            BonusRecord.period == period,
            BonusRecord.is_finalized.is_(False)
        ).all()

        now = datetime.now(timezone.utc)
        for record in records:
            record.is_finalized = True
            record.finalized_at = now
            record.finalized_by = actor.id

        AuditService.log(
            self.db,
            action="finalize_bonuses",
            entity_type="bonus_record",
            entity_id=None,
            user_id=actor.id,
            user_role=actor.role,
            details={"period": period, "count": len(records)},
            company_id=self.company_id,
        )
        self.commit()
        self.log_info(f"Finalized {len(records)} bonus records for company {self.company_id} in {period}")
        return FinalizeSummary(period=period, finalized=len(records))

    def _active_users(self) -> List[User]:
        return self.db.query(User).filter(
            User.company_id == self.company_id,
            User.is_active.is_(True)
        ).order_by(User.first_name.asc()).all()


def require_self_or_admin_or_reviewer(actor: User, user_id: int):
    if actor.can_view_rankings:
        return
    require_self_or_admin(actor, user_id, "You can only view your own performance")
