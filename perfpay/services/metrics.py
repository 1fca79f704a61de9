"""
Raw performance inputs.

Each metric provider turns the month's operational data (tasks, reviews,
attendance, leave) into a ``RawMetric``: the raw figure plus a 0-100
normalized score. Providers are looked up by ``ScoreParameter.metric_key``;
a parameter with no provider gets the neutral score.
"""
import logging
import math
from dataclasses import dataclass
from typing import Callable, Dict

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from perfpay.models.attendance import Attendance
from perfpay.models.leave_request import LeaveRequest, LeaveStatus, LeaveType
from perfpay.models.task import Task, TaskReview, TaskStatus
from perfpay.models.user import User
from perfpay.services.periods import month_bounds, previous_period, working_days

logger = logging.getLogger(__name__)

NEUTRAL_SCORE = 50.0


@dataclass(frozen=True)
class RawMetric:
    raw_value: float
    normalized_score: float


MetricProvider = Callable[[Session, int, int, str], RawMetric]


def _bounded(score: float) -> float:
    return float(max(0, min(100, math.floor(score + 0.5))))


def task_speed(db: Session, user_id: int, company_id: int, period: str) -> RawMetric:
    start, end = month_bounds(period)
    speeds = [
        s or 0.0 for (s,) in db.query(Task.speed_score).filter(
            Task.assigned_to_id == user_id,
            Task.status == TaskStatus.COMPLETED.value,
            Task.completed_at >= start,
            Task.completed_at <= end,
        ).all()
    ]
    if not speeds:
        return RawMetric(0.0, NEUTRAL_SCORE)
    avg = sum(speeds) / len(speeds)
    return RawMetric(round(avg, 2), _bounded(avg))


def attendance_consistency(db: Session, user_id: int, company_id: int, period: str) -> RawMetric:
    start, end = month_bounds(period)
    present = db.query(Attendance).filter(
        Attendance.user_id == user_id,
        Attendance.date >= start.date(),
        Attendance.date <= end.date(),
    ).count()
    days = working_days(period)
    rate = present / days * 100 if days else 0.0
    return RawMetric(round(rate, 2), _bounded(rate))


def sickness_frequency(db: Session, user_id: int, company_id: int, period: str) -> RawMetric:
    # Lower is better: each approved sick leave costs 20 points
    start, end = month_bounds(period)
    sick = db.query(LeaveRequest).filter(
        LeaveRequest.user_id == user_id,
        LeaveRequest.leave_type == LeaveType.SICK.value,
        LeaveRequest.status == LeaveStatus.APPROVED.value,
        LeaveRequest.start_date >= start.date(),
        LeaveRequest.start_date <= end.date(),
    ).count()
    return RawMetric(float(sick), _bounded(100 - sick * 20))


def simultaneous_absence(db: Session, user_id: int, company_id: int, period: str) -> RawMetric:
    """
    Company-wide: days in the trailing four months on which two or more
    active staff were absent. Every member of the company gets the same score.
    """
    window_start = period
    for _ in range(3):
        window_start = previous_period(window_start)
    start, _ = month_bounds(window_start)
    _, end = month_bounds(period)

    active = db.query(User).filter(User.company_id == company_id, User.is_active.is_(True)).count()
    company_users = select(User.id).where(User.company_id == company_id)

    short_days = db.query(Attendance.date).filter(
        Attendance.user_id.in_(company_users),
        Attendance.date >= start.date(),
        Attendance.date <= end.date(),
    ).group_by(Attendance.date).having(
        func.count(func.distinct(Attendance.user_id)) < active - 1
    ).count()
    return RawMetric(float(short_days), _bounded(100 - short_days * 15))


def overtime(db: Session, user_id: int, company_id: int, period: str) -> RawMetric:
    # 30 points baseline, roughly 3.5 per extra hour
    start, end = month_bounds(period)
    hours = db.query(func.coalesce(func.sum(Attendance.overtime_hours), 0.0)).filter(
        Attendance.user_id == user_id,
        Attendance.date >= start.date(),
        Attendance.date <= end.date(),
    ).scalar() or 0.0
    return RawMetric(round(hours, 2), _bounded(30 + hours * 3.5))


def work_accuracy(db: Session, user_id: int, company_id: int, period: str) -> RawMetric:
    start, end = month_bounds(period)
    scores = [
        s for (s,) in db.query(TaskReview.accuracy_score).join(Task).filter(
            Task.assigned_to_id == user_id,
            Task.completed_at >= start,
            Task.completed_at <= end,
        ).all()
    ]
    if not scores:
        return RawMetric(0.0, NEUTRAL_SCORE)
    avg = sum(scores) / len(scores)
    return RawMetric(round(avg, 2), _bounded(avg))


def backlog(db: Session, user_id: int, company_id: int, period: str) -> RawMetric:
    start, end = month_bounds(period)
    overdue = db.query(Task).filter(
        Task.assigned_to_id == user_id,
        Task.deadline < end,
        Task.status.notin_([TaskStatus.COMPLETED.value, TaskStatus.CANCELLED.value]),
        Task.created_at <= end,
    ).count()
    total = db.query(Task).filter(
        Task.assigned_to_id == user_id,
        Task.created_at >= start,
        Task.created_at <= end,
    ).count()
    if total == 0:
        return RawMetric(0.0, 70.0)
    rate = overdue / total * 100
    return RawMetric(float(overdue), _bounded(100 - rate * 1.5))


def leave_discipline(db: Session, user_id: int, company_id: int, period: str) -> RawMetric:
    start, end = month_bounds(period)
    leaves = db.query(LeaveRequest).filter(
        LeaveRequest.user_id == user_id,
        LeaveRequest.status.in_([LeaveStatus.APPROVED.value, LeaveStatus.PENDING.value]),
        LeaveRequest.start_date >= start.date(),
        LeaveRequest.start_date <= end.date(),
    ).all()
    if not leaves:
        return RawMetric(0.0, 80.0)
    advance = sum(1 for l in leaves if l.is_advance)
    emergency = sum(1 for l in leaves if l.is_emergency)
    impact = sum(l.scoring_impact or 0.0 for l in leaves)
    score = 80 + advance * 5 + impact * 10 - emergency * 15
    return RawMetric(float(emergency), _bounded(score))


def wfh_productivity(db: Session, user_id: int, company_id: int, period: str) -> RawMetric:
    start, end = month_bounds(period)
    wfh_days = db.query(Attendance).filter(
        Attendance.user_id == user_id,
        Attendance.is_wfh.is_(True),
        Attendance.date >= start.date(),
        Attendance.date <= end.date(),
    ).count()
    if wfh_days == 0:
        return RawMetric(0.0, NEUTRAL_SCORE)
    wfh_tasks = db.query(Task).filter(
        Task.assigned_to_id == user_id,
        Task.is_wfh_task.is_(True),
        Task.status == TaskStatus.COMPLETED.value,
        Task.completed_at >= start,
        Task.completed_at <= end,
    ).count()
    per_day = wfh_tasks / wfh_days
    return RawMetric(round(per_day, 2), _bounded(per_day * 50))


def punctuality(db: Session, user_id: int, company_id: int, period: str) -> RawMetric:
    # Each late arrival costs 10 points, each half day 20
    start, end = month_bounds(period)
    month_rows = db.query(Attendance).filter(
        Attendance.user_id == user_id,
        Attendance.date >= start.date(),
        Attendance.date <= end.date(),
    )
    late = month_rows.filter(Attendance.is_late.is_(True)).count()
    half = month_rows.filter(Attendance.is_half_day.is_(True)).count()
    return RawMetric(float(late + half * 2), _bounded(100 - late * 10 - half * 20))


METRIC_PROVIDERS: Dict[str, MetricProvider] = {
    "task_speed": task_speed,
    "attendance_consistency": attendance_consistency,
    "sickness_frequency": sickness_frequency,
    "simultaneous_absence": simultaneous_absence,
    "overtime": overtime,
    "work_accuracy": work_accuracy,
    "backlog": backlog,
    "leave_discipline": leave_discipline,
    "wfh_productivity": wfh_productivity,
    "punctuality": punctuality,
}


def measure(db: Session, metric_key: str, user_id: int, company_id: int, period: str) -> RawMetric:
    provider = METRIC_PROVIDERS.get(metric_key or "")
    if provider is None:
        logger.info(f"No metric provider for '{metric_key}', using neutral score")
        return RawMetric(0.0, NEUTRAL_SCORE)
    return provider(db, user_id, company_id, period)
