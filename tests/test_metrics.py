from datetime import date, datetime

from perfpay.models.attendance import Attendance
from perfpay.models.leave_request import LeaveRequest
from perfpay.models.task import Task, TaskReview
from perfpay.services import metrics

PERIOD = "2026-03"


def test_unknown_metric_is_neutral(db_session, company, staff_user):
    result = metrics.measure(db_session, "does_not_exist", staff_user.id, company.id, PERIOD)
    assert result == metrics.RawMetric(0.0, metrics.NEUTRAL_SCORE)


def test_punctuality_penalises_late_and_half_days(db_session, company, staff_user):
    db_session.add_all([
        Attendance(user_id=staff_user.id, date=date(2026, 3, 2), is_late=True),
        Attendance(user_id=staff_user.id, date=date(2026, 3, 3), is_late=True),
        Attendance(user_id=staff_user.id, date=date(2026, 3, 4), is_half_day=True),
        # Outside the period
        Attendance(user_id=staff_user.id, date=date(2026, 2, 27), is_late=True),
    ])
    db_session.commit()

    result = metrics.measure(db_session, "punctuality", staff_user.id, company.id, PERIOD)
    assert result.normalized_score == 60.0
    assert result.raw_value == 4.0


def test_overtime_is_capped_at_hundred(db_session, company, staff_user):
    db_session.add(Attendance(user_id=staff_user.id, date=date(2026, 3, 5), overtime_hours=40))
    db_session.commit()

    result = metrics.measure(db_session, "overtime", staff_user.id, company.id, PERIOD)
    assert result.raw_value == 40
    assert result.normalized_score == 100.0


def test_sickness_frequency_counts_approved_sick_leave(db_session, company, staff_user):
    db_session.add_all([
        LeaveRequest(user_id=staff_user.id, leave_type="SICK", status="APPROVED",
                     start_date=date(2026, 3, 9), end_date=date(2026, 3, 9)),
        LeaveRequest(user_id=staff_user.id, leave_type="SICK", status="REJECTED",
                     start_date=date(2026, 3, 16), end_date=date(2026, 3, 16)),
    ])
    db_session.commit()

    result = metrics.measure(db_session, "sickness_frequency", staff_user.id, company.id, PERIOD)
    assert result.raw_value == 1
    assert result.normalized_score == 80.0


def test_work_accuracy_averages_reviews(db_session, company, reviewer_user, staff_user):
    for score in (90, 70):
        task = Task(
            title=f"Task {score}",
            assigned_to_id=staff_user.id,
            status="COMPLETED",
            completed_at=datetime(2026, 3, 12, 10, 0),
        )
        db_session.add(task)
        db_session.flush()
        db_session.add(TaskReview(task_id=task.id, reviewer_id=reviewer_user.id, accuracy_score=score))
    db_session.commit()

    result = metrics.measure(db_session, "work_accuracy", staff_user.id, company.id, PERIOD)
    assert result.raw_value == 80
    assert result.normalized_score == 80.0


def test_task_speed_without_completed_tasks_is_neutral(db_session, company, staff_user):
    result = metrics.measure(db_session, "task_speed", staff_user.id, company.id, PERIOD)
    assert result.normalized_score == metrics.NEUTRAL_SCORE


def test_every_default_metric_has_a_provider():
    from perfpay.services.parameter_service import DEFAULT_PARAMETERS
    for entry in DEFAULT_PARAMETERS:
        assert entry["metric_key"] in metrics.METRIC_PROVIDERS
