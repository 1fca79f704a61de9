from datetime import date

import pytest

from perfpay.core.exceptions import AccessDeniedError, AlreadyFinalizedError, NotFoundError, ValidationFailure
from perfpay.models.audit_log import AuditLog
from perfpay.models.salary import SalarySlip, SlipStatus
from perfpay.schemas.salary import SalaryStructureIn, SlipSubmission
from perfpay.services import salary_service
from perfpay.services.reconciliation import SlipReconciler

MONTH = "2026-03"


@pytest.fixture
def slip(db_session, company, admin_user, staff_user):
    salary_service.save_structure(db_session, company.id, SalaryStructureIn(
        user_id=staff_user.id, basic=20000, hra=8000, special_allow=2000,
        pf=2400, tax=1500, effective_from=date(2026, 1, 1),
    ), admin_user)
    return salary_service.generate_slip(db_session, staff_user.id, company.id, MONTH, admin_user)


@pytest.fixture
def reconciler(db_session, company):
    return SlipReconciler(db_session, company.id)


def _snapshot(db_session, slip_id):
    db_session.expire_all()
    s = db_session.get(SalarySlip, slip_id)
    return (s.status, s.employee_gross, s.employee_deductions, s.employee_net, s.discrepancy, s.discrepancy_notes)


def test_owner_submission_compares_when_both_nets_known(reconciler, slip, staff_user):
    updated = reconciler.submit(slip.id, staff_user, SlipSubmission(
        employee_gross=30000, employee_deductions=3900, employee_net=26000,
    ))
    assert updated.status == SlipStatus.COMPARED.value
    assert updated.discrepancy == 100
    assert updated.employee_gross == 30000


def test_partial_submission_without_net_stays_generated(reconciler, slip, staff_user):
    updated = reconciler.submit(slip.id, staff_user, SlipSubmission(employee_gross=30000))
    assert updated.status == SlipStatus.GENERATED.value
    assert updated.discrepancy is None


def test_draft_slip_without_system_side_is_not_compared(db_session, company, reconciler, staff_user):
    draft = SalarySlip(user_id=staff_user.id, company_id=company.id, month="2026-04")
    db_session.add(draft)
    db_session.commit()

    updated = reconciler.submit(draft.id, staff_user, SlipSubmission(employee_net=25000))
    assert updated.status == SlipStatus.DRAFT.value
    assert updated.discrepancy is None
    assert updated.employee_net == 25000


def test_explicit_null_is_ignored(reconciler, slip, staff_user):
    reconciler.submit(slip.id, staff_user, SlipSubmission(employee_net=26000))
    updated = reconciler.submit(slip.id, staff_user, SlipSubmission(employee_net=None, discrepancy_notes="ok"))
    assert updated.employee_net == 26000
    assert updated.discrepancy_notes == "ok"


def test_notes_only_submission_keeps_status(db_session, company, reconciler, slip, admin_user, staff_user):
    reconciler.submit(slip.id, staff_user, SlipSubmission(employee_net=28000))
    regenerated = salary_service.generate_slip(db_session, staff_user.id, company.id, MONTH, admin_user)
    assert regenerated.status == SlipStatus.GENERATED.value

    updated = reconciler.submit(slip.id, staff_user, SlipSubmission(discrepancy_notes="checking with HR"))
    assert updated.status == SlipStatus.GENERATED.value
    assert updated.discrepancy == 1900
    assert updated.discrepancy_notes == "checking with HR"

    updated = reconciler.submit(slip.id, staff_user, SlipSubmission())
    assert updated.status == SlipStatus.GENERATED.value


def test_never_auto_finalizes(reconciler, slip, staff_user):
    for net in (26000, 26050, 26100):
        updated = reconciler.submit(slip.id, staff_user, SlipSubmission(employee_net=net))
    assert updated.status == SlipStatus.COMPARED.value
    assert updated.discrepancy == 0
    assert updated.finalized_at is None


def test_admin_can_finalize(reconciler, slip, admin_user):
    updated = reconciler.submit(slip.id, admin_user, SlipSubmission(status=SlipStatus.FINALIZED))
    assert updated.status == SlipStatus.FINALIZED.value
    assert updated.finalized_at is not None


def test_admin_explicit_status_wins_over_auto_compare(reconciler, slip, admin_user):
    updated = reconciler.submit(slip.id, admin_user, SlipSubmission(
        employee_net=26000, status=SlipStatus.GENERATED,
    ))
    assert updated.status == SlipStatus.GENERATED.value
    assert updated.discrepancy == 100


@pytest.mark.parametrize("status", [SlipStatus.FINALIZED, SlipStatus.COMPARED, SlipStatus.GENERATED])
def test_staff_cannot_set_status(db_session, reconciler, slip, staff_user, status):
    before = _snapshot(db_session, slip.id)
    with pytest.raises(AccessDeniedError):
        reconciler.submit(slip.id, staff_user, SlipSubmission(employee_net=26000, status=status))
    assert _snapshot(db_session, slip.id) == before


def test_staff_cannot_touch_colleague_slip(db_session, reconciler, slip, second_staff_user):
    before = _snapshot(db_session, slip.id)
    with pytest.raises(AccessDeniedError):
        reconciler.submit(slip.id, second_staff_user, SlipSubmission(employee_net=1))
    assert _snapshot(db_session, slip.id) == before


def test_reviewer_is_not_an_admin_for_slips(reconciler, slip, reviewer_user):
    with pytest.raises(AccessDeniedError):
        reconciler.submit(slip.id, reviewer_user, SlipSubmission(employee_net=1))


@pytest.mark.parametrize("field", ["employee_gross", "employee_deductions"])
def test_negative_amounts_are_rejected(db_session, reconciler, slip, staff_user, field):
    before = _snapshot(db_session, slip.id)
    with pytest.raises(ValidationFailure):
        reconciler.submit(slip.id, staff_user, SlipSubmission(employee_net=26000, **{field: -1}))
    assert _snapshot(db_session, slip.id) == before


def test_other_company_slip_is_not_found(db_session, other_company, slip, admin_user):
    with pytest.raises(NotFoundError):
        SlipReconciler(db_session, other_company.id).submit(slip.id, admin_user, SlipSubmission(employee_net=1))


def test_missing_slip_is_not_found(reconciler, admin_user):
    with pytest.raises(NotFoundError):
        reconciler.submit(9999, admin_user, SlipSubmission(employee_net=1))


def test_finalized_slip_is_locked_for_every_role(db_session, reconciler, slip, admin_user, staff_user, second_staff_user):
    reconciler.submit(slip.id, admin_user, SlipSubmission(status=SlipStatus.FINALIZED))
    before = _snapshot(db_session, slip.id)

    for actor in (admin_user, staff_user, second_staff_user):
        with pytest.raises(AlreadyFinalizedError):
            reconciler.submit(slip.id, actor, SlipSubmission(employee_net=1))

    assert _snapshot(db_session, slip.id) == before


def test_submission_is_audited_with_before_and_after(db_session, reconciler, slip, staff_user):
    reconciler.submit(slip.id, staff_user, SlipSubmission(employee_net=26000))

    entry = db_session.query(AuditLog).filter(AuditLog.action == "submit_salary_slip").one()
    assert entry.user_id == staff_user.id
    assert entry.before_state["status"] == SlipStatus.GENERATED.value
    assert entry.after_state["status"] == SlipStatus.COMPARED.value
    assert entry.details["fields"] == ["employee_net"]
