"""
Salary slip reconciliation.

Lifecycle: DRAFT -> GENERATED -> COMPARED -> FINALIZED (terminal).

Employees submit their own figures for a slip; admins may submit anything,
including an explicit status. Every check runs before the first column is
written, so a rejected submission leaves the slip exactly as it was.
"""
from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy.orm import Session

from perfpay.core.exceptions import AccessDeniedError, AlreadyFinalizedError, ValidationFailure
from perfpay.models.salary import EMPLOYEE_FIELDS, SalarySlip, SlipStatus
from perfpay.models.user import User
from perfpay.schemas.salary import SlipSubmission
from perfpay.services.access import load_in_company
from perfpay.services.audit import AuditService
from perfpay.services.base import BaseService
from perfpay.services.salary_service import compute_discrepancy

NON_NEGATIVE_FIELDS = ("employee_gross", "employee_deductions")


class SlipReconciler(BaseService):

    def __init__(self, db: Session, company_id: int):
        super().__init__(db, org_id=company_id)
        self.company_id = company_id

    def submit(self, slip_id: int, actor: User, payload: SlipSubmission) -> SalarySlip:
        # Explicit nulls are treated as "not sent"
        changes: Dict[str, Any] = {
            k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None
        }

        slip = load_in_company(self.db, SalarySlip, slip_id, self.company_id, "Salary slip")
        self._authorize(slip, actor, changes)
        self._validate(changes)

        before = self._state(slip)
        self._apply(slip, changes)

        AuditService.log(
            self.db,
            action="submit_salary_slip",
            entity_type="salary_slip",
            entity_id=slip.id,
            user_id=actor.id,
            user_role=actor.role,
            details={"fields": sorted(changes.keys())},
            company_id=self.company_id,
            before_state=before,
            after_state=self._state(slip),
        )
        self.commit()
        self.db.refresh(slip)

        self.log_info(f"Slip {slip.id} {before['status']} -> {slip.status}, discrepancy {slip.discrepancy}")
        return slip

    def _authorize(self, slip: SalarySlip, actor: User, changes: Dict[str, Any]):
        if slip.status == SlipStatus.FINALIZED.value:
            raise AlreadyFinalizedError("Salary slip is finalized and can no longer be modified")
        if actor.is_admin:
            return
        if slip.user_id != actor.id:
            self.log_warning(f"User {actor.id} tried to update slip {slip.id} of user {slip.user_id}")
            raise AccessDeniedError("You can only update your own salary slips")
        if "status" in changes:
            if changes["status"] == SlipStatus.FINALIZED:
                raise AccessDeniedError("Only admins can finalize salary slips")
            raise AccessDeniedError("Only admins can change slip status")

    def _validate(self, changes: Dict[str, Any]):
        for field in NON_NEGATIVE_FIELDS:
            if field in changes and changes[field] < 0:
                raise ValidationFailure(f"{field} must not be negative")

    def _apply(self, slip: SalarySlip, changes: Dict[str, Any]):
        for field in EMPLOYEE_FIELDS:
            if field in changes:
                setattr(slip, field, changes[field])
        if "discrepancy_notes" in changes:
            slip.discrepancy_notes = changes["discrepancy_notes"]

        slip.discrepancy = compute_discrepancy(slip.system_net, slip.employee_net)

        target = changes.get("status")
        if target is not None:
            slip.status = target.value
        elif "employee_net" in changes and slip.system_net is not None:
            # Only a newly sent employee net advances the slip
            slip.status = SlipStatus.COMPARED.value

        if slip.status == SlipStatus.FINALIZED.value:
            slip.finalized_at = datetime.now(timezone.utc)

    @staticmethod
    def _state(slip: SalarySlip) -> Dict[str, Any]:
        return {
            "status": slip.status,
            "employee_gross": slip.employee_gross,
            "employee_deductions": slip.employee_deductions,
            "employee_net": slip.employee_net,
            "discrepancy": slip.discrepancy,
        }
