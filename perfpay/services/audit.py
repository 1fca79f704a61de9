from perfpay.services.base import BaseService
from perfpay.models.audit_log import AuditLog
from typing import Any, Optional


def _sanitize(obj: Any) -> Any:
    # Ensure serialization of nested Pydantic models / enums in details and states
    if hasattr(obj, "model_dump"):
        return obj.model_dump(mode="json")
    if isinstance(obj, dict):
        return {k: _sanitize(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_sanitize(i) for i in obj]
    if hasattr(obj, "value") and hasattr(obj, "name"):
        return obj.value
    return obj


class AuditService(BaseService):
    def log_action(
        self,
        action: str,
        entity_type: str,
        entity_id: Optional[int],
        user_id: Optional[int],
        user_role: Optional[str],
        details: dict,
        company_id: Optional[int] = None,
        before_state: Optional[dict] = None,
        after_state: Optional[dict] = None
    ) -> AuditLog:
        """
        Create an append-only audit entry in the caller's transaction.
        The entry is flushed, not committed, so it shares the fate of the main action.
        """
        db_log = AuditLog(
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            user_id=user_id,
            user_role=_sanitize(user_role),
            details=_sanitize(details),
            company_id=company_id or self.org_id,
            before_state=_sanitize(before_state),
            after_state=_sanitize(after_state)
        )
        self.db.add(db_log)
        self.db.flush()
        return db_log

    # Static wrapper for call sites that only hold a session
    @staticmethod
    def log(db, *args, **kwargs) -> AuditLog:
        service = AuditService(db)
        return service.log_action(*args, **kwargs)
