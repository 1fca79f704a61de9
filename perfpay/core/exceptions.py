from typing import Any, Dict, Optional

class AppException(Exception):
    def __init__(
        self,
        message: str,
        status_code: int = 400,
        error_code: str = "BUSINESS_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)

class ValidationFailure(AppException):
    """Malformed or out-of-range input such as a bad period key or a negative weight."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=422,
            error_code="VALIDATION_FAILED",
            details=details
        )

class NotFoundError(AppException):
    """
    Referenced entity is missing or belongs to another company.
    Both cases produce the same message so tenant boundaries do not leak.
    """
    def __init__(self, entity: str = "Resource"):
        super().__init__(
            message=f"{entity} not found",
            status_code=404,
            error_code="NOT_FOUND"
        )

class PreconditionFailedError(AppException):
    def __init__(self, message: str):
        super().__init__(
            message=message,
            status_code=412,
            error_code="PRECONDITION_FAILED"
        )

class AuthenticationError(AppException):
    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(
            message=message,
            status_code=401,
            error_code="AUTH_FAILED"
        )

class AccessDeniedError(AppException):
    """Custom permission error. Named AccessDeniedError to avoid shadowing Python's built-in PermissionError."""
    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(
            message=message,
            status_code=403,
            error_code="PERMISSION_DENIED"
        )

class AlreadyFinalizedError(AppException):
    def __init__(self, message: str = "Record is finalized and can no longer be modified"):
        super().__init__(
            message=message,
            status_code=409,
            error_code="ALREADY_FINALIZED"
        )

class ScoreConflictError(AppException):
    """Another request persisted scores for the same user and period first."""
    def __init__(self, user_id: int, period: str):
        super().__init__(
            message=f"Scores for user {user_id} in {period} were written concurrently",
            status_code=409,
            error_code="SCORE_CONFLICT",
            details={"user_id": user_id, "period": period}
        )
