# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import (
    company, user, performance, salary,
    task, attendance, leave_request, audit_log
)

# Explicit class exports for cleaner imports
from .company import Company
from .user import User, UserRole
from .performance import ScoreParameter, ParameterScore, BonusRecord
from .salary import SalaryStructure, SalarySlip, SlipStatus

__all__ = [
    "Company",
    "User",
    "UserRole",
    "ScoreParameter",
    "ParameterScore",
    "BonusRecord",
    "SalaryStructure",
    "SalarySlip",
    "SlipStatus",
]
