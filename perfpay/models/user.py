"""
User model and roles.
Every user belongs to exactly one company (tenant).
"""
from sqlalchemy import Column, Integer, String, Enum, DateTime, Boolean, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum
from perfpay.database import Base


class UserRole(str, enum.Enum):
    """
    Hierarchy (most to least permissions):
    - SUPER_ADMIN: Platform-wide administration
    - ADMIN: Company administration (salary structures, slip generation, finalization)
    - REVIEWER: Reviews tasks, can view rankings
    - STAFF: Self-service access to own performance and slips
    """
    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"
    REVIEWER = "REVIEWER"
    STAFF = "STAFF"


ADMIN_ROLES = (UserRole.SUPER_ADMIN, UserRole.ADMIN)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=True)
    employee_code = Column(String, nullable=True)

    role = Column(Enum(UserRole), default=UserRole.STAFF, nullable=False)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    company = relationship("Company", back_populates="users")
    salary_structure = relationship("SalaryStructure", back_populates="user", uselist=False, cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User {self.email} ({self.role.value})>"

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p)

    @property
    def is_admin(self) -> bool:
        """Check if user may perform company-level administrative actions."""
        return self.role in ADMIN_ROLES

    @property
    def can_view_rankings(self) -> bool:
        return self.role in (UserRole.SUPER_ADMIN, UserRole.ADMIN, UserRole.REVIEWER)
