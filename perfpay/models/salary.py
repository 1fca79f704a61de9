from sqlalchemy import (
    Column, Integer, String, Float, DateTime, Date, ForeignKey, JSON, UniqueConstraint
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from perfpay.database import Base
import enum

class SlipStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    GENERATED = "GENERATED"
    COMPARED = "COMPARED"
    FINALIZED = "FINALIZED"

# Columns written by slip generation; reconciliation never touches these
SYSTEM_FIELDS = (
    "system_gross", "system_deductions", "system_net", "system_breakdown",
    "bonus_percentage", "bonus_amount",
)

# Columns written by employee submission; generation never touches these
EMPLOYEE_FIELDS = (
    "employee_gross", "employee_deductions", "employee_net", "employee_breakdown",
)

class SalaryStructure(Base):
    __tablename__ = "salary_structures"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)

    # Earnings
    basic = Column(Float, nullable=False)
    hra = Column(Float, default=0.0)
    da = Column(Float, default=0.0)
    ta = Column(Float, default=0.0)
    special_allow = Column(Float, default=0.0)

    # Deductions
    pf = Column(Float, default=0.0)
    esi = Column(Float, default=0.0)
    tax = Column(Float, default=0.0)
    other_deduct = Column(Float, default=0.0)

    net_salary = Column(Float, nullable=False)
    currency = Column(String(3), default="INR")
    effective_from = Column(Date, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="salary_structure")

class SalarySlip(Base):
    __tablename__ = "salary_slips"
    __table_args__ = (
        UniqueConstraint("user_id", "month", name="uq_slip_user_month"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    month = Column(String(7), nullable=False, index=True)  # YYYY-MM

    system_gross = Column(Float, nullable=True)
    system_deductions = Column(Float, nullable=True)
    system_net = Column(Float, nullable=True)
    system_breakdown = Column(JSON, nullable=True)

    employee_gross = Column(Float, nullable=True)
    employee_deductions = Column(Float, nullable=True)
    employee_net = Column(Float, nullable=True)
    employee_breakdown = Column(JSON, nullable=True)

    discrepancy = Column(Float, nullable=True)
    discrepancy_notes = Column(String, nullable=True)
    bonus_percentage = Column(Float, nullable=True)
    bonus_amount = Column(Float, nullable=True)

    status = Column(String, default=SlipStatus.DRAFT.value, nullable=False)
    generated_at = Column(DateTime(timezone=True), nullable=True)
    finalized_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User")
