from sqlalchemy import Column, Integer, String, Date, Float, Boolean, ForeignKey, DateTime
from sqlalchemy.sql import func
from perfpay.database import Base
import enum

class LeaveStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"

class LeaveType(str, enum.Enum):
    SICK = "SICK"
    PERSONAL = "PERSONAL"
    EMERGENCY = "EMERGENCY"

class LeaveRequest(Base):
    __tablename__ = "leave_requests"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    leave_type = Column(String, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    status = Column(String, default=LeaveStatus.PENDING.value)  # Using String to store enum value for simplicity with SQLite
    is_advance = Column(Boolean, default=False)
    is_emergency = Column(Boolean, default=False)
    scoring_impact = Column(Float, default=0.0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
