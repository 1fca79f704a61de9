from sqlalchemy import Column, Integer, Float, Boolean, Date, ForeignKey, UniqueConstraint
from perfpay.database import Base

class Attendance(Base):
    __tablename__ = "attendance"
    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_attendance_user_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    is_late = Column(Boolean, default=False)
    is_half_day = Column(Boolean, default=False)
    is_wfh = Column(Boolean, default=False)
    overtime_hours = Column(Float, default=0.0)
