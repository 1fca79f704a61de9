from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from perfpay.database import Base
import enum

class TaskStatus(str, enum.Enum):
    ASSIGNED = "ASSIGNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    OVERDUE = "OVERDUE"
    CANCELLED = "CANCELLED"

class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    assigned_to_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String, default=TaskStatus.ASSIGNED.value)
    deadline = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    speed_score = Column(Float, nullable=True)  # 0-100, set when the task is completed
    is_wfh_task = Column(Boolean, default=False)
    created_at = Column(DateTime, server_default=func.now())

    review = relationship("TaskReview", back_populates="task", uselist=False, cascade="all, delete-orphan")

class TaskReview(Base):
    __tablename__ = "task_reviews"

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id"), unique=True, nullable=False)
    reviewer_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    accuracy_score = Column(Float, nullable=False)  # 0-100
    reviewer_notes = Column(String, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    task = relationship("Task", back_populates="review")
