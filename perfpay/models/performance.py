from sqlalchemy import (
    Column, Integer, String, Float, Boolean, DateTime, ForeignKey, JSON, UniqueConstraint
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from perfpay.database import Base
import enum

class ScoreDirection(str, enum.Enum):
    HIGHER_IS_BETTER = "HIGHER_IS_BETTER"
    LOWER_IS_BETTER = "LOWER_IS_BETTER"
    CUSTOM = "CUSTOM"

class ScoreParameter(Base):
    __tablename__ = "score_parameters"
    __table_args__ = (
        UniqueConstraint("company_id", "name", name="uq_parameter_company_name"),
    )

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    weight = Column(Float, nullable=False)
    # Display metadata only: each metric provider already knows whether lower is better
    direction = Column(String, default=ScoreDirection.HIGHER_IS_BETTER.value)
    metric_key = Column(String, nullable=True)  # key into the metric provider registry
    sort_order = Column(Integer, default=0)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    company = relationship("Company", back_populates="parameters")

class ParameterScore(Base):
    __tablename__ = "parameter_scores"
    __table_args__ = (
        UniqueConstraint("user_id", "period", "parameter_id", name="uq_score_user_period_parameter"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    parameter_id = Column(Integer, ForeignKey("score_parameters.id"), nullable=False)
    period = Column(String(7), nullable=False, index=True)  # YYYY-MM
    raw_value = Column(Float, default=0.0)
    normalized_score = Column(Float, nullable=False)  # 0-100
    weight = Column(Float, nullable=False)  # parameter weight in force when the score was stored
    weighted_score = Column(Float, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    parameter = relationship("ScoreParameter")

class BonusRecord(Base):
    __tablename__ = "bonus_records"
    __table_args__ = (
        UniqueConstraint("user_id", "period", name="uq_bonus_user_period"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    period = Column(String(7), nullable=False, index=True)
    total_score = Column(Float, nullable=False)
    bonus_percentage = Column(Float, nullable=False)
    tier = Column(String, nullable=False)
    tier_color = Column(String, nullable=True)
    breakdown = Column(JSON, nullable=True)
    is_finalized = Column(Boolean, default=False, nullable=False)
    finalized_at = Column(DateTime(timezone=True), nullable=True)
    finalized_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
