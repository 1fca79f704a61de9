from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.sql import func
from perfpay.database import Base

class AuditLog(Base):
    """Append-only trail of compensation-relevant actions."""
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    action = Column(String, index=True, nullable=False)
    entity_type = Column(String, index=True, nullable=False)
    entity_id = Column(Integer, nullable=True)
    user_id = Column(Integer, nullable=True)
    user_role = Column(String, nullable=True)
    company_id = Column(Integer, index=True, nullable=True)
    details = Column(JSON, nullable=True)
    before_state = Column(JSON, nullable=True)
    after_state = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
