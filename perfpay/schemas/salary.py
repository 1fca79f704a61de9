from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from typing import Any, Dict, Optional
from perfpay.models.salary import SlipStatus

class SalaryStructureIn(BaseModel):
    user_id: int
    basic: float = Field(ge=0)
    hra: float = Field(default=0, ge=0)
    da: float = Field(default=0, ge=0)
    ta: float = Field(default=0, ge=0)
    special_allow: float = Field(default=0, ge=0)
    pf: float = Field(default=0, ge=0)
    esi: float = Field(default=0, ge=0)
    tax: float = Field(default=0, ge=0)
    other_deduct: float = Field(default=0, ge=0)
    currency: Optional[str] = None
    effective_from: date

class SalaryStructureResponse(BaseModel):
    id: int
    user_id: int
    basic: float
    hra: float
    da: float
    ta: float
    special_allow: float
    pf: float
    esi: float
    tax: float
    other_deduct: float
    net_salary: float
    currency: str
    effective_from: date

    model_config = ConfigDict(from_attributes=True)

class SlipGenerateRequest(BaseModel):
    user_id: int
    month: str

class SlipSubmission(BaseModel):
    """Partial update of a slip; only fields that were sent are applied."""
    employee_gross: Optional[float] = None
    employee_deductions: Optional[float] = None
    employee_net: Optional[float] = None
    employee_breakdown: Optional[Dict[str, Any]] = None
    discrepancy_notes: Optional[str] = None
    status: Optional[SlipStatus] = None

class SalarySlipResponse(BaseModel):
    id: int
    user_id: int
    company_id: int
    month: str
    system_gross: Optional[float] = None
    system_deductions: Optional[float] = None
    system_net: Optional[float] = None
    system_breakdown: Optional[Dict[str, Any]] = None
    employee_gross: Optional[float] = None
    employee_deductions: Optional[float] = None
    employee_net: Optional[float] = None
    employee_breakdown: Optional[Dict[str, Any]] = None
    discrepancy: Optional[float] = None
    discrepancy_notes: Optional[str] = None
    bonus_percentage: Optional[float] = None
    bonus_amount: Optional[float] = None
    status: str
    generated_at: Optional[datetime] = None
    finalized_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
