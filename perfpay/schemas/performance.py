from pydantic import BaseModel, ConfigDict
from typing import List, Literal, Optional

class ScoreRow(BaseModel):
    parameter_id: int
    parameter_name: str
    weight: float
    raw_value: float
    normalized_score: float
    weighted_score: float

class PerformanceResult(BaseModel):
    """
    Outcome of a performance lookup.
    ``source`` tells whether stored scores were reused ("stored", nothing
    written) or derived from raw inputs and persisted ("computed").
    """
    user_id: int
    period: str
    total_score: float
    bonus_percentage: float
    tier: str
    tier_color: str
    scores: List[ScoreRow]
    source: Literal["stored", "computed"]

class BonusHistoryEntry(BaseModel):
    period: str
    total_score: float
    bonus_percentage: float
    tier: str
    is_finalized: bool

    model_config = ConfigDict(from_attributes=True)

class PerformanceDetail(PerformanceResult):
    user_name: str
    employee_code: Optional[str] = None
    history: List[BonusHistoryEntry] = []

class CompanyCalculationSummary(BaseModel):
    period: str
    calculated: int
    reused: int

class PeriodRequest(BaseModel):
    period: str

class FinalizeSummary(BaseModel):
    period: str
    finalized: int
