from pydantic import BaseModel, ConfigDict
from typing import Optional
from perfpay.models.performance import ScoreDirection

class ParameterCreate(BaseModel):
    name: str
    description: Optional[str] = None
    weight: float
    direction: ScoreDirection = ScoreDirection.HIGHER_IS_BETTER
    metric_key: Optional[str] = None
    sort_order: Optional[int] = None

class ParameterUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    weight: Optional[float] = None
    direction: Optional[ScoreDirection] = None
    metric_key: Optional[str] = None
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None

class ParameterResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    weight: float
    direction: str
    metric_key: Optional[str] = None
    sort_order: int
    is_active: bool

    model_config = ConfigDict(from_attributes=True)
