from pydantic import BaseModel, ConfigDict
from typing import Optional
from perfpay.models.user import UserRole

class LoginRequest(BaseModel):
    email: str
    password: str

class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    first_name: str
    last_name: Optional[str] = None
    role: UserRole
    company_id: int

class Token(BaseModel):
    access_token: str
    token_type: str
    user: Optional[UserResponse] = None
