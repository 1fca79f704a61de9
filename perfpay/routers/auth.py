from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from perfpay.core.exceptions import AuthenticationError
from perfpay.core.security import create_access_token, verify_password
from perfpay.database import get_db
from perfpay.models.user import User
from perfpay.routers.auth_deps import get_current_user
from perfpay.schemas.auth import LoginRequest, Token, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"]
)


@router.post("/login", response_model=Token)
def login(login_data: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == login_data.email).first()
    if not user or not verify_password(login_data.password, user.hashed_password):
        logger.warning(f"Failed login for {login_data.email}")
        raise AuthenticationError("Incorrect email or password")
    if not user.is_active:
        raise AuthenticationError("User is inactive")

    access_token = create_access_token(data={
        "sub": user.email,
        "role": user.role.value,
        "user_id": user.id,
        "org_id": user.company_id,
    })
    logger.info(f"User {user.id} logged in")
    return {
        "access_token": access_token,
        "token_type": "bearer",
        "user": UserResponse.model_validate(user),
    }


@router.get("/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user)):
    return current_user
