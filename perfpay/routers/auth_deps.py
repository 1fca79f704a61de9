"""
Authentication dependencies for FastAPI endpoints. Role checks live in
perfpay.services.access.

The token carries the user's email as ``sub`` and the tenant as ``org_id``;
every service call is scoped with the company resolved here.
"""

import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from perfpay.core.security import decode_access_token
from perfpay.database import get_db
from perfpay.models.user import User

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


def _credentials_error(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _decode(token: str) -> dict:
    payload = decode_access_token(token)
    if payload is None:
        logger.warning("Authentication failed: Invalid token")
        raise _credentials_error("Could not validate credentials")
    if payload.get("error") == "TOKEN_EXPIRED":
        logger.info("Authentication failed: Token expired")
        raise _credentials_error("TOKEN_EXPIRED")
    if payload.get("type") != "access":
        logger.warning("Authentication failed: Invalid token type")
        raise _credentials_error("Invalid token type")
    return payload


def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
    """Extracts and validates the current user from the JWT token."""
    payload = _decode(token)

    email = payload.get("sub")
    if email is None:
        logger.warning("Authentication failed: Missing subject (email) in token")
        raise _credentials_error("Missing subject in token")

    user = db.query(User).filter(User.email == email).first()
    if user is None:
        logger.warning(f"Authentication failed: User {email} not found in database")
        raise _credentials_error("User not found")
    if not user.is_active:
        logger.warning(f"Authentication failed: User {email} is inactive")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User is inactive")
    return user


def get_current_org(token: str = Depends(oauth2_scheme)) -> int:
    """
    Company id from the token, without a database hit.
    """
    payload = _decode(token)
    org_id = payload.get("org_id")
    if org_id is None:
        logger.error(f"Org validation failed: No org_id in token for user {payload.get('sub')}")
        raise _credentials_error("No organization context in token")
    return int(org_id)
