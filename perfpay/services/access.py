"""
Tenant capability checks.

Every entity lookup that crosses a tenant boundary goes through here, so a
record that does not exist and a record owned by another company produce the
same NotFoundError.
"""
import logging
from typing import Type, TypeVar

from sqlalchemy.orm import Session

from perfpay.core.exceptions import AccessDeniedError, NotFoundError
from perfpay.models.user import User

logger = logging.getLogger(__name__)

M = TypeVar("M")


def load_company_user(db: Session, user_id: int, company_id: int) -> User:
    """Load a user only if they belong to ``company_id``."""
    user = db.query(User).filter(
        User.id == user_id,
        User.company_id == company_id
    ).first()
    if not user:
        raise NotFoundError("User")
    return user


def load_in_company(db: Session, model: Type[M], entity_id: int, company_id: int, label: str) -> M:
    """Load a row of a model carrying its own ``company_id`` column."""
    entity = db.query(model).filter(
        model.id == entity_id,
        model.company_id == company_id
    ).first()
    if entity is None:
        raise NotFoundError(label)
    return entity


def require_admin(actor: User, action: str) -> None:
    if not actor.is_admin:
        logger.warning(f"User {actor.id} ({actor.role.value}) denied: {action}")
        raise AccessDeniedError(f"Only admins can {action}")


def require_self_or_admin(actor: User, owner_id: int, message: str) -> None:
    if not actor.is_admin and actor.id != owner_id:
        logger.warning(f"User {actor.id} denied access to records of user {owner_id}")
        raise AccessDeniedError(message)
