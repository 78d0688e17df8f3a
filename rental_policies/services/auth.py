"""Auth service: login and resolution of the acting user from an access token."""

import logging

from sqlalchemy.orm import Session

from rental_policies.core.security import create_access_token, decode_token, verify_password
from rental_policies.db.models.user import User as UserModel
from rental_policies.errors import UnauthorizedError
from rental_policies.repositories.user import get_user_by_email, get_user_by_id
from rental_policies.schemas.user import Token, User

logger = logging.getLogger(__name__)


def login(db: Session, email: str, password: str) -> Token:
    """
    Authenticate user by email and password, return JWT access token.

    Raises:
        UnauthorizedError: If email not found or password incorrect.
    """
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        raise UnauthorizedError("Incorrect email or password")

    access_token = create_access_token(data={"sub": user.id})
    return Token(
        access_token=access_token,
        token_type="bearer",
        user=User.model_validate(user),
    )


def resolve_current_user(db: Session, token: str) -> UserModel:
    """
    Resolve the acting user from a bearer token.

    Raises:
        UnauthorizedError: If the token is invalid, expired, not an access
            token, or names a user that no longer exists.
    """
    payload = decode_token(token)
    # Only "access" tokens identify an actor
    if payload is None or payload.get("type") != "access":
        raise UnauthorizedError("Could not validate credentials")

    subject = payload.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        raise UnauthorizedError("Could not validate credentials")

    user = get_user_by_id(db, user_id)
    if user is None:
        logger.warning(f"Access token for unknown user {user_id}")
        raise UnauthorizedError("User not found")
    return user
