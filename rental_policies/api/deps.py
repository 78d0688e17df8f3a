from fastapi import BackgroundTasks, Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session, sessionmaker

from rental_policies.db import SessionLocal
from rental_policies.db.models.user import User
from rental_policies.errors import ForbiddenError
from rental_policies.services.auth import resolve_current_user
from rental_policies.services.policy_change_log import FanOutLauncher, run_policy_update_fan_out

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_factory() -> sessionmaker:
    """Session factory for work that outlives the request (background fan-out)."""
    return SessionLocal


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Get the current authenticated user from JWT token."""
    return resolve_current_user(db, token)


def require_roles(*role_names: str):
    """
    Create a dependency that requires the current user to have one of the specified roles.

    Example:
        Depends(require_roles("landlord"))
        Depends(require_roles("landlord", "admin"))
    """
    def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role.name not in role_names:
            raise ForbiddenError("Not enough permissions")
        return current_user

    return role_checker


def get_fan_out_launcher(
    background_tasks: BackgroundTasks,
    session_factory: sessionmaker = Depends(get_session_factory),
) -> FanOutLauncher:
    """Schedule policy update fan-out to run after the response is sent."""

    def launch(policy_update_id: int) -> None:
        background_tasks.add_task(run_policy_update_fan_out, session_factory, policy_update_id)

    return launch
