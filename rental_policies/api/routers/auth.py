from fastapi import APIRouter, Depends, Form
from sqlalchemy.orm import Session

from rental_policies.api.deps import get_db, get_current_user
from rental_policies.db.models.user import User as UserModel
from rental_policies.schemas.user import Token, User
from rental_policies.services.auth import login as login_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=Token)
def login(
    username: str = Form(...),  # OAuth2 uses "username", but we treat it as email
    password: str = Form(...),
    db: Session = Depends(get_db),
):
    """
    Login endpoint - returns JWT token.
    Uses form data for OAuth2 compatibility (Swagger UI authorization).
    The 'username' field should contain the user's email address.
    """
    return login_service(db, email=username, password=password)


@router.get("/me", response_model=User)
def get_current_user_info(current_user: UserModel = Depends(get_current_user)):
    """Get current authenticated user information."""
    return User.model_validate(current_user)
