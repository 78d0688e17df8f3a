from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from rental_policies.api.deps import get_db
import rental_policies.repositories.role as role_repo
from rental_policies.schemas.role import Role

router = APIRouter(prefix="/roles", tags=["roles"])


@router.get("", response_model=list[Role])
def list_roles(db: Session = Depends(get_db)):
    """List the roles a user can hold: admin, tenant and landlord. Public."""
    return [Role.model_validate(r) for r in role_repo.get_all_roles(db)]
