from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from rental_policies.api.deps import get_db, get_current_user, require_roles
from rental_policies.db.models.user import User
from rental_policies.schemas.policy_template import (
    PolicyTemplate,
    PolicyTemplateCreate,
    PolicyTemplateUpdate,
)
from rental_policies.services import policy_template as template_service

router = APIRouter(prefix="/policy-templates", tags=["policy-templates"])


@router.post("", response_model=PolicyTemplate, status_code=status.HTTP_201_CREATED)
def create_policy_template(
    template_data: PolicyTemplateCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Create a private policy template. Only landlords can create templates.
    """
    template = template_service.create_template(
        db,
        acting_user=current_user,
        title=template_data.title,
        description=template_data.description,
        category=template_data.category,
        default_value=template_data.default_value,
        is_required=template_data.is_required,
    )
    return PolicyTemplate.model_validate(template)


@router.get("", response_model=list[PolicyTemplate])
def get_policy_templates(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Get the policy templates available to the current user, ordered by category.
    - Landlord: own private templates plus all system templates
    - Others: system templates only
    """
    templates = template_service.list_templates_for_user(db, current_user)
    return [PolicyTemplate.model_validate(t) for t in templates]


@router.get("/system", response_model=list[PolicyTemplate])
def get_system_policy_templates(db: Session = Depends(get_db)):
    """Get the system-wide policy templates. Public."""
    templates = template_service.list_system_templates(db)
    return [PolicyTemplate.model_validate(t) for t in templates]


@router.get("/{template_id}", response_model=PolicyTemplate)
def get_policy_template_by_id(
    template_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Get a policy template by ID.
    - System templates: anyone
    - Private templates: the owning landlord and admins
    """
    template = template_service.get_template_for_user(db, template_id, current_user)
    return PolicyTemplate.model_validate(template)


@router.put("/{template_id}", response_model=PolicyTemplate)
def update_policy_template(
    template_id: int,
    template_data: PolicyTemplateUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("landlord")),
):
    """
    Update a private policy template. Only the owning landlord can update it;
    system templates cannot be updated.

    Fields not included in the request are not updated.
    """
    update_data = template_data.model_dump(exclude_unset=True)
    template = template_service.update_template(
        db, template_id=template_id, acting_user=current_user, **update_data
    )
    return PolicyTemplate.model_validate(template)


@router.delete("/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_policy_template(
    template_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("landlord")),
):
    """
    Delete a private policy template. Only the owning landlord can delete it.

    A template can only be deleted while no property has it active.
    """
    template_service.delete_template(db, template_id=template_id, acting_user=current_user)
