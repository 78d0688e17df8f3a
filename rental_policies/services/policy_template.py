import logging

from sqlalchemy.orm import Session

import rental_policies.repositories.policy_template as template_repo
from rental_policies.db.models.policy_template import PolicyTemplate as PolicyTemplateModel
from rental_policies.db.models.user import User
from rental_policies.domain.policy_values import POLICY_CATEGORIES
from rental_policies.errors import (
    DomainValidationError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
)

logger = logging.getLogger(__name__)


def _ensure_can_modify(template: PolicyTemplateModel, acting_user: User) -> None:
    """Only the owning landlord may change a private template; nobody may change a system one."""
    if template.is_system_template or template.landlord_id != acting_user.id:
        raise ForbiddenError("Cannot modify this policy template")


def _validate_fields(title: str | None, category: str | None) -> None:
    if title is not None and not title.strip():
        raise DomainValidationError("Policy template title cannot be blank")
    if category is not None and category not in POLICY_CATEGORIES:
        raise DomainValidationError(f"Unknown policy category: {category}")


def get_template(db: Session, template_id: int) -> PolicyTemplateModel:
    """Get a template or raise NotFoundError."""
    template = template_repo.get_template_by_id(db, template_id)
    if not template:
        raise NotFoundError("Policy template not found")
    return template


def get_template_for_user(db: Session, template_id: int, current_user: User) -> PolicyTemplateModel:
    """
    Get a template the user may see: any system template, or a private one
    they own. Admins see everything.

    Raises:
        NotFoundError: If the template doesn't exist
        ForbiddenError: If it is another landlord's private template
    """
    template = get_template(db, template_id)
    if (
        not template.is_system_template
        and template.landlord_id != current_user.id
        and current_user.role.name != "admin"
    ):
        raise ForbiddenError("Not enough permissions")
    return template


def create_template(
    db: Session,
    acting_user: User,
    title: str,
    description: str,
    category: str,
    default_value: str = "",
    is_required: bool = False,
) -> PolicyTemplateModel:
    """
    Create a private template owned by the acting landlord.

    Raises:
        ForbiddenError: If the acting user is not a landlord
        DomainValidationError: If the title is blank or the category unknown
    """
    if acting_user.role.name != "landlord":
        raise ForbiddenError("Only landlords can create policy templates")
    _validate_fields(title, category)

    template = template_repo.create_template(
        db,
        title=title,
        description=description,
        category=category,
        default_value=default_value or "",
        is_required=is_required,
        landlord_id=acting_user.id,
        is_system_template=False,
    )
    logger.info(f"Landlord {acting_user.id} created policy template {template.id}")
    return template


def update_template(
    db: Session,
    template_id: int,
    acting_user: User,
    **update_fields,
) -> PolicyTemplateModel:
    """
    Update a template owned by the acting landlord.

    Only fields explicitly provided are changed. Built agreements are not
    affected: they hold their own copy of the values and the template version
    they were taken from.

    Raises:
        NotFoundError: If the template doesn't exist
        ForbiddenError: If it is a system template or owned by someone else
        DomainValidationError: If the title is blank or the category unknown
    """
    template = get_template(db, template_id)
    _ensure_can_modify(template, acting_user)
    _validate_fields(update_fields.get("title"), update_fields.get("category"))

    # default_value is NOT NULL; an explicit null clears it
    if "default_value" in update_fields and update_fields["default_value"] is None:
        update_fields["default_value"] = ""
    for field in ("title", "description", "category", "is_required"):
        if field in update_fields and update_fields[field] is None:
            del update_fields[field]

    updated = template_repo.update_template(db, template_id=template_id, **update_fields)
    logger.info(f"Landlord {acting_user.id} updated policy template {template_id} (v{updated.version})")
    return updated


def delete_template(db: Session, template_id: int, acting_user: User) -> None:
    """
    Delete a template owned by the acting landlord.

    Raises:
        NotFoundError: If the template doesn't exist
        ForbiddenError: If it is a system template or owned by someone else
        InvalidStateError: If an active property binding still uses it
    """
    template = get_template(db, template_id)
    _ensure_can_modify(template, acting_user)

    active_bindings = template_repo.count_active_bindings(db, template_id)
    if active_bindings:
        raise InvalidStateError(
            f"Cannot delete policy template: it is active on {active_bindings} propert"
            f"{'y' if active_bindings == 1 else 'ies'}"
        )

    template_repo.delete_template(db, template_id)
    logger.info(f"Landlord {acting_user.id} deleted policy template {template_id}")


def list_templates(db: Session, landlord_id: int | None = None) -> list[PolicyTemplateModel]:
    """A landlord's private templates plus all system templates, or system templates only."""
    return template_repo.get_templates(db, landlord_id=landlord_id)


def list_system_templates(db: Session) -> list[PolicyTemplateModel]:
    """System templates only, ordered by category."""
    return template_repo.get_templates(db, landlord_id=None)


def list_templates_for_user(db: Session, current_user: User) -> list[PolicyTemplateModel]:
    """
    Templates visible to the given user.

    - Landlord: own templates plus system templates
    - Anyone else: system templates
    """
    if current_user.role.name == "landlord":
        return list_templates(db, landlord_id=current_user.id)
    return list_system_templates(db)
