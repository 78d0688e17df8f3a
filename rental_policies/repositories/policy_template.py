from sqlalchemy import or_
from sqlalchemy.orm import Session

from rental_policies.db.models.policy_template import PolicyTemplate as PolicyTemplateModel
from rental_policies.db.models.property_policy import PropertyPolicy as PropertyPolicyModel
from rental_policies.errors import NotFoundError

# Fields a template update may touch
_UPDATABLE_FIELDS = ("title", "description", "category", "default_value", "is_required")


def get_template_by_id(db: Session, template_id: int) -> PolicyTemplateModel | None:
    """Get a policy template by ID."""
    return (
        db.query(PolicyTemplateModel)
        .filter(PolicyTemplateModel.id == template_id)
        .first()
    )


def get_templates(db: Session, landlord_id: int | None = None) -> list[PolicyTemplateModel]:
    """
    Get the templates visible to a landlord, ordered by category.

    With a landlord_id: that landlord's private templates plus every system template.
    Without: system templates only.
    """
    query = db.query(PolicyTemplateModel)
    if landlord_id is not None:
        query = query.filter(
            or_(
                PolicyTemplateModel.landlord_id == landlord_id,
                PolicyTemplateModel.is_system_template.is_(True),
            )
        )
    else:
        query = query.filter(PolicyTemplateModel.is_system_template.is_(True))
    return query.order_by(PolicyTemplateModel.category, PolicyTemplateModel.id).all()


def create_template(
    db: Session,
    title: str,
    description: str,
    category: str,
    default_value: str = "",
    is_required: bool = False,
    landlord_id: int | None = None,
    is_system_template: bool = False,
) -> PolicyTemplateModel:
    """Create a new policy template in the database. Pure data access - no business logic."""
    db_template = PolicyTemplateModel(
        title=title,
        description=description,
        category=category,
        default_value=default_value,
        is_required=is_required,
        landlord_id=landlord_id,
        is_system_template=is_system_template,
    )
    db.add(db_template)
    db.commit()
    db.refresh(db_template)
    return db_template


def update_template(db: Session, template_id: int, **kwargs) -> PolicyTemplateModel:
    """
    Update a policy template. Only updates fields that are explicitly provided.

    Fields not provided are not updated.
    """
    template = get_template_by_id(db, template_id)
    if not template:
        raise NotFoundError("Policy template not found")

    for field in _UPDATABLE_FIELDS:
        if field in kwargs:
            setattr(template, field, kwargs[field])

    db.commit()
    db.refresh(template)
    return template


def count_active_bindings(db: Session, template_id: int) -> int:
    """Count the active property bindings that reference a template."""
    return (
        db.query(PropertyPolicyModel)
        .filter(
            PropertyPolicyModel.policy_id == template_id,
            PropertyPolicyModel.is_active.is_(True),
        )
        .count()
    )


def delete_template(db: Session, template_id: int) -> None:
    """Delete a template together with its (inactive) bindings. Pure data access - no business logic."""
    template = get_template_by_id(db, template_id)
    if not template:
        raise NotFoundError("Policy template not found")

    db.query(PropertyPolicyModel).filter(
        PropertyPolicyModel.policy_id == template_id
    ).delete(synchronize_session="fetch")
    db.delete(template)
    db.commit()
