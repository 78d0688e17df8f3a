from sqlalchemy.orm import Session, joinedload

from rental_policies.db.models.property_policy import PropertyPolicy as PropertyPolicyModel
from rental_policies.errors import NotFoundError


def get_binding_by_id(db: Session, binding_id: int) -> PropertyPolicyModel | None:
    """Get a property policy binding by ID, with its template loaded."""
    return (
        db.query(PropertyPolicyModel)
        .options(joinedload(PropertyPolicyModel.policy))
        .filter(PropertyPolicyModel.id == binding_id)
        .first()
    )


def get_binding_by_property_and_policy(
    db: Session, property_id: int, policy_id: int
) -> PropertyPolicyModel | None:
    """Get the binding of a template to a property. Used to check for duplicates."""
    return (
        db.query(PropertyPolicyModel)
        .filter(
            PropertyPolicyModel.property_id == property_id,
            PropertyPolicyModel.policy_id == policy_id,
        )
        .first()
    )


def get_active_bindings_for_property(db: Session, property_id: int) -> list[PropertyPolicyModel]:
    """Get the active bindings of a property with their templates, oldest first."""
    return (
        db.query(PropertyPolicyModel)
        .options(joinedload(PropertyPolicyModel.policy))
        .filter(
            PropertyPolicyModel.property_id == property_id,
            PropertyPolicyModel.is_active.is_(True),
        )
        .order_by(PropertyPolicyModel.created_at, PropertyPolicyModel.id)
        .all()
    )


def create_binding(
    db: Session,
    property_id: int,
    policy_id: int,
    custom_value: str | None = None,
    is_active: bool = True,
) -> PropertyPolicyModel:
    """Create a new binding in the database. Pure data access - no business logic."""
    db_binding = PropertyPolicyModel(
        property_id=property_id,
        policy_id=policy_id,
        custom_value=custom_value,
        is_active=is_active,
    )
    db.add(db_binding)
    db.commit()
    db.refresh(db_binding)
    return db_binding


def update_binding(
    db: Session,
    binding: PropertyPolicyModel,
    commit: bool = True,
    **kwargs,
) -> PropertyPolicyModel:
    """
    Update a loaded binding. Only updates fields that are explicitly provided.

    To clear the override, explicitly pass custom_value=None.
    With commit=False the change is only flushed, so the caller can commit it
    together with other rows.
    """
    if "custom_value" in kwargs:
        binding.custom_value = kwargs["custom_value"]
    if "is_active" in kwargs:
        binding.is_active = kwargs["is_active"]

    if commit:
        db.commit()
        db.refresh(binding)
    else:
        db.flush()
    return binding


def delete_binding(db: Session, binding_id: int) -> None:
    """Delete a binding from the database. Pure data access - no business logic."""
    binding = get_binding_by_id(db, binding_id)
    if not binding:
        raise NotFoundError("Property policy not found")

    db.delete(binding)
    db.commit()
