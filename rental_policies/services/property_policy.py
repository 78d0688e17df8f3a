import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

import rental_policies.repositories.policy_template as template_repo
import rental_policies.repositories.property as property_repo
import rental_policies.repositories.property_policy as binding_repo
from rental_policies.db.models.property_policy import PropertyPolicy as PropertyPolicyModel
from rental_policies.db.models.user import User
from rental_policies.domain.policy_values import override_changed
from rental_policies.errors import (
    ConcurrentModificationError,
    DuplicateResourceError,
    ForbiddenError,
    NotFoundError,
)
from rental_policies.services.policy_change_log import FanOutLauncher, record_change, start_fan_out

logger = logging.getLogger(__name__)


def _ensure_property_owner(db: Session, property_id: int, acting_user: User) -> None:
    property_ = property_repo.get_property_by_id(db, property_id)
    if not property_:
        raise NotFoundError("Property not found")
    if property_.landlord_id != acting_user.id:
        raise ForbiddenError("Property not found or access denied")


def _get_owned_binding(db: Session, binding_id: int, acting_user: User) -> PropertyPolicyModel:
    """Resolve ownership transitively: binding -> property -> landlord."""
    binding = binding_repo.get_binding_by_id(db, binding_id)
    if not binding:
        raise NotFoundError("Property policy not found")
    _ensure_property_owner(db, binding.property_id, acting_user)
    return binding


def bind(
    db: Session,
    property_id: int,
    policy_id: int,
    acting_user: User,
    custom_value: str | None = None,
    is_active: bool = True,
) -> PropertyPolicyModel:
    """
    Attach a template to a property owned by the acting landlord.

    Raises:
        NotFoundError: If the property or the template doesn't exist
        ForbiddenError: If the property isn't the caller's, or the template is
            another landlord's private template
        DuplicateResourceError: If the template is already bound to the property
    """
    _ensure_property_owner(db, property_id, acting_user)

    template = template_repo.get_template_by_id(db, policy_id)
    if not template:
        raise NotFoundError("Policy template not found")
    if not template.is_system_template and template.landlord_id != acting_user.id:
        raise ForbiddenError("Cannot use another landlord's policy template")

    if binding_repo.get_binding_by_property_and_policy(db, property_id, policy_id):
        raise DuplicateResourceError(
            f"Policy template {policy_id} is already bound to property {property_id}"
        )

    try:
        binding = binding_repo.create_binding(
            db,
            property_id=property_id,
            policy_id=policy_id,
            custom_value=custom_value or None,
            is_active=is_active,
        )
    except IntegrityError:
        # Lost a race against an identical bind
        db.rollback()
        raise DuplicateResourceError(
            f"Policy template {policy_id} is already bound to property {property_id}"
        )

    logger.info(f"Landlord {acting_user.id} bound policy {policy_id} to property {property_id}")
    return binding_repo.get_binding_by_id(db, binding.id)


def rebind(
    db: Session,
    binding_id: int,
    acting_user: User,
    launch_fan_out: FanOutLauncher | None = None,
    expected_version: int | None = None,
    **update_fields,
) -> PropertyPolicyModel:
    """
    Change a binding's override value and/or active flag.

    When the override changes, PolicyChangeLog records the pre-update and
    post-update stored overrides ("" for none) first, in the same transaction
    as the binding update, and tenant fan-out starts once both are committed.
    The binding row is version-checked on write, so a concurrent edit makes
    this call fail instead of logging a diff that doesn't match the stored value.

    Only fields explicitly provided are changed; custom_value=None clears the override.

    Raises:
        NotFoundError: If the binding doesn't exist
        ForbiddenError: If the caller doesn't own the bound property
        ConcurrentModificationError: If the binding changed since expected_version
            or during this update
    """
    binding = _get_owned_binding(db, binding_id, acting_user)

    if expected_version is not None and binding.version != expected_version:
        raise ConcurrentModificationError(
            f"Property policy {binding_id} was modified (version {binding.version}, expected {expected_version})"
        )

    changes = {}
    if "custom_value" in update_fields:
        changes["custom_value"] = update_fields["custom_value"] or None
    if update_fields.get("is_active") is not None:
        changes["is_active"] = update_fields["is_active"]

    policy_update_id = None
    try:
        if "custom_value" in changes and override_changed(binding.custom_value, changes["custom_value"]):
            policy_update = record_change(
                db,
                property_id=binding.property_id,
                policy_id=binding.policy_id,
                old_value=binding.custom_value or "",
                new_value=changes["custom_value"] or "",
                updated_by=acting_user.id,
                commit=False,
            )
            policy_update_id = policy_update.id

        binding_repo.update_binding(db, binding, **changes)
    except StaleDataError:
        db.rollback()
        raise ConcurrentModificationError(
            f"Property policy {binding_id} was modified concurrently, re-read and retry"
        )

    if policy_update_id is not None:
        logger.info(
            f"Landlord {acting_user.id} changed policy {binding.policy_id} on property "
            f"{binding.property_id} (update {policy_update_id})",
            extra={"user_id": acting_user.id, "property_id": binding.property_id, "policy_id": binding.policy_id},
        )
        start_fan_out(db, policy_update_id, launch_fan_out)

    return binding_repo.get_binding_by_id(db, binding_id)


def unbind(db: Session, binding_id: int, acting_user: User) -> None:
    """
    Remove a binding from the acting landlord's property.

    Raises:
        NotFoundError: If the binding doesn't exist
        ForbiddenError: If the caller doesn't own the bound property
    """
    _get_owned_binding(db, binding_id, acting_user)
    binding_repo.delete_binding(db, binding_id)
    logger.info(f"Landlord {acting_user.id} removed property policy {binding_id}")


def list_for_property(db: Session, property_id: int) -> list[PropertyPolicyModel]:
    """
    Active bindings of a property with their templates, oldest first. Public.

    Raises:
        NotFoundError: If the property doesn't exist
    """
    if not property_repo.get_property_by_id(db, property_id):
        raise NotFoundError("Property not found")
    return binding_repo.get_active_bindings_for_property(db, property_id)
