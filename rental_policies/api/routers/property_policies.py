from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from rental_policies.api.deps import get_db, get_current_user, get_fan_out_launcher
from rental_policies.db.models.user import User
from rental_policies.schemas.policy_update import PolicyUpdate
from rental_policies.schemas.property_policy import (
    PropertyPolicy,
    PropertyPolicyCreate,
    PropertyPolicyUpdate,
)
from rental_policies.services import policy_change_log
from rental_policies.services import property_policy as binding_service
from rental_policies.services.policy_change_log import FanOutLauncher

router = APIRouter(tags=["property-policies"])


@router.post(
    "/properties/{property_id}/policies",
    response_model=PropertyPolicy,
    status_code=status.HTTP_201_CREATED,
)
def add_policy_to_property(
    property_id: int,
    binding_data: PropertyPolicyCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Bind a policy template to a property. Only the property's landlord can do this.
    """
    binding = binding_service.bind(
        db,
        property_id=property_id,
        policy_id=binding_data.policy_id,
        acting_user=current_user,
        custom_value=binding_data.custom_value,
        is_active=binding_data.is_active,
    )
    return PropertyPolicy.model_validate(binding)


@router.get("/properties/{property_id}/policies", response_model=list[PropertyPolicy])
def get_property_policies(property_id: int, db: Session = Depends(get_db)):
    """
    Get the active policies of a property with their effective values. Public,
    so prospective tenants can read a property's rules.
    """
    bindings = binding_service.list_for_property(db, property_id)
    return [PropertyPolicy.model_validate(b) for b in bindings]


@router.get("/properties/{property_id}/policy-updates", response_model=list[PolicyUpdate])
def get_property_policy_updates(
    property_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Get the policy change history of a property, newest first.
    - Landlord: own properties
    - Tenant: properties they hold a reservation on
    - Admin: any property
    """
    policy_change_log.ensure_can_view_changes(db, property_id, current_user)
    updates = policy_change_log.list_changes_for_property(db, property_id)
    return [PolicyUpdate.model_validate(u) for u in updates]


@router.put("/property-policies/{binding_id}", response_model=PropertyPolicy)
def update_property_policy(
    binding_id: int,
    binding_data: PropertyPolicyUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    launch_fan_out: FanOutLauncher = Depends(get_fan_out_launcher),
):
    """
    Update a property policy's override value and/or active flag. Only the
    property's landlord can do this.

    Changing the override records a policy update and notifies the
    property's tenants in the background. Send custom_value: null to fall
    back to the template default. Send expected_version to reject the update
    if someone else changed the policy since it was read.
    """
    update_data = binding_data.model_dump(exclude_unset=True)
    expected_version = update_data.pop("expected_version", None)
    binding = binding_service.rebind(
        db,
        binding_id=binding_id,
        acting_user=current_user,
        launch_fan_out=launch_fan_out,
        expected_version=expected_version,
        **update_data,
    )
    return PropertyPolicy.model_validate(binding)


@router.delete("/property-policies/{binding_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_property_policy(
    binding_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Remove a policy from a property. Only the property's landlord can do this.
    """
    binding_service.unbind(db, binding_id=binding_id, acting_user=current_user)
