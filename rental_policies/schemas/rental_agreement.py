from datetime import datetime

from pydantic import BaseModel, ConfigDict

from rental_policies.schemas.policy_template import PolicyCategory


class RentalAgreementPolicy(BaseModel):
    """One resolved policy frozen into an agreement."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    policy_id: int
    title: str
    description: str
    category: PolicyCategory
    value: str
    is_required: bool = False
    template_version: int = 0


class RentalAgreement(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    reservation_id: int
    property_id: int
    tenant_id: int
    landlord_id: int
    policies: list[RentalAgreementPolicy]
    terms_accepted: bool
    accepted_at: datetime | None = None
    accepted_by: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
