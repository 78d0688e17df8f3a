from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, computed_field

from rental_policies.domain.policy_values import resolve_value
from rental_policies.schemas.policy_template import PolicyTemplate


class PropertyPolicy(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    property_id: int
    policy_id: int
    custom_value: str | None = None
    is_active: bool
    version: int
    created_at: datetime | None = None
    updated_at: datetime | None = None
    policy: PolicyTemplate | None = None

    @computed_field
    @property
    def effective_value(self) -> str:
        """The value tenants see: the override when set, else the template default."""
        default_value = self.policy.default_value if self.policy is not None else None
        return resolve_value(self.custom_value, default_value)


class PropertyPolicyCreate(BaseModel):
    policy_id: int
    custom_value: str | None = Field(None, max_length=5000)
    is_active: bool = True


class PropertyPolicyUpdate(BaseModel):
    custom_value: str | None = Field(None, max_length=5000)
    is_active: bool | None = None
    expected_version: int | None = Field(
        None,
        ge=1,
        description="Reject the update if the binding was changed since this version was read",
    )
