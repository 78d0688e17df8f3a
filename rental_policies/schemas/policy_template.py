from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

PolicyCategory = Literal[
    "pets",
    "smoking",
    "guests",
    "cleaning",
    "cancellation",
    "rental_terms",
    "house_rules",
    "maintenance",
    "security",
    "utilities",
    "custom",
]


class PolicyTemplate(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str
    category: PolicyCategory
    default_value: str = ""
    is_required: bool = False
    is_system_template: bool
    landlord_id: int | None = None
    version: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PolicyTemplateCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., max_length=5000)
    category: PolicyCategory
    default_value: str = Field(default="", max_length=5000)
    is_required: bool = False


class PolicyTemplateUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    category: PolicyCategory | None = None
    default_value: str | None = Field(None, max_length=5000)
    is_required: bool | None = None
