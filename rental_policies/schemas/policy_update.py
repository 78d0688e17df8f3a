from datetime import datetime

from pydantic import BaseModel, ConfigDict


class PolicyUpdate(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    property_id: int
    policy_id: int
    old_value: str
    new_value: str
    updated_by: int
    updated_at: datetime
    notification_sent: bool
