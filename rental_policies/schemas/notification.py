from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Notification(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    kind: str
    title: str
    message: str
    metadata: dict[str, Any] | None = Field(default=None, validation_alias="extra")
    is_read: bool
    created_at: datetime
