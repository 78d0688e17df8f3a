from pydantic import BaseModel, ConfigDict

from rental_policies.schemas.role import Role


class User(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str
    role: Role


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: User
