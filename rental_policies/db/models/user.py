from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship

from rental_policies.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(320), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False, default="")
    password_hash = Column(String, nullable=False)
    role_id = Column(Integer, ForeignKey("roles.id"), nullable=False)

    # Relationship
    role = relationship("Role", backref="users")
