from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship

from rental_policies.db.base import Base


class Property(Base):
    __tablename__ = "properties"

    id = Column(Integer, primary_key=True, index=True)
    landlord_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)

    # Relationships
    landlord = relationship("User", backref="properties")
