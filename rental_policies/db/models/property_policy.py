from sqlalchemy import Column, Integer, Text, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from rental_policies.db.base import Base, utcnow


class PropertyPolicy(Base):
    __tablename__ = "property_policies"
    __table_args__ = (
        UniqueConstraint("property_id", "policy_id", name="uq_property_policies_property_policy"),
    )

    id = Column(Integer, primary_key=True, index=True)
    property_id = Column(Integer, ForeignKey("properties.id"), nullable=False, index=True)
    policy_id = Column(Integer, ForeignKey("policy_templates.id"), nullable=False, index=True)
    custom_value = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    # Optimistic concurrency: UPDATE ... WHERE version = :loaded_version
    __mapper_args__ = {"version_id_col": version}

    # Relationships
    policy = relationship("PolicyTemplate", backref="property_policies")
    property = relationship("Property", backref="policies")
