from sqlalchemy import Column, Integer, Text, Boolean, DateTime, ForeignKey

from rental_policies.db.base import Base, utcnow


class PolicyUpdate(Base):
    __tablename__ = "policy_updates"

    id = Column(Integer, primary_key=True, index=True)
    # References the (property, template) pair, not the binding row
    property_id = Column(Integer, ForeignKey("properties.id"), nullable=False, index=True)
    # No FK to policy_templates: the audit trail outlives a deleted template
    policy_id = Column(Integer, nullable=False, index=True)
    old_value = Column(Text, nullable=False)
    new_value = Column(Text, nullable=False)
    updated_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    notification_sent = Column(Boolean, nullable=False, default=False)
