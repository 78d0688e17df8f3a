from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey

from rental_policies.db.base import Base, utcnow


class PolicyTemplate(Base):
    __tablename__ = "policy_templates"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(50), nullable=False, index=True)
    default_value = Column(Text, nullable=False, default="")
    is_required = Column(Boolean, nullable=False, default=False)
    is_system_template = Column(Boolean, nullable=False, default=False, index=True)
    # NULL iff is_system_template
    landlord_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    # Every persisted UPDATE bumps version, which snapshots record
    __mapper_args__ = {"version_id_col": version}
