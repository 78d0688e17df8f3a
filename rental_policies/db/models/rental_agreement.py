from sqlalchemy import Column, Integer, Boolean, DateTime, JSON, ForeignKey

from rental_policies.db.base import Base, utcnow


class RentalAgreement(Base):
    __tablename__ = "rental_agreements"

    id = Column(Integer, primary_key=True, index=True)
    reservation_id = Column(Integer, ForeignKey("reservations.id"), nullable=False, unique=True)
    property_id = Column(Integer, ForeignKey("properties.id"), nullable=False, index=True)
    tenant_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    landlord_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    # Value copy of the resolved policy set; never rewritten after insert
    policies = Column(JSON, nullable=False, default=list)
    terms_accepted = Column(Boolean, nullable=False, default=False)
    accepted_at = Column(DateTime(timezone=True), nullable=True)
    accepted_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
