from datetime import datetime

from sqlalchemy.orm import Session

from rental_policies.db.models.rental_agreement import RentalAgreement as RentalAgreementModel


def get_agreement_by_id(db: Session, agreement_id: int) -> RentalAgreementModel | None:
    """Get a rental agreement by ID."""
    return (
        db.query(RentalAgreementModel)
        .filter(RentalAgreementModel.id == agreement_id)
        .first()
    )


def get_agreement_by_reservation_id(db: Session, reservation_id: int) -> RentalAgreementModel | None:
    """Get the rental agreement of a reservation (at most one exists)."""
    return (
        db.query(RentalAgreementModel)
        .filter(RentalAgreementModel.reservation_id == reservation_id)
        .first()
    )


def create_agreement(
    db: Session,
    reservation_id: int,
    property_id: int,
    tenant_id: int,
    landlord_id: int,
    policies: list[dict],
) -> RentalAgreementModel:
    """
    Create a new, unaccepted rental agreement. Pure data access - no business logic.

    Raises sqlalchemy.exc.IntegrityError if the reservation already has one.
    """
    db_agreement = RentalAgreementModel(
        reservation_id=reservation_id,
        property_id=property_id,
        tenant_id=tenant_id,
        landlord_id=landlord_id,
        policies=policies,
        terms_accepted=False,
    )
    db.add(db_agreement)
    db.commit()
    db.refresh(db_agreement)
    return db_agreement


def mark_agreement_accepted(
    db: Session, agreement_id: int, accepted_by: int, accepted_at: datetime
) -> bool:
    """
    Accept an agreement unless it is already accepted.

    Single conditional UPDATE, so among concurrent callers exactly one sees True.
    """
    updated = (
        db.query(RentalAgreementModel)
        .filter(
            RentalAgreementModel.id == agreement_id,
            RentalAgreementModel.terms_accepted.is_(False),
        )
        .update(
            {
                RentalAgreementModel.terms_accepted: True,
                RentalAgreementModel.accepted_at: accepted_at,
                RentalAgreementModel.accepted_by: accepted_by,
                RentalAgreementModel.updated_at: accepted_at,
            },
            synchronize_session=False,
        )
    )
    db.commit()
    return updated == 1
