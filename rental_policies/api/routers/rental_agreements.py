from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from rental_policies.api.deps import get_db, get_current_user
from rental_policies.db.models.user import User
from rental_policies.schemas.rental_agreement import RentalAgreement
from rental_policies.services import rental_agreement as agreement_service

router = APIRouter(tags=["rental-agreements"])


@router.post("/reservations/{reservation_id}/agreement", response_model=RentalAgreement)
def build_rental_agreement(
    reservation_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Build the rental agreement of a reservation from the property's current
    policies. Tenant, landlord or admin.

    Safe to retry: if the agreement already exists it is returned unchanged.
    """
    agreement_service.get_reservation_for_user(db, reservation_id, current_user)
    agreement = agreement_service.build(db, reservation_id)
    return RentalAgreement.model_validate(agreement)


@router.get("/reservations/{reservation_id}/agreement", response_model=RentalAgreement | None)
def get_reservation_agreement(
    reservation_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Get the rental agreement of a reservation, or null if it hasn't been built yet.
    """
    agreement_service.get_reservation_for_user(db, reservation_id, current_user)
    agreement = agreement_service.get_for_reservation(db, reservation_id)
    if agreement is None:
        return None
    return RentalAgreement.model_validate(agreement)


@router.get("/rental-agreements/{agreement_id}", response_model=RentalAgreement)
def get_rental_agreement(
    agreement_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Get a rental agreement. Tenant, landlord or admin."""
    agreement = agreement_service.get_agreement(db, agreement_id)
    agreement_service.ensure_can_view(agreement, current_user)
    return RentalAgreement.model_validate(agreement)


@router.post("/rental-agreements/{agreement_id}/accept", response_model=RentalAgreement)
def accept_rental_agreement(
    agreement_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Accept a rental agreement. Only the tenant named on it can accept.

    Accepting again is a no-op that returns the agreement with its first
    acceptance time.
    """
    agreement = agreement_service.accept(db, agreement_id, current_user)
    return RentalAgreement.model_validate(agreement)
