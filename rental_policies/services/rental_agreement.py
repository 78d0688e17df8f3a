"""
Rental agreement snapshots and their acceptance.

An agreement moves absent -> pending acceptance -> accepted and never back.
Both transitions are idempotent: building twice returns the stored agreement,
accepting twice keeps the first acceptance.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import rental_policies.repositories.rental_agreement as agreement_repo
import rental_policies.repositories.reservation as reservation_repo
from rental_policies.db.models.rental_agreement import RentalAgreement as RentalAgreementModel
from rental_policies.db.models.reservation import Reservation as ReservationModel
from rental_policies.db.models.user import User
from rental_policies.domain.policy_values import snapshot_policy
from rental_policies.errors import ForbiddenError, NotFoundError
from rental_policies.services.property_policy import list_for_property

logger = logging.getLogger(__name__)


def build(db: Session, reservation_id: int) -> RentalAgreementModel:
    """
    Freeze the property's active policies into the reservation's agreement.

    Safe to retry: an existing agreement is returned unchanged, including when
    a concurrent build inserted it first.

    Raises:
        NotFoundError: If the reservation doesn't exist
    """
    reservation = reservation_repo.get_reservation_by_id(db, reservation_id)
    if not reservation:
        raise NotFoundError("Reservation not found")

    existing = agreement_repo.get_agreement_by_reservation_id(db, reservation_id)
    if existing:
        return existing

    bindings = list_for_property(db, reservation.property_id)
    policies = [snapshot_policy(binding).as_dict() for binding in bindings]

    try:
        agreement = agreement_repo.create_agreement(
            db,
            reservation_id=reservation.id,
            property_id=reservation.property_id,
            tenant_id=reservation.tenant_id,
            landlord_id=reservation.landlord_id,
            policies=policies,
        )
    except IntegrityError:
        db.rollback()
        existing = agreement_repo.get_agreement_by_reservation_id(db, reservation_id)
        if existing is None:
            raise
        logger.info(f"Agreement for reservation {reservation_id} was built concurrently")
        return existing

    logger.info(
        f"Built rental agreement {agreement.id} for reservation {reservation_id} "
        f"with {len(policies)} policies",
        extra={"reservation_id": reservation_id, "agreement_id": agreement.id},
    )
    return agreement


def get_agreement(db: Session, agreement_id: int) -> RentalAgreementModel:
    """Get an agreement or raise NotFoundError."""
    agreement = agreement_repo.get_agreement_by_id(db, agreement_id)
    if not agreement:
        raise NotFoundError("Rental agreement not found")
    return agreement


def get_for_reservation(db: Session, reservation_id: int) -> RentalAgreementModel | None:
    """The reservation's agreement, or None if it hasn't been built yet."""
    return agreement_repo.get_agreement_by_reservation_id(db, reservation_id)


def accept(db: Session, agreement_id: int, acting_user: User) -> RentalAgreementModel:
    """
    Accept an agreement on behalf of its tenant.

    Accepting an already-accepted agreement succeeds without changing it, so
    the first accepted_at is kept.

    Raises:
        NotFoundError: If the agreement doesn't exist
        ForbiddenError: If the acting user is not the agreement's tenant
    """
    agreement = get_agreement(db, agreement_id)
    if agreement.tenant_id != acting_user.id:
        raise ForbiddenError("Only the tenant named on the agreement can accept it")

    if agreement.terms_accepted:
        return agreement

    accepted = agreement_repo.mark_agreement_accepted(
        db,
        agreement_id=agreement_id,
        accepted_by=acting_user.id,
        accepted_at=datetime.now(timezone.utc),
    )
    if accepted:
        logger.info(
            f"Tenant {acting_user.id} accepted rental agreement {agreement_id}",
            extra={"user_id": acting_user.id, "agreement_id": agreement_id},
        )

    db.refresh(agreement)
    return agreement


def ensure_can_view(
    agreement_or_reservation: ReservationModel | RentalAgreementModel, current_user: User
) -> None:
    """
    Agreements and the reservations they belong to are visible to their
    tenant, their landlord and admins.
    """
    if current_user.role.name == "admin":
        return
    if current_user.id in (agreement_or_reservation.tenant_id, agreement_or_reservation.landlord_id):
        return
    raise ForbiddenError("Not enough permissions")


def get_reservation_for_user(
    db: Session, reservation_id: int, current_user: User
) -> ReservationModel:
    """
    Get a reservation the current user takes part in.

    Raises:
        NotFoundError: If the reservation doesn't exist
        ForbiddenError: If the user is not its tenant, landlord or an admin
    """
    reservation = reservation_repo.get_reservation_by_id(db, reservation_id)
    if not reservation:
        raise NotFoundError("Reservation not found")
    ensure_can_view(reservation, current_user)
    return reservation
