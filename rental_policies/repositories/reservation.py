from datetime import date

from sqlalchemy.orm import Session

from rental_policies.db.models.reservation import Reservation as ReservationModel


def get_reservation_by_id(db: Session, reservation_id: int) -> ReservationModel | None:
    """Get a reservation by ID."""
    return (
        db.query(ReservationModel)
        .filter(ReservationModel.id == reservation_id)
        .first()
    )


def get_reservations_by_property_id(
    db: Session, property_id: int, statuses: tuple[str, ...] | None = None
) -> list[ReservationModel]:
    """Get the reservations of a property, optionally restricted to some statuses."""
    query = db.query(ReservationModel).filter(ReservationModel.property_id == property_id)
    if statuses is not None:
        query = query.filter(ReservationModel.status.in_(statuses))
    return query.order_by(ReservationModel.id).all()


def tenant_has_reservation_for_property(db: Session, tenant_id: int, property_id: int) -> bool:
    """Whether the user holds any reservation on the property."""
    return (
        db.query(ReservationModel.id)
        .filter(
            ReservationModel.property_id == property_id,
            ReservationModel.tenant_id == tenant_id,
        )
        .first()
        is not None
    )


def create_reservation(
    db: Session,
    property_id: int,
    tenant_id: int,
    landlord_id: int,
    start_date: date,
    end_date: date | None = None,
    status: str = "pending",
) -> ReservationModel:
    """Create a new reservation in the database. Pure data access - no business logic."""
    db_reservation = ReservationModel(
        property_id=property_id,
        tenant_id=tenant_id,
        landlord_id=landlord_id,
        start_date=start_date,
        end_date=end_date,
        status=status,
    )
    db.add(db_reservation)
    db.commit()
    db.refresh(db_reservation)
    return db_reservation


def update_reservation_status(db: Session, reservation_id: int, status: str) -> ReservationModel | None:
    """Set the status of a reservation."""
    reservation = get_reservation_by_id(db, reservation_id)
    if reservation is None:
        return None
    reservation.status = status
    db.commit()
    db.refresh(reservation)
    return reservation
