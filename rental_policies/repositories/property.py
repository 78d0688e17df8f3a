from sqlalchemy.orm import Session

from rental_policies.db.models.property import Property as PropertyModel


def get_property_by_id(db: Session, property_id: int) -> PropertyModel | None:
    """Get a property by ID."""
    return db.query(PropertyModel).filter(PropertyModel.id == property_id).first()


def create_property(db: Session, landlord_id: int, title: str) -> PropertyModel:
    """Create a new property in the database. Pure data access - no business logic."""
    db_property = PropertyModel(landlord_id=landlord_id, title=title)
    db.add(db_property)
    db.commit()
    db.refresh(db_property)
    return db_property
