from sqlalchemy.orm import Session

from rental_policies.db.models.policy_update import PolicyUpdate as PolicyUpdateModel


def get_policy_update_by_id(db: Session, policy_update_id: int) -> PolicyUpdateModel | None:
    """Get a policy update record by ID."""
    return (
        db.query(PolicyUpdateModel)
        .filter(PolicyUpdateModel.id == policy_update_id)
        .first()
    )


def get_policy_updates_for_property(db: Session, property_id: int) -> list[PolicyUpdateModel]:
    """Get the policy update records of a property, newest first."""
    return (
        db.query(PolicyUpdateModel)
        .filter(PolicyUpdateModel.property_id == property_id)
        .order_by(PolicyUpdateModel.updated_at.desc(), PolicyUpdateModel.id.desc())
        .all()
    )


def create_policy_update(
    db: Session,
    property_id: int,
    policy_id: int,
    old_value: str,
    new_value: str,
    updated_by: int,
    commit: bool = True,
) -> PolicyUpdateModel:
    """
    Insert a policy update record. Pure data access - no business logic.

    With commit=False the row is only flushed (it gets its id) and is
    committed by the caller's next commit.
    """
    db_update = PolicyUpdateModel(
        property_id=property_id,
        policy_id=policy_id,
        old_value=old_value,
        new_value=new_value,
        updated_by=updated_by,
        notification_sent=False,
    )
    db.add(db_update)
    if commit:
        db.commit()
        db.refresh(db_update)
    else:
        db.flush()
    return db_update


def mark_notification_sent(db: Session, policy_update_id: int) -> None:
    """Flip notification_sent, the only mutable column of a policy update."""
    db.query(PolicyUpdateModel).filter(PolicyUpdateModel.id == policy_update_id).update(
        {PolicyUpdateModel.notification_sent: True}, synchronize_session=False
    )
    db.commit()
