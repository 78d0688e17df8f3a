"""
Audit log of policy value changes and the tenant notifications they trigger.

Recording is synchronous; notifying is not. record_change() returns once the
PolicyUpdate row is committed and hands the fan-out to a launcher (FastAPI
BackgroundTasks in the API). The fan-out swallows and logs its own failures,
so the landlord's edit is never rolled back because of a notification.
"""

import logging
from typing import Callable

from sqlalchemy.orm import Session, sessionmaker

import rental_policies.repositories.policy_update as policy_update_repo
import rental_policies.repositories.property as property_repo
import rental_policies.repositories.reservation as reservation_repo
from rental_policies.db.models.policy_update import PolicyUpdate as PolicyUpdateModel
from rental_policies.db.models.user import User
from rental_policies.domain.policy_values import NOTIFIABLE_RESERVATION_STATUSES
from rental_policies.errors import ForbiddenError, NotFoundError
from rental_policies.services.notifier import InAppNotifier, Notifier

logger = logging.getLogger(__name__)

NOTIFICATION_KIND = "announcement"
POLICY_UPDATE_TITLE = "Property Policy Updated"
POLICY_UPDATE_MESSAGE = (
    "A policy has been updated for your rental property. Please review the changes."
)

# Receives the id of a committed PolicyUpdate and schedules its fan-out
FanOutLauncher = Callable[[int], None]


def record_change(
    db: Session,
    property_id: int,
    policy_id: int,
    old_value: str,
    new_value: str,
    updated_by: int,
    launch_fan_out: FanOutLauncher | None = None,
    commit: bool = True,
) -> PolicyUpdateModel:
    """
    Log one stored-value change and start notifying the property's tenants.

    Without a launcher the fan-out runs inline on the same session.
    With commit=False the row is only flushed and no fan-out is started: the
    caller commits it together with its own change, then calls start_fan_out().
    """
    policy_update = policy_update_repo.create_policy_update(
        db,
        property_id=property_id,
        policy_id=policy_id,
        old_value=old_value,
        new_value=new_value,
        updated_by=updated_by,
        commit=commit,
    )
    if not commit:
        return policy_update

    logger.info(
        f"Policy {policy_id} on property {property_id} changed by user {updated_by} "
        f"(update {policy_update.id})"
    )
    start_fan_out(db, policy_update.id, launch_fan_out)
    return policy_update


def start_fan_out(
    db: Session, policy_update_id: int, launch_fan_out: FanOutLauncher | None = None
) -> None:
    """Hand a committed PolicyUpdate to the launcher, or notify inline."""
    if launch_fan_out is None:
        notify_tenants_of_policy_update(db, policy_update_id)
    else:
        launch_fan_out(policy_update_id)


def notify_tenants_of_policy_update(
    db: Session, policy_update_id: int, notifier: Notifier | None = None
) -> bool:
    """
    Notify every tenant with a pending or confirmed reservation on the property.

    Each distinct tenant is notified once. A failed delivery is logged and
    skipped; notification_sent is set once all tenants were attempted.
    Never raises: any other failure is logged and False is returned.
    """
    try:
        policy_update = policy_update_repo.get_policy_update_by_id(db, policy_update_id)
        if policy_update is None:
            logger.warning(f"Policy update {policy_update_id} not found, nothing to notify")
            return False

        property_id = policy_update.property_id
        reservations = reservation_repo.get_reservations_by_property_id(
            db, property_id, statuses=NOTIFIABLE_RESERVATION_STATUSES
        )
        # dict.fromkeys dedupes while keeping first-seen order
        tenant_ids = list(dict.fromkeys(r.tenant_id for r in reservations))

        if notifier is None:
            notifier = InAppNotifier(db)
        metadata = {
            "property_id": property_id,
            "policy_update_id": policy_update.id,
            "policy_id": policy_update.policy_id,
        }

        delivered = 0
        for tenant_id in tenant_ids:
            try:
                notifier.notify(
                    tenant_id,
                    NOTIFICATION_KIND,
                    POLICY_UPDATE_TITLE,
                    POLICY_UPDATE_MESSAGE,
                    metadata,
                )
                delivered += 1
            except Exception:
                db.rollback()
                logger.warning(
                    f"Failed to notify tenant {tenant_id} of policy update {policy_update_id}",
                    exc_info=True,
                )

        policy_update_repo.mark_notification_sent(db, policy_update_id)
    except Exception:
        db.rollback()
        logger.exception(f"Fan-out for policy update {policy_update_id} failed")
        return False

    logger.info(
        f"Policy update {policy_update_id}: notified {delivered} of {len(tenant_ids)} tenant(s)"
    )
    return True


def run_policy_update_fan_out(session_factory: sessionmaker, policy_update_id: int) -> None:
    """Background entry point: runs the fan-out on a session of its own."""
    db = session_factory()
    try:
        notify_tenants_of_policy_update(db, policy_update_id)
    finally:
        db.close()


def list_changes_for_property(db: Session, property_id: int) -> list[PolicyUpdateModel]:
    """All policy update records of a property, newest first."""
    return policy_update_repo.get_policy_updates_for_property(db, property_id)


def ensure_can_view_changes(db: Session, property_id: int, current_user: User) -> None:
    """
    Who may read a property's policy audit trail.

    - Admin: any property
    - Landlord: own properties
    - Tenant: properties they hold a reservation on

    Raises:
        NotFoundError: If the property doesn't exist
        ForbiddenError: Otherwise, when access is not granted
    """
    property_ = property_repo.get_property_by_id(db, property_id)
    if not property_:
        raise NotFoundError("Property not found")

    if current_user.role.name == "admin" or property_.landlord_id == current_user.id:
        return
    if reservation_repo.tenant_has_reservation_for_property(db, current_user.id, property_id):
        return
    raise ForbiddenError("Not enough permissions")
