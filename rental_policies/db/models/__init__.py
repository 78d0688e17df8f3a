from rental_policies.db.models.role import Role
from rental_policies.db.models.user import User
from rental_policies.db.models.property import Property
from rental_policies.db.models.reservation import Reservation
from rental_policies.db.models.policy_template import PolicyTemplate
from rental_policies.db.models.property_policy import PropertyPolicy
from rental_policies.db.models.policy_update import PolicyUpdate
from rental_policies.db.models.rental_agreement import RentalAgreement
from rental_policies.db.models.notification import Notification

__all__ = [
    "Role",
    "User",
    "Property",
    "Reservation",
    "PolicyTemplate",
    "PropertyPolicy",
    "PolicyUpdate",
    "RentalAgreement",
    "Notification",
]
