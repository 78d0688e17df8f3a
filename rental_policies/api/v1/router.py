from fastapi import APIRouter

from rental_policies.api.routers import (
    auth,
    notifications,
    policy_templates,
    property_policies,
    rental_agreements,
    roles,
)

api_router = APIRouter()

api_router.include_router(roles.router)
api_router.include_router(auth.router)
api_router.include_router(policy_templates.router)
api_router.include_router(property_policies.router)
api_router.include_router(rental_agreements.router)
api_router.include_router(notifications.router)
