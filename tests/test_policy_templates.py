import pytest
from sqlalchemy.orm import Session

from rental_policies.db.models.policy_template import PolicyTemplate as PolicyTemplateModel
from rental_policies.db.models.user import User as UserModel
from rental_policies.errors import DomainValidationError
from rental_policies.services.policy_template import create_template
from rental_policies.repositories.property_policy import create_binding


# ============================================================================
# SYSTEM TEMPLATE TESTS
# ============================================================================


def test_system_templates_seeded(client):
    """Test migrations seed the ten system templates, ordered by category."""
    response = client.get("/api/v1/policy-templates/system")

    assert response.status_code == 200
    data = response.json()
    assert len(data) == 10
    assert all(t["is_system_template"] for t in data)
    assert all(t["landlord_id"] is None for t in data)
    assert all(t["version"] == 1 for t in data)
    categories = [t["category"] for t in data]
    assert categories == sorted(categories)
    assert {"pets", "smoking", "guests", "cleaning", "cancellation"} <= set(categories)


# ============================================================================
# CREATE TESTS
# ============================================================================


def test_create_template_as_landlord(client, landlord_user_dict: dict, landlord_token: str):
    """Test a landlord can create a private template."""
    response = client.post(
        "/api/v1/policy-templates",
        json={
            "title": "Pool Hours",
            "description": "When the pool may be used",
            "category": "house_rules",
            "default_value": "9 AM to 8 PM",
            "is_required": True,
        },
        headers={"Authorization": f"Bearer {landlord_token}"},
    )
    assert response.status_code == 201
    data = response.json()
    assert data["title"] == "Pool Hours"
    assert data["is_system_template"] is False
    assert data["landlord_id"] == landlord_user_dict["id"]
    assert data["is_required"] is True
    assert data["version"] == 1


def test_create_template_as_tenant_forbidden(client, tenant_token: str):
    """Test tenants cannot create templates."""
    response = client.post(
        "/api/v1/policy-templates",
        json={"title": "Nope", "description": "", "category": "custom"},
        headers={"Authorization": f"Bearer {tenant_token}"},
    )
    assert response.status_code == 403
    assert response.json()["code"] == "FORBIDDEN"


def test_create_template_invalid_category(client, landlord_token: str):
    """Test an unknown category is rejected by request validation."""
    response = client.post(
        "/api/v1/policy-templates",
        json={"title": "Odd", "description": "", "category": "pet_policy"},
        headers={"Authorization": f"Bearer {landlord_token}"},
    )
    assert response.status_code == 422


def test_create_template_without_authentication(client):
    response = client.post(
        "/api/v1/policy-templates",
        json={"title": "Nope", "description": "", "category": "custom"},
    )
    assert response.status_code == 401


# ============================================================================
# LIST / GET TESTS
# ============================================================================


def test_list_templates_landlord_sees_own_and_system(
    client, landlord_template, landlord_token: str, other_landlord_token: str
):
    """Test a landlord sees own templates plus system templates, not other landlords'."""
    own = client.get(
        "/api/v1/policy-templates", headers={"Authorization": f"Bearer {landlord_token}"}
    )
    assert own.status_code == 200
    own_ids = {t["id"] for t in own.json()}
    assert landlord_template.id in own_ids
    assert len(own_ids) == 11

    other = client.get(
        "/api/v1/policy-templates", headers={"Authorization": f"Bearer {other_landlord_token}"}
    )
    other_ids = {t["id"] for t in other.json()}
    assert landlord_template.id not in other_ids
    assert len(other_ids) == 10


def test_list_templates_tenant_sees_system_only(client, landlord_template, tenant_token: str):
    response = client.get(
        "/api/v1/policy-templates", headers={"Authorization": f"Bearer {tenant_token}"}
    )
    assert response.status_code == 200
    assert all(t["is_system_template"] for t in response.json())


def test_get_private_template_of_other_landlord_forbidden(
    client, landlord_template, other_landlord_token: str, landlord_token: str
):
    response = client.get(
        f"/api/v1/policy-templates/{landlord_template.id}",
        headers={"Authorization": f"Bearer {other_landlord_token}"},
    )
    assert response.status_code == 403

    response = client.get(
        f"/api/v1/policy-templates/{landlord_template.id}",
        headers={"Authorization": f"Bearer {landlord_token}"},
    )
    assert response.status_code == 200
    assert response.json()["title"] == "Parking"


def test_get_template_not_found(client, landlord_token: str):
    response = client.get(
        "/api/v1/policy-templates/99999",
        headers={"Authorization": f"Bearer {landlord_token}"},
    )
    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"


# ============================================================================
# UPDATE TESTS
# ============================================================================


def test_update_template_partial_bumps_version(client, landlord_template, landlord_token: str):
    """Test a partial update changes only the given fields and bumps the version."""
    response = client.put(
        f"/api/v1/policy-templates/{landlord_template.id}",
        json={"default_value": "Two cars per unit"},
        headers={"Authorization": f"Bearer {landlord_token}"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["default_value"] == "Two cars per unit"
    assert data["title"] == "Parking"
    assert data["version"] == 2


def test_update_system_template_forbidden(client, pet_template, landlord_token: str):
    response = client.put(
        f"/api/v1/policy-templates/{pet_template.id}",
        json={"default_value": "Anything goes"},
        headers={"Authorization": f"Bearer {landlord_token}"},
    )
    assert response.status_code == 403


def test_update_other_landlords_template_forbidden(
    client, landlord_template, other_landlord_token: str
):
    response = client.put(
        f"/api/v1/policy-templates/{landlord_template.id}",
        json={"title": "Mine now"},
        headers={"Authorization": f"Bearer {other_landlord_token}"},
    )
    assert response.status_code == 403


# ============================================================================
# DELETE TESTS
# ============================================================================


def test_delete_template(client, db: Session, landlord_template, landlord_token: str):
    response = client.delete(
        f"/api/v1/policy-templates/{landlord_template.id}",
        headers={"Authorization": f"Bearer {landlord_token}"},
    )
    assert response.status_code == 204

    db.expire_all()
    assert db.query(PolicyTemplateModel).filter_by(id=landlord_template.id).first() is None


def test_delete_template_in_use_rejected(
    client, db: Session, landlord_template, property_, landlord_token: str
):
    """Test a template that a property has active cannot be deleted."""
    create_binding(db, property_id=property_.id, policy_id=landlord_template.id)

    response = client.delete(
        f"/api/v1/policy-templates/{landlord_template.id}",
        headers={"Authorization": f"Bearer {landlord_token}"},
    )
    assert response.status_code == 409
    assert response.json()["code"] == "INVALID_STATE"


def test_delete_template_with_inactive_binding(
    client, db: Session, landlord_template, property_, landlord_token: str
):
    """Test inactive bindings are removed together with their template."""
    create_binding(db, property_id=property_.id, policy_id=landlord_template.id, is_active=False)

    response = client.delete(
        f"/api/v1/policy-templates/{landlord_template.id}",
        headers={"Authorization": f"Bearer {landlord_token}"},
    )
    assert response.status_code == 204


def test_delete_system_template_forbidden(client, pet_template, landlord_token: str):
    response = client.delete(
        f"/api/v1/policy-templates/{pet_template.id}",
        headers={"Authorization": f"Bearer {landlord_token}"},
    )
    assert response.status_code == 403


def test_create_template_blank_title(client, landlord_token: str):
    """Test a whitespace-only title is rejected by the business rules."""
    response = client.post(
        "/api/v1/policy-templates",
        json={"title": "   ", "description": "", "category": "custom"},
        headers={"Authorization": f"Bearer {landlord_token}"},
    )
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_service_rejects_unknown_category(db: Session, landlord_user_dict: dict):
    landlord = db.get(UserModel, landlord_user_dict["id"])
    with pytest.raises(DomainValidationError):
        create_template(db, landlord, title="Odd", description="", category="pet_policy")
