import pytest
from sqlalchemy.orm import Session

from rental_policies.db.models.policy_update import PolicyUpdate as PolicyUpdateModel
from rental_policies.db.models.property_policy import PropertyPolicy as PropertyPolicyModel
from rental_policies.db.models.user import User as UserModel
from rental_policies.errors import ConcurrentModificationError
from rental_policies.repositories.property import create_property
from rental_policies.services import property_policy as binding_service


@pytest.fixture(scope="function")
def pet_binding(db: Session, property_, pet_template, landlord_user_dict: dict):
    """The Pet Policy bound to the landlord's property, no override."""
    landlord = db.get(UserModel, landlord_user_dict["id"])
    return binding_service.bind(db, property_id=property_.id, policy_id=pet_template.id, acting_user=landlord)


# ============================================================================
# BIND TESTS
# ============================================================================


def test_bind_system_template(client, property_, pet_template, landlord_token: str):
    """Test a landlord binds a system template with an override."""
    response = client.post(
        f"/api/v1/properties/{property_.id}/policies",
        json={"policy_id": pet_template.id, "custom_value": "Cats only"},
        headers={"Authorization": f"Bearer {landlord_token}"},
    )
    assert response.status_code == 201
    data = response.json()
    assert data["property_id"] == property_.id
    assert data["policy_id"] == pet_template.id
    assert data["custom_value"] == "Cats only"
    assert data["effective_value"] == "Cats only"
    assert data["is_active"] is True
    assert data["version"] == 1
    assert data["policy"]["title"] == "Pet Policy"


def test_bind_empty_override_is_no_override(client, property_, pet_template, landlord_token: str):
    """Test an empty custom value is stored as no override."""
    response = client.post(
        f"/api/v1/properties/{property_.id}/policies",
        json={"policy_id": pet_template.id, "custom_value": ""},
        headers={"Authorization": f"Bearer {landlord_token}"},
    )
    assert response.status_code == 201
    assert response.json()["custom_value"] is None
    assert response.json()["effective_value"] == "No pets allowed"


def test_bind_duplicate_rejected(client, pet_binding, property_, pet_template, landlord_token: str):
    """Test the same template cannot be bound twice to one property."""
    response = client.post(
        f"/api/v1/properties/{property_.id}/policies",
        json={"policy_id": pet_template.id},
        headers={"Authorization": f"Bearer {landlord_token}"},
    )
    assert response.status_code == 409
    assert response.json()["code"] == "DUPLICATE_RESOURCE"


def test_bind_to_other_landlords_property_forbidden(
    client, property_, pet_template, other_landlord_token: str
):
    response = client.post(
        f"/api/v1/properties/{property_.id}/policies",
        json={"policy_id": pet_template.id},
        headers={"Authorization": f"Bearer {other_landlord_token}"},
    )
    assert response.status_code == 403


def test_bind_other_landlords_private_template_forbidden(
    client, db: Session, landlord_template, other_landlord_user_dict: dict, other_landlord_token: str
):
    """Test a landlord cannot use someone else's private template."""
    other_property = create_property(db, landlord_id=other_landlord_user_dict["id"], title="Cabin")

    response = client.post(
        f"/api/v1/properties/{other_property.id}/policies",
        json={"policy_id": landlord_template.id},
        headers={"Authorization": f"Bearer {other_landlord_token}"},
    )
    assert response.status_code == 403


def test_bind_unknown_property_or_template(client, property_, landlord_token: str, pet_template):
    response = client.post(
        "/api/v1/properties/99999/policies",
        json={"policy_id": pet_template.id},
        headers={"Authorization": f"Bearer {landlord_token}"},
    )
    assert response.status_code == 404

    response = client.post(
        f"/api/v1/properties/{property_.id}/policies",
        json={"policy_id": 99999},
        headers={"Authorization": f"Bearer {landlord_token}"},
    )
    assert response.status_code == 404


def test_bind_as_tenant_forbidden(client, property_, pet_template, tenant_token: str):
    response = client.post(
        f"/api/v1/properties/{property_.id}/policies",
        json={"policy_id": pet_template.id},
        headers={"Authorization": f"Bearer {tenant_token}"},
    )
    assert response.status_code == 403


# ============================================================================
# LIST TESTS
# ============================================================================


def test_list_property_policies_is_public(client, pet_binding, property_):
    """Test anyone can read a property's active policies."""
    response = client.get(f"/api/v1/properties/{property_.id}/policies")

    assert response.status_code == 200
    data = response.json()
    assert len(data) == 1
    assert data[0]["id"] == pet_binding.id
    assert data[0]["effective_value"] == "No pets allowed"


def test_list_property_policies_excludes_inactive(
    client, db: Session, property_, pet_binding, landlord_template, landlord_user_dict: dict
):
    landlord = db.get(UserModel, landlord_user_dict["id"])
    binding_service.bind(
        db,
        property_id=property_.id,
        policy_id=landlord_template.id,
        acting_user=landlord,
        is_active=False,
    )

    response = client.get(f"/api/v1/properties/{property_.id}/policies")
    assert [p["id"] for p in response.json()] == [pet_binding.id]


def test_list_unknown_property(client):
    response = client.get("/api/v1/properties/99999/policies")
    assert response.status_code == 404


# ============================================================================
# REBIND TESTS
# ============================================================================


def test_rebind_override_logs_stored_values(
    client, db: Session, pet_binding, landlord_user_dict: dict, landlord_token: str
):
    """Test changing the override records the stored values before and after, "" for none."""
    response = client.put(
        f"/api/v1/property-policies/{pet_binding.id}",
        json={"custom_value": "Cats only"},
        headers={"Authorization": f"Bearer {landlord_token}"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["custom_value"] == "Cats only"
    assert data["effective_value"] == "Cats only"
    assert data["version"] == 2

    db.expire_all()
    updates = db.query(PolicyUpdateModel).all()
    assert len(updates) == 1
    assert updates[0].old_value == ""
    assert updates[0].new_value == "Cats only"
    assert updates[0].updated_by == landlord_user_dict["id"]
    assert updates[0].policy_id == pet_binding.policy_id


def test_rebind_clear_override_logs_empty_value(client, db: Session, pet_binding, landlord_token: str):
    """Test clearing the override is logged as a change to no stored value."""
    headers = {"Authorization": f"Bearer {landlord_token}"}
    client.put(f"/api/v1/property-policies/{pet_binding.id}", json={"custom_value": "Cats only"}, headers=headers)

    response = client.put(
        f"/api/v1/property-policies/{pet_binding.id}", json={"custom_value": None}, headers=headers
    )
    assert response.status_code == 200
    assert response.json()["custom_value"] is None
    assert response.json()["effective_value"] == "No pets allowed"

    db.expire_all()
    latest = (
        db.query(PolicyUpdateModel).order_by(PolicyUpdateModel.id.desc()).first()
    )
    assert latest.old_value == "Cats only"
    assert latest.new_value == ""


def test_rebind_override_equal_to_default_logs_stored_change(
    db: Session, pet_binding, landlord_user_dict: dict
):
    """Test an override that repeats the template default is still a stored change, never an old == new row."""
    landlord = db.get(UserModel, landlord_user_dict["id"])
    launched = []

    binding_service.rebind(
        db, pet_binding.id, landlord, launch_fan_out=launched.append, custom_value="No pets allowed"
    )

    db.expire_all()
    update = db.query(PolicyUpdateModel).one()
    assert (update.old_value, update.new_value) == ("", "No pets allowed")
    assert launched == [update.id]


def test_rebind_records_through_change_log(db: Session, pet_binding, landlord_user_dict: dict, monkeypatch):
    """Test rebind writes its diff through policy_change_log.record_change in the binding's transaction."""
    from rental_policies.services import policy_change_log

    calls = []
    real_record_change = policy_change_log.record_change

    def spy(*args, **kwargs):
        calls.append(kwargs)
        return real_record_change(*args, **kwargs)

    monkeypatch.setattr(binding_service, "record_change", spy)
    landlord = db.get(UserModel, landlord_user_dict["id"])

    binding_service.rebind(db, pet_binding.id, landlord, launch_fan_out=lambda _id: None, custom_value="Cats only")

    assert len(calls) == 1
    assert calls[0]["commit"] is False
    assert calls[0]["old_value"] == ""
    assert calls[0]["new_value"] == "Cats only"
    db.expire_all()
    assert db.query(PolicyUpdateModel).count() == 1


def test_rebind_same_value_not_logged(client, db: Session, pet_binding, landlord_token: str):
    """Test writing an unchanged override, or "" over no override, logs nothing."""
    headers = {"Authorization": f"Bearer {landlord_token}"}

    response = client.put(
        f"/api/v1/property-policies/{pet_binding.id}", json={"custom_value": ""}, headers=headers
    )
    assert response.status_code == 200

    db.expire_all()
    assert db.query(PolicyUpdateModel).count() == 0


def test_rebind_active_flag_only_not_logged(client, db: Session, pet_binding, landlord_token: str):
    response = client.put(
        f"/api/v1/property-policies/{pet_binding.id}",
        json={"is_active": False},
        headers={"Authorization": f"Bearer {landlord_token}"},
    )
    assert response.status_code == 200
    assert response.json()["is_active"] is False
    assert response.json()["custom_value"] is None

    db.expire_all()
    assert db.query(PolicyUpdateModel).count() == 0


def test_rebind_other_landlord_forbidden(client, pet_binding, other_landlord_token: str):
    response = client.put(
        f"/api/v1/property-policies/{pet_binding.id}",
        json={"custom_value": "Anything"},
        headers={"Authorization": f"Bearer {other_landlord_token}"},
    )
    assert response.status_code == 403


def test_rebind_not_found(client, landlord_token: str):
    response = client.put(
        "/api/v1/property-policies/99999",
        json={"custom_value": "Anything"},
        headers={"Authorization": f"Bearer {landlord_token}"},
    )
    assert response.status_code == 404


def test_rebind_stale_expected_version(client, db: Session, pet_binding, landlord_token: str):
    """Test an update based on an outdated read is rejected without logging."""
    headers = {"Authorization": f"Bearer {landlord_token}"}
    first = client.put(
        f"/api/v1/property-policies/{pet_binding.id}",
        json={"custom_value": "Cats only", "expected_version": 1},
        headers=headers,
    )
    assert first.status_code == 200

    second = client.put(
        f"/api/v1/property-policies/{pet_binding.id}",
        json={"custom_value": "Dogs only", "expected_version": 1},
        headers=headers,
    )
    assert second.status_code == 409
    assert second.json()["code"] == "CONCURRENT_MODIFICATION"

    db.expire_all()
    assert db.query(PolicyUpdateModel).count() == 1
    assert db.get(PropertyPolicyModel, pet_binding.id).custom_value == "Cats only"


def test_rebind_concurrent_write_detected(
    db: Session, session_factory, pet_binding, landlord_user_dict: dict
):
    """Test a write that lands between read and update fails the update."""
    landlord = db.get(UserModel, landlord_user_dict["id"])

    # Another session changes the binding after this session loaded it
    other = session_factory()
    try:
        row = other.get(PropertyPolicyModel, pet_binding.id)
        row.custom_value = "Dogs only"
        other.commit()
    finally:
        other.close()

    with pytest.raises(ConcurrentModificationError):
        binding_service.rebind(db, pet_binding.id, landlord, custom_value="Cats only")

    db.expire_all()
    assert db.query(PolicyUpdateModel).count() == 0
    assert db.get(PropertyPolicyModel, pet_binding.id).custom_value == "Dogs only"


# ============================================================================
# UNBIND TESTS
# ============================================================================


def test_unbind(client, db: Session, pet_binding, property_, landlord_token: str):
    response = client.delete(
        f"/api/v1/property-policies/{pet_binding.id}",
        headers={"Authorization": f"Bearer {landlord_token}"},
    )
    assert response.status_code == 204

    listing = client.get(f"/api/v1/properties/{property_.id}/policies")
    assert listing.json() == []


def test_unbind_other_landlord_forbidden(client, pet_binding, other_landlord_token: str):
    response = client.delete(
        f"/api/v1/property-policies/{pet_binding.id}",
        headers={"Authorization": f"Bearer {other_landlord_token}"},
    )
    assert response.status_code == 403
