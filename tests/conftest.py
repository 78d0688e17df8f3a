import os
import tempfile
from datetime import date

# Set environment variables BEFORE any imports that might use settings
# Use a temporary directory for test database to avoid permission issues
_test_db_dir = tempfile.mkdtemp()
_test_db_path = os.path.join(_test_db_dir, "test_rental_policies.db")
os.environ["DATABASE_URL"] = f"sqlite:///{_test_db_path}"
os.environ["SECRET_KEY"] = "test-secret-key-min-32-characters-long-for-testing"
os.environ["ALGORITHM"] = "HS256"
os.environ["ACCESS_TOKEN_EXPIRE_MINUTES"] = "30"
os.environ["FIRST_ADMIN_EMAIL"] = "admin@test.example.com"
os.environ["FIRST_ADMIN_PASSWORD"] = "AdminTest123!"

import pytest
from alembic import command
from alembic.config import Config
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session

from rental_policies.main import app
from rental_policies.core.security import create_access_token, get_password_hash
from rental_policies.repositories.role import get_role_by_name
from rental_policies.repositories.user import create_user


def _create_user(db: Session, email: str, name: str, password: str, role_name: str) -> dict:
    role = get_role_by_name(db, role_name)
    if not role:
        raise RuntimeError(f"{role_name} role not found")

    user = create_user(
        db,
        email=email,
        name=name,
        password_hash=get_password_hash(password),
        role_id=role.id,
    )

    return {
        "id": user.id,
        "email": user.email,
        "name": name,
        "password": password,
        "role_id": user.role_id,
    }


@pytest.fixture(scope="function")
def session_factory():
    """Create a fresh migrated database for each test and return its session factory."""
    temp_db_dir = tempfile.mkdtemp()
    test_db_path = os.path.join(temp_db_dir, "test.db")
    test_db_url = f"sqlite:///{test_db_path}"

    test_engine = create_engine(
        test_db_url,
        connect_args={"check_same_thread": False},
    )

    # WAL lets the background fan-out session write while the test session is open
    @event.listens_for(test_engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    TestingSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=test_engine
    )

    # Run Alembic migrations to set up the database schema and seed data
    alembic_cfg = Config("alembic.ini")
    alembic_cfg.set_main_option("sqlalchemy.url", test_db_url)
    command.upgrade(alembic_cfg, "head")

    try:
        yield TestingSessionLocal
    finally:
        test_engine.dispose()

        # Clean up - remove test database file, WAL files and directory
        for suffix in ["", "-wal", "-shm"]:
            path = f"{test_db_path}{suffix}"
            if os.path.exists(path):
                os.remove(path)
        if os.path.exists(temp_db_dir):
            os.rmdir(temp_db_dir)


@pytest.fixture(scope="function")
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function")
def client(db_session, session_factory):
    """Create a test client with database dependency overrides."""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    from rental_policies.api.deps import get_db, get_session_factory

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def db(db_session):
    """Alias for db_session to match test naming conventions."""
    return db_session


# ============================================================================
# USERS
# ============================================================================


@pytest.fixture(scope="function")
def admin_user(db: Session) -> dict:
    """The admin user created by migration 002."""
    from rental_policies.repositories.user import get_user_by_email
    from rental_policies.core.config import settings

    user = get_user_by_email(db, settings.first_admin_email)
    if not user:
        raise RuntimeError("Admin user not found. Check migration 002.")

    return {
        "id": user.id,
        "email": user.email,
        "password": settings.first_admin_password,
        "role_id": user.role_id,
    }


@pytest.fixture(scope="function")
def admin_token(admin_user: dict) -> str:
    return create_access_token(data={"sub": admin_user["id"]})


@pytest.fixture(scope="function")
def landlord_user_dict(db: Session) -> dict:
    return _create_user(db, "landlord@example.com", "Test Landlord", "LandlordPass123!", "landlord")


@pytest.fixture(scope="function")
def landlord_token(landlord_user_dict: dict) -> str:
    return create_access_token(data={"sub": landlord_user_dict["id"]})


@pytest.fixture(scope="function")
def other_landlord_user_dict(db: Session) -> dict:
    return _create_user(db, "landlord2@example.com", "Other Landlord", "Landlord2Pass123!", "landlord")


@pytest.fixture(scope="function")
def other_landlord_token(other_landlord_user_dict: dict) -> str:
    return create_access_token(data={"sub": other_landlord_user_dict["id"]})


@pytest.fixture(scope="function")
def tenant_user_dict(db: Session) -> dict:
    return _create_user(db, "tenant@example.com", "Test Tenant", "TenantPass123!", "tenant")


@pytest.fixture(scope="function")
def tenant_token(tenant_user_dict: dict) -> str:
    return create_access_token(data={"sub": tenant_user_dict["id"]})


@pytest.fixture(scope="function")
def other_tenant_user_dict(db: Session) -> dict:
    return _create_user(db, "tenant2@example.com", "Other Tenant", "Tenant2Pass123!", "tenant")


@pytest.fixture(scope="function")
def other_tenant_token(other_tenant_user_dict: dict) -> str:
    return create_access_token(data={"sub": other_tenant_user_dict["id"]})


# ============================================================================
# PROPERTIES, RESERVATIONS AND TEMPLATES
# ============================================================================


@pytest.fixture(scope="function")
def property_(db: Session, landlord_user_dict: dict):
    """A property owned by the landlord."""
    from rental_policies.repositories.property import create_property

    return create_property(db, landlord_id=landlord_user_dict["id"], title="Sunny Loft")


@pytest.fixture(scope="function")
def reservation(db: Session, property_, tenant_user_dict: dict):
    """A pending reservation of the property by the tenant."""
    from rental_policies.repositories.reservation import create_reservation

    return create_reservation(
        db,
        property_id=property_.id,
        tenant_id=tenant_user_dict["id"],
        landlord_id=property_.landlord_id,
        start_date=date(2026, 11, 1),
        end_date=date(2026, 11, 15),
    )


@pytest.fixture(scope="function")
def pet_template(db: Session):
    """The seeded "Pet Policy" system template."""
    from rental_policies.db.models.policy_template import PolicyTemplate

    template = (
        db.query(PolicyTemplate)
        .filter(PolicyTemplate.is_system_template.is_(True), PolicyTemplate.category == "pets")
        .first()
    )
    if not template:
        raise RuntimeError("Pet Policy system template not found. Check migration 005.")
    return template


@pytest.fixture(scope="function")
def landlord_template(db: Session, landlord_user_dict: dict):
    """A private template owned by the landlord."""
    from rental_policies.repositories.policy_template import create_template

    return create_template(
        db,
        title="Parking",
        description="Parking rules",
        category="house_rules",
        default_value="One car per unit",
        landlord_id=landlord_user_dict["id"],
        is_system_template=False,
    )
