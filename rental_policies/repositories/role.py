from sqlalchemy.orm import Session

from rental_policies.db.models.role import Role as RoleModel


def get_all_roles(db: Session) -> list[RoleModel]:
    """All roles, in seed order (admin, tenant, landlord)."""
    return db.query(RoleModel).order_by(RoleModel.id).all()


def get_role_by_name(db: Session, name: str) -> RoleModel | None:
    """Get a role by name. Authorization compares role names, never ids."""
    return db.query(RoleModel).filter(RoleModel.name == name).first()
