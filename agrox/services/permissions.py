"""
Role checks, one per database-side check function the screens rely on.
"""
import uuid
from typing import Set

from sqlalchemy.orm import Session

from ..models.models import UserRole, Activity


ROLES = ("SUPER_ADMIN", "ADMIN", "COORDENADOR", "OPERADOR")
ADMIN_ROLES = {"SUPER_ADMIN", "ADMIN"}
COORDINATOR_ROLES = {"SUPER_ADMIN", "ADMIN", "COORDENADOR"}


def role_names(user_id: uuid.UUID, db: Session) -> Set[str]:
    rows = db.query(UserRole.role).filter(UserRole.user_id == user_id).all()
    return {r[0] for r in rows}


def is_admin_or_super_admin(user_id: uuid.UUID, db: Session) -> bool:
    """ADMIN or SUPER_ADMIN."""
    return bool(role_names(user_id, db) & ADMIN_ROLES)


def is_coordenador_or_above(user_id: uuid.UUID, db: Session) -> bool:
    """COORDENADOR, ADMIN or SUPER_ADMIN."""
    return bool(role_names(user_id, db) & COORDINATOR_ROLES)


def is_user_role(user_id: uuid.UUID, role: str, db: Session) -> bool:
    """Exact role match."""
    return role in role_names(user_id, db)


def is_activity_owner(activity_id: uuid.UUID, user_id: uuid.UUID, db: Session) -> bool:
    return db.query(Activity.id).filter(Activity.id == activity_id, Activity.operator_id == user_id).first() is not None
