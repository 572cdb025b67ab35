import uuid
from typing import Dict, List

from sqlalchemy.orm import Session

from ..i18n import translate
from ..models.models import User
from . import permissions


BASE_TILES = (
    ("activity", "activityRecord", "/activity"),
    ("maintenance", "maintenance", "/maintenance"),
    ("damages", "damages", "/damages"),
    ("fuel", "fuel", "/fuel"),
    ("orders", "orders", "/orders"),
    ("support", "support", "/support"),
    ("my-documents", "myDocuments", "/my-documents"),
)


def dashboard_tiles(is_admin: bool, is_coordinator: bool, lang: str) -> List[Dict[str, str]]:
    tiles = [{"key": k, "title": translate(t, lang), "path": p} for k, t, p in BASE_TILES]
    if is_coordinator:
        tiles.insert(0, {"key": "approvals", "title": translate("approvals", lang), "path": "/admin/approvals"})
    if is_admin:
        tiles.insert(0, {"key": "admin-activities", "title": translate("activityValidation", lang), "path": "/admin/activities"})
    return tiles


def user_summary(db: Session, user_id: uuid.UUID, email: str, lang: str) -> Dict:
    """Name, role flags and tiles for the dashboard header."""
    profile = db.query(User).filter(User.id == user_id).first()
    name = ""
    if profile is not None:
        name = f"{profile.first_name or ''} {profile.last_name or ''}".strip()
    is_admin = permissions.is_admin_or_super_admin(user_id, db)
    is_coordinator = permissions.is_coordenador_or_above(user_id, db)
    return {
        "user_id": str(user_id),
        "name": name or email or "",
        "email": email,
        "is_admin": is_admin,
        "is_super_admin": permissions.is_user_role(user_id, "SUPER_ADMIN", db),
        "is_coordinator": is_coordinator,
        "tiles": dashboard_tiles(is_admin, is_coordinator, lang),
    }
