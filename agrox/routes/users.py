from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..db import get_db
from ..auth.security import SessionUser, get_current_user, require_super_admin
from ..schemas.users import RoleAssignment, RoleAuditRow, RoleRemoval, SuperAdminStats
from ..services import roles
from ..services.stats import super_admin_stats


router = APIRouter(tags=["users"])


# ---------- ROLE ASSIGNMENT ----------
# Authorization lives in the service so the error codes match the role RPCs
# (not_authorized / invalid_email / user_not_found / cannot_change_self).

@router.post("/roles")
def set_role(payload: RoleAssignment, db: Session = Depends(get_db), user: SessionUser = Depends(get_current_user)):
    row = roles.set_role_by_email(db, user.id, payload.email, payload.role.value)
    return {"ok": True, "user_id": str(row.user_id), "role": row.role}


@router.post("/roles/remove")
def remove_role(payload: RoleRemoval, db: Session = Depends(get_db), user: SessionUser = Depends(get_current_user)):
    roles.remove_role_by_email(db, user.id, payload.email)
    return {"ok": True}


# ---------- SUPER ADMIN ----------

@router.get("/roles/audit", response_model=List[RoleAuditRow])
def roles_audit(
    email: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    _=Depends(require_super_admin),
):
    """Latest role grants with target and actor emails."""
    return roles.list_role_audit(db, email)


@router.get("/stats/super-admin", response_model=SuperAdminStats)
def stats(db: Session = Depends(get_db), _=Depends(require_super_admin)):
    return super_admin_stats(db)
