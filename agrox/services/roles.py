"""
Role assignment by email and the super-admin batch assignment.

A user holds at most one role row: assigning replaces whatever was there.
"""
import uuid
from datetime import datetime
from typing import Dict, List, Optional

import structlog
from email_validator import validate_email, EmailNotValidError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, aliased

from ..errors import AppError
from ..models.models import User, UserRole
from .auth_client import AuthClient
from .permissions import ROLES, is_admin_or_super_admin, is_user_role


logger = structlog.get_logger(__name__)

MAX_EMAIL_LEN = 320
AUDIT_LIMIT = 500
ADMIN_LIST_MAX_PAGES = 20
ADMIN_LIST_PER_PAGE = 200
NOT_FOUND_HINT = "Confirme que essas contas já existem no /login e que os emails foram verificados."


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def _check_email(email: Optional[str]) -> str:
    value = normalize_email(email)
    if not value or len(value) > MAX_EMAIL_LEN:
        raise AppError("invalid_email")
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        raise AppError("invalid_email")
    return value


def _resolve_target(db: Session, caller_id: uuid.UUID, email: Optional[str]) -> User:
    if not is_admin_or_super_admin(caller_id, db):
        raise AppError("not_authorized", status_code=403)
    value = _check_email(email)
    target = db.query(User).filter(User.email == value).first()
    if target is None:
        raise AppError("user_not_found", status_code=404)
    if target.id == caller_id:
        raise AppError("cannot_change_self", status_code=400)
    # Only a super admin may touch super admin rights
    if is_user_role(target.id, "SUPER_ADMIN", db) and not is_user_role(caller_id, "SUPER_ADMIN", db):
        raise AppError("not_authorized", status_code=403)
    return target


def _replace_role(db: Session, user_id: uuid.UUID, role: str, created_by: Optional[uuid.UUID]) -> UserRole:
    db.query(UserRole).filter(UserRole.user_id == user_id).delete(synchronize_session=False)
    row = UserRole(user_id=user_id, role=role, created_by=created_by)
    db.add(row)
    return row


def set_role_by_email(db: Session, caller_id: uuid.UUID, email: Optional[str], role: str) -> UserRole:
    if role not in ROLES:
        raise AppError("invalid_role")
    target = _resolve_target(db, caller_id, email)
    if role == "SUPER_ADMIN" and not is_user_role(caller_id, "SUPER_ADMIN", db):
        raise AppError("not_authorized", status_code=403)
    row = _replace_role(db, target.id, role, caller_id)
    db.commit()
    logger.info("role_assigned", target_id=str(target.id), role=role, actor_id=str(caller_id))
    return row


def remove_role_by_email(db: Session, caller_id: uuid.UUID, email: Optional[str]) -> None:
    target = _resolve_target(db, caller_id, email)
    db.query(UserRole).filter(UserRole.user_id == target.id).delete(synchronize_session=False)
    db.commit()
    logger.info("role_removed", target_id=str(target.id), actor_id=str(caller_id))


def list_role_audit(db: Session, email_filter: Optional[str] = None) -> List[Dict]:
    target = aliased(User)
    actor = aliased(User)
    q = (
        db.query(UserRole, target.email, actor.email)
        .outerjoin(target, target.id == UserRole.user_id)
        .outerjoin(actor, actor.id == UserRole.created_by)
        .order_by(UserRole.created_at.desc())
        .limit(AUDIT_LIMIT)
    )
    rows = [
        {
            "id": r.id,
            "user_id": r.user_id,
            "role": r.role,
            "target_email": target_email,
            "actor_id": r.created_by,
            "actor_email": actor_email,
            "created_at": r.created_at,
        }
        for r, target_email, actor_email in q.all()
    ]
    needle = normalize_email(email_filter)
    if needle:
        rows = [
            r for r in rows
            if needle in (r["target_email"] or "").lower() or needle in (r["actor_email"] or "").lower()
        ]
    return rows


def find_auth_users(auth: AuthClient, emails: List[str]) -> Dict[str, Dict]:
    """Page through the auth admin listing until every email is found or pages run out."""
    wanted = set(emails)
    found: Dict[str, Dict] = {}
    for page in range(1, ADMIN_LIST_MAX_PAGES + 1):
        if len(found) >= len(wanted):
            break
        users = auth.admin_list_users(page=page, per_page=ADMIN_LIST_PER_PAGE)
        if not users:
            break
        for u in users:
            e = (u.get("email") or "").lower()
            if e in wanted and e not in found:
                found[e] = {"id": u["id"], "email": u.get("email") or e}
    return found


def assign_super_admins(db: Session, auth: AuthClient, caller_id: uuid.UUID, emails: List[str]) -> Dict:
    """
    Returns {"ok": n, "err": n, "results": [...]} or raises AppError("missing_emails").
    Emails that the auth service does not know come back as {"notFound": [...]}.
    """
    normalized: List[str] = []
    for e in emails:
        v = normalize_email(e) if isinstance(e, str) else ""
        if v and v not in normalized:
            normalized.append(v)
    if not normalized:
        raise AppError("missing_emails", status_code=400)

    found = find_auth_users(auth, normalized)
    not_found = [e for e in normalized if e not in found]
    if not_found:
        return {"notFound": not_found}

    results = []
    for email in normalized:
        target = found[email]
        target_id = uuid.UUID(str(target["id"]))
        try:
            user = db.query(User).filter(User.id == target_id).first()
            if user is None:
                db.add(User(id=target_id, email=target["email"], updated_at=datetime.utcnow()))
            else:
                user.email = target["email"]
                user.updated_at = datetime.utcnow()
            db.flush()
            _replace_role(db, target_id, "SUPER_ADMIN", caller_id)
            db.commit()
            results.append({"email": email, "user_id": str(target_id), "status": "ok"})
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("superadmin_assign_failed", email=email, error=str(e))
            results.append({"email": email, "user_id": str(target_id), "status": "error", "error": "unexpected_error"})

    ok = sum(1 for r in results if r["status"] == "ok")
    logger.info("superadmins_assigned", ok=ok, err=len(results) - ok, actor_id=str(caller_id))
    return {"ok": ok, "err": len(results) - ok, "results": results}
