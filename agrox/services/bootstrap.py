"""
Idempotent creation of the per-user base rows (profile, compliance, verification).
Run on login and when the documents page loads.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ..models.models import User, UserCompliance, UserVerification


def ensure_current_user_row(
    db: Session,
    user_id: uuid.UUID,
    email: Optional[str] = None,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        user = User(id=user_id, email=(email or "").strip().lower() or None, first_name=first_name or None, last_name=last_name or None)
        db.add(user)
    else:
        # Fill gaps only, never overwrite what the user already has
        if email and not user.email:
            user.email = email.strip().lower()
        if first_name and not user.first_name:
            user.first_name = first_name
        if last_name and not user.last_name:
            user.last_name = last_name
        user.updated_at = datetime.utcnow()
    db.commit()
    return user


def ensure_user_compliance_rows(db: Session, user_id: uuid.UUID) -> None:
    changed = False
    if db.query(UserCompliance).filter(UserCompliance.user_id == user_id).first() is None:
        db.add(UserCompliance(user_id=user_id))
        changed = True
    if db.query(UserVerification).filter(UserVerification.user_id == user_id).first() is None:
        db.add(UserVerification(user_id=user_id))
        changed = True
    if changed:
        db.commit()
