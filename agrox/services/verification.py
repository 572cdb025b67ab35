"""
Document verification: the user submits, a coordinator (or above) decides.
"""
import uuid
from datetime import datetime
from typing import Dict, List, Optional

import structlog
from sqlalchemy.orm import Session

from ..errors import AppError
from ..models.models import User, UserCompliance, UserVerification
from .activities import display_name
from .compliance import masked
from .documents import list_documents


logger = structlog.get_logger(__name__)


def get_verification(db: Session, user_id: uuid.UUID) -> Optional[UserVerification]:
    return db.query(UserVerification).filter(UserVerification.user_id == user_id).first()


def compliance_view(db: Session, user_id: uuid.UUID) -> Dict[str, Optional[str]]:
    row = db.query(UserCompliance).filter(UserCompliance.user_id == user_id).first()
    view = masked(row)
    for f in ("address_line1", "address_line2", "city", "postal_code", "country"):
        view[f] = getattr(row, f, None)
    return view


def submit_for_approval(db: Session, user_id: uuid.UUID) -> UserVerification:
    row = get_verification(db, user_id)
    if row is None:
        row = UserVerification(user_id=user_id)
        db.add(row)
    row.status = "PENDING"
    row.submitted_at = datetime.utcnow()
    row.reviewed_at = None
    row.reviewed_by = None
    row.review_notes = None
    row.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(row)
    logger.info("verification_submitted", user_id=str(user_id))
    return row


def list_pending(db: Session) -> List[Dict]:
    rows = (
        db.query(UserVerification, User)
        .outerjoin(User, User.id == UserVerification.user_id)
        .filter(UserVerification.status == "PENDING")
        .order_by(UserVerification.submitted_at.desc())
        .all()
    )
    return [
        {
            "user_id": v.user_id,
            "email": u.email if u else None,
            "name": display_name(u),
            "submitted_at": v.submitted_at,
        }
        for v, u in rows
    ]


def approval_detail(db: Session, user_id: uuid.UUID) -> Dict:
    user = db.query(User).filter(User.id == user_id).first()
    verification = get_verification(db, user_id)
    if user is None and verification is None:
        raise AppError("not_found", status_code=404)
    return {
        "user_id": user_id,
        "email": user.email if user else None,
        "name": display_name(user),
        "compliance": compliance_view(db, user_id),
        "verification": verification or UserVerification(user_id=user_id),
        "documents": list_documents(db, user_id),
    }


def decide(db: Session, user_id: uuid.UUID, reviewer_id: uuid.UUID, status: str, notes: Optional[str]) -> UserVerification:
    if status not in ("APPROVED", "REJECTED"):
        raise AppError("invalid_status")
    notes = (notes or "").strip() or None
    if status == "REJECTED" and not notes:
        raise AppError("rejection_notes_required")

    row = get_verification(db, user_id)
    if row is None:
        raise AppError("not_found", status_code=404)
    row.status = status
    row.reviewed_at = datetime.utcnow()
    row.reviewed_by = reviewer_id
    row.review_notes = notes
    row.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(row)
    logger.info("verification_decided", user_id=str(user_id), status=status, reviewer_id=str(reviewer_id))
    return row
