import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..auth.security import SessionUser, require_admin
from ..schemas.activities import ActivityResponse, ActivityReview, PendingActivityRow
from ..services import activities as svc


router = APIRouter(prefix="/validation", tags=["admin"])


@router.get("/pending", response_model=List[PendingActivityRow])
def pending(db: Session = Depends(get_db), admin: SessionUser = Depends(require_admin)):
    """Activities awaiting validation, newest first, with names joined in."""
    return svc.list_pending_for_review(db)


@router.post("/{activity_id}/review", response_model=ActivityResponse)
def review(
    activity_id: uuid.UUID,
    payload: ActivityReview,
    db: Session = Depends(get_db),
    admin: SessionUser = Depends(require_admin),
):
    return svc.review_activity(db, activity_id, payload.status.value, admin.id)
