import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..auth.security import SessionUser, require_coordinator
from ..config import settings
from ..schemas.documents import (
    ApprovalDetail,
    DocumentType,
    PendingVerificationRow,
    SignedUrlResponse,
    VerificationDecision,
    VerificationResponse,
)
from ..services import documents as docs
from ..services import verification
from ..storage.provider import StorageProvider
from .files import get_storage


router = APIRouter(prefix="/approvals", tags=["approvals"])


@router.get("", response_model=List[PendingVerificationRow])
def pending(db: Session = Depends(get_db), _=Depends(require_coordinator)):
    return verification.list_pending(db)


@router.get("/{user_id}", response_model=ApprovalDetail)
def detail(user_id: uuid.UUID, db: Session = Depends(get_db), _=Depends(require_coordinator)):
    return verification.approval_detail(db, user_id)


@router.get("/{user_id}/documents/{doc_type}/url", response_model=SignedUrlResponse)
def document_url(
    user_id: uuid.UUID,
    doc_type: DocumentType,
    db: Session = Depends(get_db),
    storage: StorageProvider = Depends(get_storage),
    _=Depends(require_coordinator),
):
    url = docs.document_signed_url(db, storage, user_id, doc_type.value)
    return {"url": url, "expires_in": settings.signed_url_ttl_seconds}


@router.post("/{user_id}/decision", response_model=VerificationResponse)
def decide(
    user_id: uuid.UUID,
    payload: VerificationDecision,
    db: Session = Depends(get_db),
    reviewer: SessionUser = Depends(require_coordinator),
):
    """Approve or reject; a rejection needs notes."""
    return verification.decide(db, user_id, reviewer.id, payload.status.value, payload.notes)
