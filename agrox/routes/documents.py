from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from ..db import get_db
from ..auth.security import SessionUser, get_current_user
from ..config import settings
from ..schemas.documents import (
    DocumentType,
    DocumentFileResponse,
    MyDocumentsResponse,
    SignedUrlResponse,
    VerificationResponse,
)
from ..services import documents as docs
from ..services import verification
from ..services.bootstrap import ensure_current_user_row, ensure_user_compliance_rows
from ..storage.provider import StorageProvider
from .files import get_storage


router = APIRouter(prefix="/documents", tags=["documents"])


@router.get("/me", response_model=MyDocumentsResponse)
def my_documents(db: Session = Depends(get_db), user: SessionUser = Depends(get_current_user)):
    """Masked compliance data, verification state and uploaded files of the caller."""
    ensure_current_user_row(db, user.id, user.email, user.first_name, user.last_name)
    ensure_user_compliance_rows(db, user.id)
    return {
        "compliance": verification.compliance_view(db, user.id),
        "verification": verification.get_verification(db, user.id),
        "documents": docs.list_documents(db, user.id),
    }


@router.post("/submit", response_model=VerificationResponse)
def submit(db: Session = Depends(get_db), user: SessionUser = Depends(get_current_user)):
    return verification.submit_for_approval(db, user.id)


@router.post("/{doc_type}", response_model=DocumentFileResponse, status_code=201)
async def upload(
    doc_type: DocumentType,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    user: SessionUser = Depends(get_current_user),
    storage: StorageProvider = Depends(get_storage),
):
    """Upload or replace the file for one document type."""
    data = await file.read()
    return docs.upload_document(db, storage, user.id, doc_type.value, file.filename, data, file.content_type)


@router.delete("/{doc_type}")
def remove(
    doc_type: DocumentType,
    db: Session = Depends(get_db),
    user: SessionUser = Depends(get_current_user),
    storage: StorageProvider = Depends(get_storage),
):
    docs.remove_document(db, storage, user.id, doc_type.value)
    return {"ok": True}


@router.get("/{doc_type}/url", response_model=SignedUrlResponse)
def signed_url(
    doc_type: DocumentType,
    db: Session = Depends(get_db),
    user: SessionUser = Depends(get_current_user),
    storage: StorageProvider = Depends(get_storage),
):
    url = docs.document_signed_url(db, storage, user.id, doc_type.value)
    return {"url": url, "expires_in": settings.signed_url_ttl_seconds}
