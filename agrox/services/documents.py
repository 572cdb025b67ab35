"""
User document files: one stored object plus one metadata row per (user, doc_type).
"""
import os
import uuid
from datetime import datetime
from typing import List, Optional

import structlog
from slugify import slugify
from sqlalchemy.orm import Session

from ..config import settings
from ..errors import AppError, StorageError
from ..models.models import UserDocumentFile
from ..storage.provider import StorageProvider
from .photos import is_raster_image


logger = structlog.get_logger(__name__)

DOC_TYPES = (
    "CC",
    "PASSPORT",
    "RESIDENCE_TITLE",
    "AIMA_APPOINTMENT_PROOF",
    "NISS_PROOF",
    "NIF_PROOF",
    "IBAN_PROOF",
    "ADDRESS_PROOF",
)


def is_allowed_type(content_type: Optional[str]) -> bool:
    return (content_type or "") == "application/pdf" or is_raster_image(content_type)


def validate_document(content_type: Optional[str], size: int) -> None:
    if size > settings.max_document_bytes:
        raise AppError("file_too_large")
    if not is_allowed_type(content_type):
        raise AppError("file_type_not_allowed")


def safe_file_name(name: Optional[str]) -> str:
    stem, ext = os.path.splitext(os.path.basename(name or "") or "file")
    return f"{slugify(stem, lowercase=False) or 'file'}{ext.lower()}"


def build_document_path(user_id: uuid.UUID, doc_type: str, file_name: str) -> str:
    return f"{user_id}/{doc_type}/{uuid.uuid4()}-{safe_file_name(file_name)}"


def get_document(db: Session, user_id: uuid.UUID, doc_type: str) -> Optional[UserDocumentFile]:
    return (
        db.query(UserDocumentFile)
        .filter(UserDocumentFile.user_id == user_id, UserDocumentFile.doc_type == doc_type)
        .first()
    )


def list_documents(db: Session, user_id: uuid.UUID) -> List[UserDocumentFile]:
    return db.query(UserDocumentFile).filter(UserDocumentFile.user_id == user_id).order_by(UserDocumentFile.doc_type.asc()).all()


def upload_document(
    db: Session,
    storage: StorageProvider,
    user_id: uuid.UUID,
    doc_type: str,
    file_name: Optional[str],
    data: bytes,
    content_type: Optional[str],
) -> UserDocumentFile:
    if doc_type not in DOC_TYPES:
        raise AppError("invalid_doc_type")
    validate_document(content_type, len(data))

    bucket = settings.user_documents_bucket
    existing = get_document(db, user_id, doc_type)
    if existing is not None:
        # Best effort: a stale object left behind is not worth failing the upload
        try:
            storage.remove(bucket, [existing.storage_path])
        except StorageError as e:
            logger.warning("document_old_object_remove_failed", user_id=str(user_id), doc_type=doc_type, error=str(e))

    path = build_document_path(user_id, doc_type, file_name)
    storage.upload(bucket, path, data, content_type, upsert=False)

    row = existing or UserDocumentFile(user_id=user_id, doc_type=doc_type)
    row.storage_path = path
    row.file_name = file_name
    row.mime_type = content_type
    row.size_bytes = len(data)
    row.created_at = datetime.utcnow()
    if existing is None:
        db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("document_uploaded", user_id=str(user_id), doc_type=doc_type, size=len(data))
    return row


def remove_document(db: Session, storage: StorageProvider, user_id: uuid.UUID, doc_type: str) -> None:
    row = get_document(db, user_id, doc_type)
    if row is None:
        raise AppError("not_found", status_code=404)
    storage.remove(settings.user_documents_bucket, [row.storage_path])
    db.delete(row)
    db.commit()
    logger.info("document_removed", user_id=str(user_id), doc_type=doc_type)


def document_signed_url(db: Session, storage: StorageProvider, user_id: uuid.UUID, doc_type: str) -> str:
    row = get_document(db, user_id, doc_type)
    if row is None:
        raise AppError("not_found", status_code=404)
    url = storage.create_signed_url(settings.user_documents_bucket, row.storage_path, settings.signed_url_ttl_seconds)
    if not url:
        raise AppError("signed_url_missing", status_code=404)
    return url
