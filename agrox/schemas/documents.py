import uuid
from datetime import datetime
from typing import List, Optional
from enum import Enum

from pydantic import BaseModel


class DocumentType(str, Enum):
    cc = "CC"
    passport = "PASSPORT"
    residence_title = "RESIDENCE_TITLE"
    aima_appointment_proof = "AIMA_APPOINTMENT_PROOF"
    niss_proof = "NISS_PROOF"
    nif_proof = "NIF_PROOF"
    iban_proof = "IBAN_PROOF"
    address_proof = "ADDRESS_PROOF"


class VerificationStatus(str, Enum):
    pending = "PENDING"
    approved = "APPROVED"
    rejected = "REJECTED"


class ComplianceMasked(BaseModel):
    """What the client may see of user_compliance: last-4 values and the address, never ciphertext."""
    nif_last4: Optional[str] = None
    niss_last4: Optional[str] = None
    iban_last4: Optional[str] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None

    class Config:
        from_attributes = True


class VerificationResponse(BaseModel):
    status: Optional[VerificationStatus] = None
    submitted_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None
    review_notes: Optional[str] = None

    class Config:
        from_attributes = True


class DocumentFileResponse(BaseModel):
    id: uuid.UUID
    doc_type: DocumentType
    storage_path: str
    file_name: Optional[str] = None
    mime_type: Optional[str] = None
    size_bytes: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MyDocumentsResponse(BaseModel):
    compliance: ComplianceMasked
    verification: VerificationResponse
    documents: List[DocumentFileResponse]


class PendingVerificationRow(BaseModel):
    user_id: uuid.UUID
    email: Optional[str] = None
    name: Optional[str] = None
    submitted_at: Optional[datetime] = None


class ApprovalDetail(BaseModel):
    user_id: uuid.UUID
    email: Optional[str] = None
    name: Optional[str] = None
    compliance: ComplianceMasked
    verification: VerificationResponse
    documents: List[DocumentFileResponse]


class VerificationDecision(BaseModel):
    status: VerificationStatus
    notes: Optional[str] = None


class SignedUrlResponse(BaseModel):
    url: str
    expires_in: int
