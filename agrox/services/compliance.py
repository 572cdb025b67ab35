"""
Field-level encryption for the three PII fields on user_compliance.

Format: AES-GCM with key = SHA-256(secret), a fresh 12-byte nonce per value,
stored as nonce || ciphertext(+tag) in one blob. Only the last 4 characters
of the raw value are kept in plaintext for display.
"""
import hashlib
import os
import uuid
from datetime import datetime
from typing import Any, Dict, Optional

import structlog
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..config import settings
from ..models.models import UserCompliance


logger = structlog.get_logger(__name__)

NONCE_BYTES = 12
PII_FIELDS = ("nif", "niss", "iban")
FIELD_LIMITS = {
    "nif": 64,
    "niss": 64,
    "iban": 128,
    "address_line1": 200,
    "address_line2": 200,
    "city": 120,
    "postal_code": 32,
    "country": 80,
}
MIGRATE_BATCH = 500


def require_string(value: Any, max_len: int) -> Optional[str]:
    """Trimmed string, None for non-strings or blanks, cut at max_len."""
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    if not trimmed:
        return None
    return trimmed[:max_len]


def last4(raw: Optional[str]) -> Optional[str]:
    v = "".join((raw or "").split())
    if not v:
        return None
    return v[-4:]


def derive_key(secret: Optional[str] = None) -> bytes:
    secret = secret if secret is not None else settings.pii_encryption_key
    if not secret:
        raise RuntimeError("PII_ENCRYPTION_KEY must be set")
    return hashlib.sha256(secret.encode("utf-8")).digest()


def encrypt_value(plaintext: str, key: bytes) -> bytes:
    nonce = os.urandom(NONCE_BYTES)
    return nonce + AESGCM(key).encrypt(nonce, plaintext.encode("utf-8"), None)


def decrypt_value(blob: bytes, key: bytes) -> str:
    nonce, ct = blob[:NONCE_BYTES], blob[NONCE_BYTES:]
    return AESGCM(key).decrypt(nonce, ct, None).decode("utf-8")


def masked(row: Optional[UserCompliance]) -> Dict[str, Optional[str]]:
    return {f"{f}_last4": getattr(row, f"{f}_last4", None) for f in PII_FIELDS}


def upsert_compliance(db: Session, user_id: uuid.UUID, body: Dict[str, Any]) -> Dict[str, Optional[str]]:
    """Encrypt and store the submitted form; returns only the last-4 values."""
    payload = {name: require_string(body.get(name), limit) for name, limit in FIELD_LIMITS.items()}
    key = derive_key()

    row = db.query(UserCompliance).filter(UserCompliance.user_id == user_id).first()
    if row is None:
        row = UserCompliance(user_id=user_id)
        db.add(row)

    for f in PII_FIELDS:
        value = payload[f]
        setattr(row, f"{f}_enc", encrypt_value(value, key) if value else None)
        setattr(row, f"{f}_last4", last4(value))
        # plaintext never stays on the row
        setattr(row, f, None)
    for f in ("address_line1", "address_line2", "city", "postal_code", "country"):
        setattr(row, f, payload[f])
    row.updated_at = datetime.utcnow()
    db.commit()

    logger.info("compliance_upserted", user_id=str(user_id))
    return masked(row)


def migrate_plaintext(db: Session) -> Dict[str, int]:
    """Encrypt legacy plaintext columns in place. Safe to run repeatedly."""
    rows = (
        db.query(UserCompliance)
        .filter(or_(UserCompliance.nif.isnot(None), UserCompliance.niss.isnot(None), UserCompliance.iban.isnot(None)))
        .limit(MIGRATE_BATCH)
        .all()
    )
    key = derive_key()
    migrated = 0
    for row in rows:
        for f in PII_FIELDS:
            plain = getattr(row, f)
            if plain is None:
                continue
            if plain.strip():
                if getattr(row, f"{f}_enc") is None:
                    setattr(row, f"{f}_enc", encrypt_value(plain.strip(), key))
                setattr(row, f"{f}_last4", last4(plain))
            setattr(row, f, None)
        row.updated_at = datetime.utcnow()
        migrated += 1
    db.commit()

    logger.info("compliance_migrated", scanned=len(rows), migrated=migrated)
    return {"scanned": len(rows), "migrated": migrated}
