import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    String,
    DateTime,
    ForeignKey,
    Integer,
    Float,
    JSON,
    UniqueConstraint,
    BigInteger,
    LargeBinary,
    Text,
    Index,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship, Mapped, mapped_column

from ..db import Base


def uuid_pk() -> Mapped[uuid.UUID]:
    return mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)


class User(Base):
    """Profile row mirroring an auth-service account (same id)."""
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True)
    email: Mapped[Optional[str]] = mapped_column(String(320), index=True)
    first_name: Mapped[Optional[str]] = mapped_column(String(120))
    last_name: Mapped[Optional[str]] = mapped_column(String(120))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)

    roles = relationship("UserRole", foreign_keys="UserRole.user_id", cascade="all, delete-orphan", back_populates="user")


class UserRole(Base):
    __tablename__ = "user_roles"

    id: Mapped[uuid.UUID] = uuid_pk()
    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role: Mapped[str] = mapped_column(String(32), nullable=False)  # SUPER_ADMIN|ADMIN|COORDENADOR|OPERADOR
    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow, index=True)

    user = relationship("User", foreign_keys=[user_id], back_populates="roles")


class Machine(Base):
    """Tractors, harvesters and other machinery operators log activities against"""
    __tablename__ = "machines"

    id: Mapped[uuid.UUID] = uuid_pk()
    internal_id: Mapped[Optional[str]] = mapped_column(String(64), index=True)
    brand: Mapped[Optional[str]] = mapped_column(String(120))
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    model: Mapped[Optional[str]] = mapped_column(String(120))
    plate: Mapped[Optional[str]] = mapped_column(String(32))
    serial_number: Mapped[Optional[str]] = mapped_column(String(120))
    status: Mapped[Optional[str]] = mapped_column(String(20), default="ACTIVE", index=True)  # ACTIVE|MAINTENANCE|INACTIVE
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)


class Client(Base):
    __tablename__ = "clients"

    id: Mapped[uuid.UUID] = uuid_pk()
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)

    locations = relationship("Location", back_populates="client", passive_deletes=True)


class Location(Base):
    __tablename__ = "locations"

    id: Mapped[uuid.UUID] = uuid_pk()
    client_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)

    client = relationship("Client", back_populates="locations")


class Service(Base):
    __tablename__ = "services"

    id: Mapped[uuid.UUID] = uuid_pk()
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)


class Activity(Base):
    """One machine-usage record: opened on start, closed by the operator, reviewed by an admin"""
    __tablename__ = "activities"

    id: Mapped[uuid.UUID] = uuid_pk()
    operator_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    machine_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("machines.id", ondelete="CASCADE"), nullable=False, index=True)
    client_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), ForeignKey("clients.id", ondelete="SET NULL"))
    location_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), ForeignKey("locations.id", ondelete="SET NULL"))
    service_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), ForeignKey("services.id", ondelete="SET NULL"))
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow, index=True)
    end_time: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    start_odometer: Mapped[float] = mapped_column(Float, nullable=False)
    end_odometer: Mapped[Optional[float]] = mapped_column(Float)
    start_gps: Mapped[Optional[dict]] = mapped_column(JSON)  # {"lat": .., "lng": ..}
    end_gps: Mapped[Optional[dict]] = mapped_column(JSON)
    # Storage paths inside the activity-photos bucket, never public URLs
    start_photo_url: Mapped[Optional[str]] = mapped_column(Text)
    end_photo_url: Mapped[Optional[str]] = mapped_column(Text)
    start_odometer_photo_url: Mapped[Optional[str]] = mapped_column(Text)
    end_odometer_photo_url: Mapped[Optional[str]] = mapped_column(Text)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    area_value: Mapped[Optional[float]] = mapped_column(Float)
    area_unit: Mapped[Optional[str]] = mapped_column(String(20))
    area_notes: Mapped[Optional[str]] = mapped_column(Text)
    performance_rating: Mapped[Optional[int]] = mapped_column(Integer)  # 1..5
    status: Mapped[str] = mapped_column(String(32), default="PENDING_VALIDATION", nullable=False, index=True)  # PENDING_VALIDATION|APPROVED|REJECTED
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)

    __table_args__ = (
        Index("idx_activity_operator_status", "operator_id", "status"),
    )


class UserCompliance(Base):
    """NIF/NISS/IBAN stored as nonce||ciphertext plus a plaintext last-4 for display"""
    __tablename__ = "user_compliance"

    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    # Legacy plaintext columns, emptied by compliance-migrate
    nif: Mapped[Optional[str]] = mapped_column(String(64))
    niss: Mapped[Optional[str]] = mapped_column(String(64))
    iban: Mapped[Optional[str]] = mapped_column(String(128))
    nif_enc: Mapped[Optional[bytes]] = mapped_column(LargeBinary)
    niss_enc: Mapped[Optional[bytes]] = mapped_column(LargeBinary)
    iban_enc: Mapped[Optional[bytes]] = mapped_column(LargeBinary)
    nif_last4: Mapped[Optional[str]] = mapped_column(String(4))
    niss_last4: Mapped[Optional[str]] = mapped_column(String(4))
    iban_last4: Mapped[Optional[str]] = mapped_column(String(4))
    address_line1: Mapped[Optional[str]] = mapped_column(String(200))
    address_line2: Mapped[Optional[str]] = mapped_column(String(200))
    city: Mapped[Optional[str]] = mapped_column(String(120))
    postal_code: Mapped[Optional[str]] = mapped_column(String(32))
    country: Mapped[Optional[str]] = mapped_column(String(80))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)


class UserVerification(Base):
    __tablename__ = "user_verifications"

    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    status: Mapped[Optional[str]] = mapped_column(String(20), index=True)  # PENDING|APPROVED|REJECTED, null until first submit
    submitted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    reviewed_by: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"))
    review_notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)


class UserDocumentFile(Base):
    __tablename__ = "user_document_files"

    id: Mapped[uuid.UUID] = uuid_pk()
    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    doc_type: Mapped[str] = mapped_column(String(40), nullable=False)
    storage_path: Mapped[str] = mapped_column(Text, nullable=False)
    file_name: Mapped[Optional[str]] = mapped_column(String(255))
    mime_type: Mapped[Optional[str]] = mapped_column(String(120))
    size_bytes: Mapped[Optional[int]] = mapped_column(BigInteger)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "doc_type", name="uq_user_document_type"),
    )
