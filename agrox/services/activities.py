"""
Activity lifecycle: start (open row), close (end fields), admin review (status flip).

An activity is "open" while status is PENDING_VALIDATION and end_time is null.
At most one open activity per operator is enforced here by query, not by a
transaction.
"""
import math
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

import structlog
from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..config import settings
from ..errors import AppError
from ..models.models import Activity, Client, Location, Machine, Service, User
from ..schemas.activities import ActivityStart, ActivityClose
from ..storage.provider import StorageProvider
from .photos import owns_photo_path


logger = structlog.get_logger(__name__)

PENDING = "PENDING_VALIDATION"
REVIEW_STATUSES = ("APPROVED", "REJECTED")


def machine_label(m: Machine) -> str:
    """'{internal_id} - {brand} {name} {model} ({plate})', skipping empty parts."""
    label = ""
    if m.internal_id:
        label += f"{m.internal_id} - "
    if m.brand:
        label += f"{m.brand} "
    label += m.name or ""
    if m.model:
        label += f" {m.model}"
    if m.plate:
        label += f" ({m.plate})"
    return label


def format_elapsed(seconds: float) -> str:
    total = max(0, int(seconds))
    h, rem = divmod(total, 3600)
    m, s = divmod(rem, 60)
    return f"{h:02d}:{m:02d}:{s:02d}"


def _now_like(value: datetime) -> datetime:
    # SQLite hands back naive datetimes, Postgres aware ones
    if value.tzinfo is not None:
        return datetime.now(timezone.utc)
    return datetime.utcnow()


def display_name(user: Optional[User]) -> Optional[str]:
    if user is None:
        return None
    full = f"{user.first_name or ''} {user.last_name or ''}".strip()
    return full or user.email


# ---------- FORM OPTIONS ----------

def list_machine_options(db: Session) -> List[Machine]:
    return (
        db.query(Machine)
        .filter(or_(Machine.status == "ACTIVE", Machine.status.is_(None)))
        .order_by(Machine.name.asc())
        .all()
    )


def list_clients(db: Session) -> List[Client]:
    return db.query(Client).order_by(Client.name.asc()).all()


def list_services(db: Session) -> List[Service]:
    return db.query(Service).order_by(Service.name.asc()).all()


def list_locations_for_client(db: Session, client_id: uuid.UUID) -> List[Location]:
    return db.query(Location).filter(Location.client_id == client_id).order_by(Location.name.asc()).all()


# ---------- OPERATOR FLOW ----------

def get_open_activity(db: Session, operator_id: uuid.UUID) -> Optional[Activity]:
    return (
        db.query(Activity)
        .filter(
            Activity.operator_id == operator_id,
            Activity.end_time.is_(None),
            Activity.status == PENDING,
        )
        .order_by(Activity.start_time.desc())
        .first()
    )


def _check_photo_paths(storage: StorageProvider, operator_id: uuid.UUID, paths) -> None:
    # Paths must be uploads in the operator's own folder that actually exist
    for path in paths:
        if path and not owns_photo_path(operator_id, path):
            raise AppError("not_authorized", status_code=403)
    for path in paths:
        if path and not storage.exists(settings.activity_photos_bucket, path):
            raise AppError("photo_required")


def start_activity(db: Session, storage: StorageProvider, operator_id: uuid.UUID, payload: ActivityStart) -> Activity:
    if payload.machine_id is None:
        raise AppError("machine_required")
    if payload.start_odometer is None or not math.isfinite(payload.start_odometer):
        raise AppError("odometer_required")
    if payload.start_gps is None:
        raise AppError("gps_required")
    if settings.require_activity_photos and not (payload.start_photo_path and payload.start_odometer_photo_path):
        raise AppError("photo_required")
    _check_photo_paths(storage, operator_id, (payload.start_photo_path, payload.start_odometer_photo_path))

    if db.query(Machine.id).filter(Machine.id == payload.machine_id).first() is None:
        raise AppError("not_found", status_code=404)
    if payload.location_id:
        loc = db.query(Location).filter(Location.id == payload.location_id).first()
        if loc is None or (payload.client_id and loc.client_id != payload.client_id):
            raise AppError("not_found", status_code=404)

    if get_open_activity(db, operator_id) is not None:
        raise AppError("activity_already_open", status_code=409)

    activity = Activity(
        operator_id=operator_id,
        machine_id=payload.machine_id,
        client_id=payload.client_id,
        location_id=payload.location_id,
        service_id=payload.service_id,
        start_time=datetime.utcnow(),
        start_odometer=float(payload.start_odometer),
        start_gps={"lat": payload.start_gps.lat, "lng": payload.start_gps.lng},
        start_photo_url=payload.start_photo_path,
        start_odometer_photo_url=payload.start_odometer_photo_path,
        notes=(payload.notes or "").strip() or None,
        status=PENDING,
    )
    db.add(activity)
    db.commit()
    db.refresh(activity)
    logger.info("activity_started", activity_id=str(activity.id), operator_id=str(operator_id))
    return activity


def close_activity(db: Session, storage: StorageProvider, operator_id: uuid.UUID, payload: ActivityClose) -> Activity:
    activity = get_open_activity(db, operator_id)
    if activity is None:
        raise AppError("no_open_activity", status_code=404)

    if payload.end_gps is None:
        raise AppError("gps_required")
    if payload.performance_rating is None:
        raise AppError("rating_required")
    if payload.performance_rating not in (1, 2, 3, 4, 5):
        raise AppError("invalid_rating")
    if payload.end_odometer is None or not math.isfinite(payload.end_odometer):
        raise AppError("odometer_required")
    _check_photo_paths(storage, operator_id, (payload.end_photo_path, payload.end_odometer_photo_path))

    area_value = payload.area_value
    if area_value is not None and not math.isfinite(area_value):
        area_value = None

    activity.end_time = datetime.utcnow()
    activity.end_odometer = float(payload.end_odometer)
    activity.end_gps = {"lat": payload.end_gps.lat, "lng": payload.end_gps.lng}
    if payload.notes is not None:
        activity.notes = payload.notes.strip() or None
    activity.performance_rating = payload.performance_rating
    activity.area_value = area_value
    activity.area_unit = (payload.area_unit or "").strip() or None
    activity.area_notes = (payload.area_notes or "").strip() or None
    if payload.end_photo_path:
        activity.end_photo_url = payload.end_photo_path
    if payload.end_odometer_photo_path:
        activity.end_odometer_photo_url = payload.end_odometer_photo_path
    # status stays PENDING_VALIDATION until an admin reviews it
    activity.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(activity)
    logger.info("activity_closed", activity_id=str(activity.id), operator_id=str(operator_id))
    return activity


def open_activity_details(db: Session, activity: Activity) -> Dict:
    machine = db.query(Machine).filter(Machine.id == activity.machine_id).first()
    client = db.query(Client).filter(Client.id == activity.client_id).first() if activity.client_id else None
    location = db.query(Location).filter(Location.id == activity.location_id).first() if activity.location_id else None
    service = db.query(Service).filter(Service.id == activity.service_id).first() if activity.service_id else None
    elapsed = (_now_like(activity.start_time) - activity.start_time).total_seconds()
    return {
        "activity": activity,
        "machine_label": machine_label(machine) if machine else "",
        "client_name": client.name if client else None,
        "location_name": location.name if location else None,
        "service_name": service.name if service else None,
        "elapsed": format_elapsed(elapsed),
    }


def list_my_activities(db: Session, operator_id: uuid.UUID, limit: int = 50) -> List[Activity]:
    return (
        db.query(Activity)
        .filter(Activity.operator_id == operator_id)
        .order_by(Activity.start_time.desc())
        .limit(limit)
        .all()
    )


# ---------- ADMIN REVIEW ----------

def _by_id(db: Session, model, ids) -> Dict:
    ids = {i for i in ids if i is not None}
    if not ids:
        return {}
    return {row.id: row for row in db.query(model).filter(model.id.in_(ids)).all()}


def list_pending_for_review(db: Session) -> List[Dict]:
    rows = (
        db.query(Activity)
        .filter(Activity.status == PENDING)
        .order_by(Activity.created_at.desc())
        .all()
    )
    machines = _by_id(db, Machine, (a.machine_id for a in rows))
    users = _by_id(db, User, (a.operator_id for a in rows))
    clients = _by_id(db, Client, (a.client_id for a in rows))
    locations = _by_id(db, Location, (a.location_id for a in rows))
    services = _by_id(db, Service, (a.service_id for a in rows))

    out = []
    for a in rows:
        m = machines.get(a.machine_id)
        u = users.get(a.operator_id)
        c = clients.get(a.client_id)
        loc = locations.get(a.location_id)
        s = services.get(a.service_id)
        out.append({
            "activity": a,
            "machine_name": m.name if m else None,
            "machine_model": m.model if m else None,
            "operator_name": display_name(u),
            "operator_email": u.email if u else None,
            "client_name": c.name if c else None,
            "location_name": loc.name if loc else None,
            "service_name": s.name if s else None,
        })
    return out


def review_activity(db: Session, activity_id: uuid.UUID, status: str, reviewer_id: uuid.UUID) -> Activity:
    if status not in REVIEW_STATUSES:
        raise AppError("invalid_status")
    activity = db.query(Activity).filter(Activity.id == activity_id).first()
    if activity is None:
        raise AppError("not_found", status_code=404)
    # Last write wins
    activity.status = status
    activity.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(activity)
    logger.info("activity_reviewed", activity_id=str(activity_id), status=status, reviewer_id=str(reviewer_id))
    return activity


def photo_links(storage: StorageProvider, activity: Activity) -> Dict[str, Optional[str]]:
    bucket = settings.activity_photos_bucket
    ttl = settings.signed_url_ttl_seconds
    paths = {
        "start_photo": activity.start_photo_url,
        "end_photo": activity.end_photo_url,
        "start_odometer_photo": activity.start_odometer_photo_url,
        "end_odometer_photo": activity.end_odometer_photo_url,
    }
    return {k: (storage.create_signed_url(bucket, p, ttl) if p else None) for k, p in paths.items()}
