import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session

from ..db import get_db
from ..auth.security import SessionUser, get_current_user
from ..errors import AppError
from ..models.models import Activity
from ..schemas.activities import (
    ActivityStart,
    ActivityClose,
    ActivityResponse,
    ActivityFormOptions,
    NamedOption,
    OpenActivityResponse,
    PhotoLinks,
    PhotoPrefix,
    PhotoUploadResponse,
)
from ..services import activities as svc
from ..services.permissions import is_activity_owner, is_admin_or_super_admin
from ..services.photos import upload_activity_photo
from ..storage.provider import StorageProvider
from .files import get_storage


router = APIRouter(prefix="/activities", tags=["activities"])


# ---------- FORM OPTIONS ----------

@router.get("/options", response_model=ActivityFormOptions)
def form_options(db: Session = Depends(get_db), user: SessionUser = Depends(get_current_user)):
    """Machines (active or unset status), clients and services for the start form."""
    return {
        "machines": [{"id": m.id, "name": m.name, "label": svc.machine_label(m)} for m in svc.list_machine_options(db)],
        "clients": svc.list_clients(db),
        "services": svc.list_services(db),
    }


@router.get("/locations", response_model=List[NamedOption])
def client_locations(
    client_id: uuid.UUID = Query(...),
    db: Session = Depends(get_db),
    user: SessionUser = Depends(get_current_user),
):
    return svc.list_locations_for_client(db, client_id)


# ---------- OPERATOR FLOW ----------

@router.post("/photos", response_model=PhotoUploadResponse, status_code=201)
async def upload_photo(
    prefix: PhotoPrefix = Form(...),
    file: UploadFile = File(...),
    user: SessionUser = Depends(get_current_user),
    storage: StorageProvider = Depends(get_storage),
):
    """Stores one selfie/odometer photo and returns its path for start/close."""
    data = await file.read()
    path = upload_activity_photo(storage, user.id, prefix.value, data, file.content_type)
    return {"path": path}


@router.post("/start", response_model=ActivityResponse, status_code=201)
def start(
    payload: ActivityStart,
    db: Session = Depends(get_db),
    user: SessionUser = Depends(get_current_user),
    storage: StorageProvider = Depends(get_storage),
):
    return svc.start_activity(db, storage, user.id, payload)


@router.get("/open", response_model=Optional[OpenActivityResponse])
def open_activity(db: Session = Depends(get_db), user: SessionUser = Depends(get_current_user)):
    """The caller's activity in progress, or null."""
    activity = svc.get_open_activity(db, user.id)
    if activity is None:
        return None
    return svc.open_activity_details(db, activity)


@router.post("/close", response_model=ActivityResponse)
def close(
    payload: ActivityClose,
    db: Session = Depends(get_db),
    user: SessionUser = Depends(get_current_user),
    storage: StorageProvider = Depends(get_storage),
):
    return svc.close_activity(db, storage, user.id, payload)


@router.get("/mine", response_model=List[ActivityResponse])
def my_activities(
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    user: SessionUser = Depends(get_current_user),
):
    return svc.list_my_activities(db, user.id, limit=limit)


@router.get("/{activity_id}/photos", response_model=PhotoLinks)
def activity_photos(
    activity_id: uuid.UUID,
    db: Session = Depends(get_db),
    user: SessionUser = Depends(get_current_user),
    storage: StorageProvider = Depends(get_storage),
):
    """Short-lived links to the four photos, for the owner or an admin."""
    activity = db.query(Activity).filter(Activity.id == activity_id).first()
    if activity is None:
        raise AppError("not_found", status_code=404)
    if not is_activity_owner(activity.id, user.id, db) and not is_admin_or_super_admin(user.id, db):
        raise AppError("not_authorized", status_code=403)
    return svc.photo_links(storage, activity)
