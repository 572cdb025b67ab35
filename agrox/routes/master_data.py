import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..auth.security import require_admin
from ..errors import AppError
from ..models.models import Client, Location, Service
from ..schemas.master_data import (
    NameCreate,
    ClientResponse,
    LocationCreate,
    LocationResponse,
    ServiceResponse,
)

router = APIRouter(prefix="/master-data", tags=["master-data"])


def _name(value: str) -> str:
    name = (value or "").strip()
    if not name:
        raise AppError("name_required")
    return name


def _delete(db: Session, model, row_id: uuid.UUID) -> dict:
    row = db.query(model).filter(model.id == row_id).first()
    if not row:
        raise AppError("not_found", status_code=404)
    db.delete(row)
    db.commit()
    return {"ok": True}


def _location_out(loc: Location) -> dict:
    return {
        "id": loc.id,
        "client_id": loc.client_id,
        "client_name": loc.client.name if loc.client else None,
        "name": loc.name,
        "created_at": loc.created_at,
    }


# ---------- CLIENTS ----------

@router.get("/clients", response_model=List[ClientResponse])
def list_clients(db: Session = Depends(get_db), _=Depends(require_admin)):
    return db.query(Client).order_by(Client.name.asc()).all()


@router.post("/clients", response_model=ClientResponse, status_code=201)
def create_client(payload: NameCreate, db: Session = Depends(get_db), _=Depends(require_admin)):
    client = Client(name=_name(payload.name))
    db.add(client)
    db.commit()
    db.refresh(client)
    return client


@router.delete("/clients/{client_id}")
def delete_client(client_id: uuid.UUID, db: Session = Depends(get_db), _=Depends(require_admin)):
    return _delete(db, Client, client_id)


# ---------- LOCATIONS ----------

@router.get("/locations", response_model=List[LocationResponse])
def list_locations(db: Session = Depends(get_db), _=Depends(require_admin)):
    rows = db.query(Location).order_by(Location.name.asc()).all()
    return [_location_out(loc) for loc in rows]


@router.post("/locations", response_model=LocationResponse, status_code=201)
def create_location(payload: LocationCreate, db: Session = Depends(get_db), _=Depends(require_admin)):
    if not db.query(Client.id).filter(Client.id == payload.client_id).first():
        raise AppError("not_found", status_code=404)
    loc = Location(client_id=payload.client_id, name=_name(payload.name))
    db.add(loc)
    db.commit()
    db.refresh(loc)
    return _location_out(loc)


@router.delete("/locations/{location_id}")
def delete_location(location_id: uuid.UUID, db: Session = Depends(get_db), _=Depends(require_admin)):
    return _delete(db, Location, location_id)


# ---------- SERVICES ----------

@router.get("/services", response_model=List[ServiceResponse])
def list_services(db: Session = Depends(get_db), _=Depends(require_admin)):
    return db.query(Service).order_by(Service.name.asc()).all()


@router.post("/services", response_model=ServiceResponse, status_code=201)
def create_service(payload: NameCreate, db: Session = Depends(get_db), _=Depends(require_admin)):
    service = Service(name=_name(payload.name))
    db.add(service)
    db.commit()
    db.refresh(service)
    return service


@router.delete("/services/{service_id}")
def delete_service(service_id: uuid.UUID, db: Session = Depends(get_db), _=Depends(require_admin)):
    return _delete(db, Service, service_id)
