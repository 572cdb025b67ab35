import uuid
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..db import get_db
from ..auth.security import require_admin
from ..errors import AppError
from ..models.models import Machine
from ..schemas.machines import MachineCreate, MachineUpdate, MachineResponse, MachineStatus

router = APIRouter(prefix="/machines", tags=["machines"])

OPTIONAL_TEXT = ("internal_id", "brand", "model", "plate", "serial_number")


def _clean(data: dict) -> dict:
    """Trim text fields; optional ones become None when blank."""
    for key in OPTIONAL_TEXT:
        if key in data:
            data[key] = (data[key] or "").strip() or None
    if "name" in data:
        data["name"] = (data["name"] or "").strip()
        if not data["name"]:
            raise AppError("name_required")
    if isinstance(data.get("status"), MachineStatus):
        data["status"] = data["status"].value
    return data


@router.get("", response_model=List[MachineResponse])
def list_machines(
    status: Optional[MachineStatus] = Query(None),
    search: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    _=Depends(require_admin)
):
    """List machines, newest first"""
    query = db.query(Machine)
    if status:
        query = query.filter(Machine.status == status.value)
    if search:
        search_term = f"%{search}%"
        query = query.filter(
            or_(
                Machine.name.ilike(search_term),
                Machine.internal_id.ilike(search_term),
                Machine.plate.ilike(search_term),
            )
        )
    return query.order_by(Machine.created_at.desc()).all()


@router.get("/{machine_id}", response_model=MachineResponse)
def get_machine(machine_id: uuid.UUID, db: Session = Depends(get_db), _=Depends(require_admin)):
    machine = db.query(Machine).filter(Machine.id == machine_id).first()
    if not machine:
        raise AppError("not_found", status_code=404)
    return machine


@router.post("", response_model=MachineResponse, status_code=201)
def create_machine(machine: MachineCreate, db: Session = Depends(get_db), _=Depends(require_admin)):
    """Create a machine"""
    new_machine = Machine(**_clean(machine.dict()))
    db.add(new_machine)
    db.commit()
    db.refresh(new_machine)
    return new_machine


@router.put("/{machine_id}", response_model=MachineResponse)
def update_machine(
    machine_id: uuid.UUID,
    machine_update: MachineUpdate,
    db: Session = Depends(get_db),
    _=Depends(require_admin)
):
    """Update a machine"""
    machine = db.query(Machine).filter(Machine.id == machine_id).first()
    if not machine:
        raise AppError("not_found", status_code=404)

    update_data = _clean(machine_update.dict(exclude_unset=True))
    for key, value in update_data.items():
        setattr(machine, key, value)
    machine.updated_at = datetime.utcnow()

    db.commit()
    db.refresh(machine)
    return machine


@router.delete("/{machine_id}")
def delete_machine(machine_id: uuid.UUID, db: Session = Depends(get_db), _=Depends(require_admin)):
    """Delete a machine (hard delete)"""
    machine = db.query(Machine).filter(Machine.id == machine_id).first()
    if not machine:
        raise AppError("not_found", status_code=404)
    db.delete(machine)
    db.commit()
    return {"ok": True}
