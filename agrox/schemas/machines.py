import uuid
from datetime import datetime
from typing import Optional
from enum import Enum

from pydantic import BaseModel


class MachineStatus(str, Enum):
    active = "ACTIVE"
    maintenance = "MAINTENANCE"
    inactive = "INACTIVE"


class MachineBase(BaseModel):
    internal_id: Optional[str] = None
    brand: Optional[str] = None
    name: str
    model: Optional[str] = None
    plate: Optional[str] = None
    serial_number: Optional[str] = None
    status: MachineStatus = MachineStatus.active


class MachineCreate(MachineBase):
    pass


class MachineUpdate(BaseModel):
    internal_id: Optional[str] = None
    brand: Optional[str] = None
    name: Optional[str] = None
    model: Optional[str] = None
    plate: Optional[str] = None
    serial_number: Optional[str] = None
    status: Optional[MachineStatus] = None


class MachineResponse(MachineBase):
    id: uuid.UUID
    status: Optional[MachineStatus] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
