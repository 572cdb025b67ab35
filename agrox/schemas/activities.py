import uuid
from datetime import datetime
from typing import List, Optional
from enum import Enum

from pydantic import BaseModel


class ActivityStatus(str, Enum):
    pending_validation = "PENDING_VALIDATION"
    approved = "APPROVED"
    rejected = "REJECTED"


class PhotoPrefix(str, Enum):
    start = "start"
    end = "end"
    start_odometer = "start-odometer"
    end_odometer = "end-odometer"


class GpsPoint(BaseModel):
    lat: float
    lng: float


class ActivityStart(BaseModel):
    machine_id: Optional[uuid.UUID] = None
    start_odometer: Optional[float] = None
    start_gps: Optional[GpsPoint] = None
    client_id: Optional[uuid.UUID] = None
    location_id: Optional[uuid.UUID] = None
    service_id: Optional[uuid.UUID] = None
    # Paths returned by POST /activities/photos
    start_photo_path: Optional[str] = None
    start_odometer_photo_path: Optional[str] = None
    notes: Optional[str] = None


class ActivityClose(BaseModel):
    end_odometer: Optional[float] = None
    end_gps: Optional[GpsPoint] = None
    performance_rating: Optional[int] = None
    notes: Optional[str] = None
    area_value: Optional[float] = None
    area_unit: Optional[str] = "ha"
    area_notes: Optional[str] = None
    end_photo_path: Optional[str] = None
    end_odometer_photo_path: Optional[str] = None


class ActivityResponse(BaseModel):
    id: uuid.UUID
    operator_id: uuid.UUID
    machine_id: uuid.UUID
    client_id: Optional[uuid.UUID] = None
    location_id: Optional[uuid.UUID] = None
    service_id: Optional[uuid.UUID] = None
    start_time: datetime
    end_time: Optional[datetime] = None
    start_odometer: float
    end_odometer: Optional[float] = None
    start_gps: Optional[dict] = None
    end_gps: Optional[dict] = None
    start_photo_url: Optional[str] = None
    end_photo_url: Optional[str] = None
    start_odometer_photo_url: Optional[str] = None
    end_odometer_photo_url: Optional[str] = None
    notes: Optional[str] = None
    area_value: Optional[float] = None
    area_unit: Optional[str] = None
    area_notes: Optional[str] = None
    performance_rating: Optional[int] = None
    status: ActivityStatus
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class OpenActivityResponse(BaseModel):
    activity: ActivityResponse
    machine_label: str
    client_name: Optional[str] = None
    location_name: Optional[str] = None
    service_name: Optional[str] = None
    elapsed: str  # HH:MM:SS


class PhotoUploadResponse(BaseModel):
    path: str


class PhotoLinks(BaseModel):
    start_photo: Optional[str] = None
    end_photo: Optional[str] = None
    start_odometer_photo: Optional[str] = None
    end_odometer_photo: Optional[str] = None


class PendingActivityRow(BaseModel):
    activity: ActivityResponse
    machine_name: Optional[str] = None
    machine_model: Optional[str] = None
    operator_name: Optional[str] = None
    operator_email: Optional[str] = None
    client_name: Optional[str] = None
    location_name: Optional[str] = None
    service_name: Optional[str] = None


class ActivityReview(BaseModel):
    status: ActivityStatus


class NamedOption(BaseModel):
    id: uuid.UUID
    name: str

    class Config:
        from_attributes = True


class MachineOption(BaseModel):
    id: uuid.UUID
    name: str
    label: str


class ActivityFormOptions(BaseModel):
    machines: List[MachineOption]
    clients: List[NamedOption]
    services: List[NamedOption]
