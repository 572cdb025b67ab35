import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class NameCreate(BaseModel):
    name: str


class ClientResponse(BaseModel):
    id: uuid.UUID
    name: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class LocationCreate(BaseModel):
    client_id: uuid.UUID
    name: str


class LocationResponse(BaseModel):
    id: uuid.UUID
    client_id: uuid.UUID
    client_name: Optional[str] = None
    name: str
    created_at: Optional[datetime] = None


class ServiceResponse(BaseModel):
    id: uuid.UUID
    name: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
