import uuid
from datetime import datetime
from typing import List, Optional
from enum import Enum

from pydantic import BaseModel


class AppRole(str, Enum):
    super_admin = "SUPER_ADMIN"
    admin = "ADMIN"
    coordenador = "COORDENADOR"
    operador = "OPERADOR"


class RoleAssignment(BaseModel):
    email: str
    role: AppRole = AppRole.operador


class RoleRemoval(BaseModel):
    email: str


class RoleAuditRow(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    role: AppRole
    target_email: Optional[str] = None
    actor_id: Optional[uuid.UUID] = None
    actor_email: Optional[str] = None
    created_at: Optional[datetime] = None


class NamedCount(BaseModel):
    name: str
    value: int


class DailyCount(BaseModel):
    date: str
    count: int


class SuperAdminStats(BaseModel):
    total_users: int
    total_machines: int
    total_activities: int
    pending_activities: int
    approved_activities: int
    rejected_activities: int
    activity_by_status: List[NamedCount]
    top_machines: List[NamedCount]
    last_7_days: List[DailyCount]
    role_distribution: List[NamedCount]
