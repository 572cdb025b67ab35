from typing import List, Optional

from pydantic import BaseModel, EmailStr


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class SignupRequest(BaseModel):
    email: EmailStr
    password: str
    confirm_password: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class SessionResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: Optional[str] = None


class DashboardTile(BaseModel):
    key: str
    title: str
    path: str


class MeResponse(BaseModel):
    user_id: str
    name: str
    email: Optional[str] = None
    is_admin: bool = False
    is_super_admin: bool = False
    is_coordinator: bool = False
    tiles: List[DashboardTile] = []
