import uuid
from typing import Callable, Optional

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..config import settings
from ..db import get_db
from ..errors import AppError
from ..services import permissions


http_bearer = HTTPBearer(auto_error=False)


class SessionUser(BaseModel):
    id: uuid.UUID
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    access_token: str


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")


def extract_token(request: Request, creds: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    """Bearer header first (API/function calls), then the session cookie (pages)."""
    if creds is not None and creds.credentials:
        return creds.credentials
    return request.cookies.get(settings.session_cookie_name)


def session_from_token(token: str) -> SessionUser:
    payload = decode_token(token)
    try:
        user_uuid = uuid.UUID(str(payload.get("sub")))
    except (TypeError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid subject")
    meta = payload.get("user_metadata") or {}
    return SessionUser(
        id=user_uuid,
        email=payload.get("email"),
        first_name=meta.get("first_name"),
        last_name=meta.get("last_name"),
        access_token=token,
    )


def get_optional_session(
    request: Request,
    creds: Optional[HTTPAuthorizationCredentials] = Depends(http_bearer),
) -> Optional[SessionUser]:
    token = extract_token(request, creds)
    if not token:
        return None
    try:
        return session_from_token(token)
    except HTTPException:
        return None


def get_current_user(
    request: Request,
    creds: Optional[HTTPAuthorizationCredentials] = Depends(http_bearer),
) -> SessionUser:
    token = extract_token(request, creds)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return session_from_token(token)


def require_check(check: Callable[[uuid.UUID, Session], bool]):
    def _dep(user: SessionUser = Depends(get_current_user), db: Session = Depends(get_db)):
        if not check(user.id, db):
            raise AppError("not_authorized", status_code=403)
        return user

    return _dep


require_admin = require_check(permissions.is_admin_or_super_admin)
require_coordinator = require_check(permissions.is_coordenador_or_above)
require_super_admin = require_check(lambda user_id, db: permissions.is_user_role(user_id, "SUPER_ADMIN", db))
