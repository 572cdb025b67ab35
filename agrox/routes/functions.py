"""
Bearer-authenticated function endpoints with their own {"error": code} contracts:
compliance-upsert, compliance-migrate and superadmin-assign.
"""
import json
from typing import Optional

import httpx
import structlog
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..config import settings
from ..db import get_db
from ..auth.security import SessionUser, session_from_token
from ..services import compliance
from ..services.auth_client import AuthClient, get_auth_client
from ..services.permissions import is_user_role
from ..services.roles import NOT_FOUND_HINT, assign_super_admins
from ..errors import AppError


router = APIRouter(prefix="/functions/v1", tags=["functions"])
logger = structlog.get_logger(__name__)


def _bearer_session(request: Request) -> Optional[SessionUser]:
    header = request.headers.get("authorization", "")
    token = header[7:].strip() if header.lower().startswith("bearer ") else None
    if not token:
        # same-origin pages carry the session cookie instead of a header
        token = request.cookies.get(settings.session_cookie_name)
    if not token:
        return None
    try:
        return session_from_token(token)
    except HTTPException:
        return None


async def _json_body(request: Request):
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None


@router.post("/compliance-upsert")
async def compliance_upsert(request: Request, db: Session = Depends(get_db)):
    """Encrypts NIF/NISS/IBAN for the caller and answers with last-4 values only."""
    user = _bearer_session(request)
    if user is None:
        return JSONResponse({"error": "not_authenticated"}, status_code=401)
    body = await _json_body(request)
    if not isinstance(body, dict):
        body = {}
    try:
        masked = compliance.upsert_compliance(db, user.id, body)
    except Exception as e:
        db.rollback()
        logger.error("compliance_upsert_failed", user_id=str(user.id), error=type(e).__name__)
        return JSONResponse({"error": "unexpected_error"}, status_code=500)
    return {"ok": True, "masked": masked}


@router.post("/compliance-migrate")
def compliance_migrate(request: Request, db: Session = Depends(get_db)):
    user = _bearer_session(request)
    if user is None:
        return JSONResponse({"error": "not_authenticated"}, status_code=401)
    if not is_user_role(user.id, "SUPER_ADMIN", db):
        return JSONResponse({"error": "not_authorized"}, status_code=403)
    try:
        result = compliance.migrate_plaintext(db)
    except Exception as e:
        db.rollback()
        logger.error("compliance_migrate_failed", error=type(e).__name__)
        return JSONResponse({"error": "unexpected_error"}, status_code=500)
    return {"ok": True, **result}


@router.api_route("/superadmin-assign", methods=["GET", "PUT", "PATCH", "DELETE"], include_in_schema=False)
def superadmin_assign_wrong_method():
    return JSONResponse({"error": "method_not_allowed"}, status_code=405)


@router.post("/superadmin-assign")
async def superadmin_assign(
    request: Request,
    db: Session = Depends(get_db),
    auth: AuthClient = Depends(get_auth_client),
):
    """Makes every listed (existing) account a SUPER_ADMIN, replacing its role."""
    user = _bearer_session(request)
    if user is None:
        return JSONResponse({"error": "unauthorized"}, status_code=401)
    if not is_user_role(user.id, "SUPER_ADMIN", db):
        return JSONResponse({"error": "not_authorized"}, status_code=403)

    body = await _json_body(request)
    if body is None:
        return JSONResponse({"error": "invalid_json"}, status_code=400)
    emails = body.get("emails") if isinstance(body, dict) else None
    if not isinstance(emails, list):
        emails = []

    try:
        result = assign_super_admins(db, auth, user.id, emails)
    except AppError as e:
        return JSONResponse({"error": e.code}, status_code=e.status_code)
    except (httpx.HTTPError, ValueError) as e:
        logger.error("list_users_failed", error=str(e))
        return JSONResponse({"error": "list_users_failed"}, status_code=500)

    if "notFound" in result:
        return JSONResponse(
            {"error": "user_not_found", "notFound": result["notFound"], "hint": NOT_FOUND_HINT},
            status_code=404,
        )
    return result
