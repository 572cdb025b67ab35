import httpx
import structlog
from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from ..db import get_db
from ..config import settings
from ..errors import AppError
from ..i18n import get_request_language
from ..schemas.auth import LoginRequest, SignupRequest, SessionResponse, MeResponse
from ..services.auth_client import AuthClient, get_auth_client
from ..services.bootstrap import ensure_current_user_row, ensure_user_compliance_rows
from ..services.dashboard import user_summary
from .security import SessionUser, get_current_user, session_from_token


router = APIRouter(prefix="/auth", tags=["auth"])
logger = structlog.get_logger(__name__)


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        settings.session_cookie_name,
        token,
        httponly=True,
        samesite="lax",
        secure=settings.public_base_url.startswith("https"),
    )


@router.post("/login", response_model=SessionResponse)
def login(req: LoginRequest, response: Response, db: Session = Depends(get_db), auth: AuthClient = Depends(get_auth_client)):
    try:
        data = auth.sign_in_with_password(req.email, req.password)
    except httpx.HTTPStatusError as e:
        logger.warning("login_failed", status=e.response.status_code)
        raise AppError("invalid_login", status_code=401)
    token = (data or {}).get("access_token")
    if not token:
        raise AppError("invalid_login", status_code=401)
    session = session_from_token(token)

    # Base rows must exist before any screen reads them
    ensure_current_user_row(db, session.id, session.email or req.email, session.first_name, session.last_name)
    ensure_user_compliance_rows(db, session.id)

    _set_session_cookie(response, token)
    logger.info("login", user_id=str(session.id))
    return SessionResponse(access_token=token, user_id=str(session.id), email=session.email or req.email)


@router.post("/signup")
def signup(req: SignupRequest, auth: AuthClient = Depends(get_auth_client)):
    if req.password != req.confirm_password:
        raise AppError("passwords_dont_match")
    try:
        auth.sign_up(req.email, req.password, first_name=req.first_name, last_name=req.last_name)
    except httpx.HTTPStatusError as e:
        logger.warning("signup_failed", status=e.response.status_code)
        raise AppError("signup_failed", status_code=400)
    return {"ok": True}


@router.post("/logout")
def logout(request: Request, response: Response, auth: AuthClient = Depends(get_auth_client)):
    token = request.cookies.get(settings.session_cookie_name)
    auth_header = request.headers.get("authorization", "")
    if auth_header.lower().startswith("bearer "):
        token = auth_header[7:]
    if token:
        try:
            auth.sign_out(token)
        except httpx.HTTPError as e:
            # The local session is dropped regardless
            logger.warning("logout_remote_failed", error=str(e))
    response.delete_cookie(settings.session_cookie_name)
    return {"ok": True}


@router.get("/me", response_model=MeResponse)
def me(request: Request, user: SessionUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return user_summary(db, user.id, user.email, get_request_language(request))
