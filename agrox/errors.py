"""
Application errors and their mapping onto safe, localized messages.

Services raise ``AppError`` with a short machine code. Whatever reaches the
user goes through ``public_error_message`` so table, column and function
names never leak; anything unrecognised becomes the generic message.
"""
from typing import Any, Optional

import httpx
import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from .i18n import translate, get_request_language


logger = structlog.get_logger(__name__)


class AppError(Exception):
    def __init__(self, code: str, status_code: int = 400, message: Optional[str] = None):
        super().__init__(message or code)
        self.code = code
        self.status_code = status_code


class StorageError(Exception):
    """Object storage rejected an upload/delete/sign request."""


# Business codes that map onto their own translated message
CODE_MESSAGES = {
    "machine_required": "machineRequired",
    "odometer_required": "odometerRequired",
    "gps_required": "locationRequired",
    "photo_required": "photoRequired",
    "rating_required": "ratingRequired",
    "invalid_rating": "ratingRequired",
    "activity_already_open": "activityAlreadyOpen",
    "no_open_activity": "noOpenActivity",
    "image_too_large": "imageTooLarge",
    "invalid_image_type": "invalidImageType",
    "empty_image": "emptyImage",
    "file_too_large": "fileTooLarge",
    "file_type_not_allowed": "fileTypeNotAllowed",
    "rejection_notes_required": "rejectionNotesRequired",
    "name_required": "nameRequired",
    "passwords_dont_match": "passwordsDontMatch",
    "not_found": "notFound",
}


def public_error_message(err: Any, lang: Optional[str] = None) -> str:
    generic = translate("genericError", lang)
    if not err:
        return generic

    msg = str(getattr(err, "message", None) or err)
    code = str(getattr(err, "code", None) or getattr(getattr(err, "orig", None), "pgcode", None) or "")
    lower = f"{msg} {code}".lower()

    if "not_authorized" in lower or code == "42501":
        return translate("notAuthorized", lang)
    if "invalid_email" in lower:
        return translate("invalidEmail", lang)
    if "cannot_change_self" in lower:
        return translate("cannotChangeSelf", lang)
    # user_not_found, auth/jwt and signed url problems stay generic
    if isinstance(err, AppError) and err.code in CODE_MESSAGES:
        return translate(CODE_MESSAGES[err.code], lang)
    return generic


def _error_response(request: Request, err: Any, status_code: int, code: str) -> JSONResponse:
    lang = get_request_language(request)
    return JSONResponse(
        status_code=status_code,
        content={"detail": public_error_message(err, lang), "code": code},
    )


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def _app_error(request: Request, exc: AppError):
        logger.warning("app_error", code=exc.code, status=exc.status_code)
        return _error_response(request, exc, exc.status_code, exc.code)

    @app.exception_handler(SQLAlchemyError)
    async def _db_error(request: Request, exc: SQLAlchemyError):
        logger.error("database_error", error=str(exc), exc_info=True)
        return _error_response(request, exc, 500, "unexpected_error")

    @app.exception_handler(StorageError)
    async def _storage_error(request: Request, exc: StorageError):
        logger.error("storage_error", error=str(exc))
        return _error_response(request, exc, 502, "storage_error")

    @app.exception_handler(httpx.HTTPError)
    async def _remote_error(request: Request, exc: httpx.HTTPError):
        logger.error("remote_call_failed", error=str(exc))
        return _error_response(request, exc, 502, "remote_error")
