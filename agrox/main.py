import os

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from .config import settings
from .db import Base, engine
from .errors import register_exception_handlers
from .logging import setup_logging, RequestIdMiddleware
from .auth.router import router as auth_router
from .routes.files import router as files_router
from .routes.activities import router as activities_router
from .routes.admin_activities import router as admin_activities_router
from .routes.machines import router as machines_router
from .routes.master_data import router as master_data_router
from .routes.documents import router as documents_router
from .routes.approvals import router as approvals_router
from .routes.functions import router as functions_router
from .routes.users import router as users_router
from .routes.ui import router as ui_router, register_guard_redirects


logger = structlog.get_logger(__name__)

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])


def create_app() -> FastAPI:
    setup_logging()
    app = FastAPI(title=settings.app_name)

    # Middlewares
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    register_exception_handlers(app)
    register_guard_redirects(app)

    # Routers
    app.include_router(auth_router)
    app.include_router(files_router)
    app.include_router(activities_router)
    app.include_router(admin_activities_router)
    app.include_router(machines_router)
    app.include_router(master_data_router)
    app.include_router(documents_router)
    app.include_router(approvals_router)
    app.include_router(functions_router)
    app.include_router(users_router)
    app.include_router(ui_router)

    # Metrics
    Instrumentator().instrument(app).expose(app)

    @app.on_event("startup")
    def _startup():
        # Ensure local SQLite directory exists
        if settings.database_url.startswith("sqlite:///./"):
            os.makedirs("var", exist_ok=True)
        if settings.auto_create_db:
            Base.metadata.create_all(bind=engine)
            logger.info("tables_ready", tables=len(Base.metadata.tables))
        logger.info("startup_complete", environment=settings.environment, storage=settings.storage_provider)

    return app


app = create_app()
