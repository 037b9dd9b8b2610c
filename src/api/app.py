import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.adapter.services.logging_password_reset_notifier import LoggingPasswordResetNotifier
from src.app.services.password_reset_notifier import PasswordResetNotifier
from src.app.services.security_config import SecurityConfig
from src.app.services.security_services import SecurityServices, SessionPurger
from src.depends import purge_expired_sessions
from .error import ClientError, ServerError
from .middleware import RequestDeadlineMiddleware, SecurityHeadersMiddleware

logger = logging.getLogger(__name__)


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = {"code": exc.base_error.code, "message": exc.base_error.message}
    if exc.base_error.details:
        error_dict["details"] = exc.base_error.details
    logger.warning(f"Client error: {exc.base_error.code} {request.url.path}")
    return JSONResponse(
        status_code=exc.status_code, content={"error": error_dict}, headers=exc.headers
    )


async def handle_server_error(request: Request, exc: ServerError):
    error_dict = {"code": exc.base_error.code, "message": "Internal server error"}
    logger.error(f"Server error: {exc.base_error.code} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": error_dict}
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    await app.state.security.start()
    try:
        yield
    finally:
        await app.state.security.stop()


def create_app(
    ApplicationConfig,
    reset_notifier: Optional[PasswordResetNotifier] = None,
    session_purger: Optional[SessionPurger] = None,
) -> FastAPI:
    logging.basicConfig(level=ApplicationConfig.LOG_LEVEL)

    app = FastAPI(title="Tutor Auth API", version="0.1.0", lifespan=lifespan)
    app.state.security = SecurityServices(
        SecurityConfig.from_application_config(ApplicationConfig),
        reset_notifier or LoggingPasswordResetNotifier(),
        session_purger=session_purger or (lambda: purge_expired_sessions(app.state.security)),
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        RequestDeadlineMiddleware, timeout_seconds=ApplicationConfig.REQUEST_TIMEOUT_SECONDS
    )
    # Outermost, so deadline 504s carry the headers too
    app.add_middleware(SecurityHeadersMiddleware)

    from src.api.routes import admin, auth, health_check

    app.include_router(health_check.router, tags=["Health"])
    app.include_router(auth.router, tags=["Authentication"])
    app.include_router(admin.router, tags=["Admin"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)

    return app
