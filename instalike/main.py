from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from instalike.core.config import Settings, get_settings
from instalike.core.exceptions import AppError, AuthError, InvalidTokenError
from instalike.core.security import CredentialService
from instalike.core.storage import ImageStorage
from instalike.db.init_db import create_all_tables
from instalike.db.session import create_db_engine, create_session_factory
from instalike.middleware.request_logging import RequestLoggingMiddleware
from instalike.middleware.auth_logging import AuthLoggingMiddleware
from instalike.modules.auth.api.router import router as auth_router
from instalike.modules.user_management.api.router import router as user_router
from instalike.modules.follows.api.router import router as follows_router
from instalike.modules.posts.api.router import router as posts_router
from instalike.modules.posts.comments.api.router import router as comments_router
from instalike.modules.posts.likes.api.router import router as likes_router

logger = logging.getLogger("instalike")


def _format_validation_error(exc: RequestValidationError) -> str:
    """Turn the first pydantic error into a single readable sentence"""
    errors = exc.errors()
    if not errors:
        return "Invalid request"

    error = errors[0]
    message = str(error.get("msg", "Invalid value"))
    # Messages raised from field validators arrive as "Value error, <text>"
    if message.startswith("Value error, "):
        return message[len("Value error, "):]

    loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
    if loc:
        return f"{'.'.join(loc)}: {message}"
    return message


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    headers = None
    if isinstance(exc, AuthError) and not isinstance(exc, InvalidTokenError):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=headers)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": _format_validation_error(exc)},
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception(f"Unhandled database error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Database error"},
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application and everything it holds on app.state"""
    settings = settings or get_settings()

    # Configure logging
    logging.basicConfig(
        level=logging.DEBUG if settings.DEBUG else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    engine = create_db_engine(settings.DATABASE_URL)
    create_all_tables(engine)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting {settings.PROJECT_NAME} in {settings.ENVIRONMENT} mode")
        yield
        engine.dispose()
        logger.info("Database connections closed")

    app = FastAPI(
        title=settings.PROJECT_NAME,
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
        debug=settings.DEBUG,
        description="Photo sharing API with posts, likes, comments and follows",
        version=settings.VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.engine = engine
    app.state.SessionLocal = create_session_factory(engine)
    app.state.credentials = CredentialService.from_settings(settings)
    app.state.image_storage = ImageStorage.from_settings(settings)

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)

    # Add middleware
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(AuthLoggingMiddleware)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register API routers
    prefix = settings.API_PREFIX
    app.include_router(auth_router, prefix=prefix, tags=["authentication"])
    app.include_router(user_router, prefix=f"{prefix}/users", tags=["users"])
    app.include_router(follows_router, prefix=f"{prefix}/users", tags=["follows"])
    app.include_router(posts_router, prefix=f"{prefix}/posts", tags=["posts"])
    app.include_router(comments_router, prefix=f"{prefix}/posts/{{post_id}}/comments", tags=["comments"])
    app.include_router(likes_router, prefix=f"{prefix}/posts/{{post_id}}/like", tags=["likes"])

    # Uploaded images are served as plain static files
    app.mount(
        settings.UPLOAD_URL_PREFIX,
        StaticFiles(directory=str(app.state.image_storage.directory)),
        name="uploads",
    )

    @app.get("/")
    async def root():
        return {
            "message": f"Welcome to {settings.PROJECT_NAME}",
            "version": settings.VERSION,
            "environment": settings.ENVIRONMENT,
            "documentation": "/docs" if settings.DEBUG else None,
        }

    return app
