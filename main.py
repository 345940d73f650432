#!/usr/bin/env python3

"""
Main application entry point for the to-do list API.

Architecture: FastAPI application over an async PostgreSQL database with JWT
bearer authentication.
Key Features: Lifecycle management, database health checks, error handling, CORS configuration.
"""

import asyncio
import sys

if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

import errno
from contextlib import asynccontextmanager
from datetime import UTC, datetime

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from todo_app.api.auth import router as auth_router
from todo_app.api.comments import router as comments_router
from todo_app.api.tags import router as tags_router
from todo_app.api.todo_lists import router as todo_lists_router
from todo_app.api.todo_tasks import router as todo_tasks_router
from todo_app.config import settings
from todo_app.db import check_db_connection, close_db, init_db
from todo_app.exceptions import (
    EntityNotFoundError,
    InvalidRequestError,
    PermissionDeniedError,
    TokenValidationError,
    UnableToCreateError,
    UnableToDeleteError,
    UnableToUpdateError,
)
from todo_app.schemas import ErrorResponse
from todo_app.utils.auth import TOKEN_EXPIRED
from todo_app.utils.logger import setup_logger

logger = setup_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application startup...")
    try:
        if settings.init_db_on_startup:
            logger.info("Initializing database...")
            await init_db()
            logger.info("Database initialization complete.")

        logger.info("Checking database connectivity...")
        if await check_db_connection():
            logger.info("Database connectivity confirmed.")
        else:
            logger.critical("Database connectivity check failed.")
            raise SystemExit("Database connection failed.")

    except Exception as e:
        logger.critical(f"Startup error: {e}")
        raise SystemExit(f"Startup failed: {e}") from e

    logger.info("To-do list API startup successful.")

    yield

    logger.info("To-do list API shutdown...")
    await close_db()
    logger.info("Shutdown complete.")


def token_error_response(exc: TokenValidationError) -> JSONResponse:
    """401 body ``{error, message, timestamp}``; ``Token-Expired`` only for expiry."""
    body = ErrorResponse(
        error=exc.code, message=exc.message, timestamp=datetime.now(UTC)
    )
    headers = {"WWW-Authenticate": "Bearer"}
    if exc.code == TOKEN_EXPIRED:
        headers["Token-Expired"] = "true"
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content=body.model_dump(mode="json"),
        headers=headers,
    )


def create_app():
    app = FastAPI(title="Todo List API", lifespan=lifespan)

    @app.exception_handler(TokenValidationError)
    async def token_validation_exception_handler(
        request: Request, exc: TokenValidationError
    ):
        logger.warning(
            f"Rejected bearer token on {request.method} {request.url.path}: {exc.code}"
        )
        return token_error_response(exc)

    @app.exception_handler(EntityNotFoundError)
    async def not_found_exception_handler(request: Request, exc: EntityNotFoundError):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)}
        )

    @app.exception_handler(PermissionDeniedError)
    async def permission_denied_exception_handler(
        request: Request, exc: PermissionDeniedError
    ):
        return JSONResponse(
            status_code=status.HTTP_403_FORBIDDEN, content={"detail": str(exc)}
        )

    @app.exception_handler(InvalidRequestError)
    async def invalid_request_exception_handler(
        request: Request, exc: InvalidRequestError
    ):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)}
        )

    async def persistence_exception_handler(request: Request, exc: Exception):
        logger.error(f"{exc} ({request.method} {request.url.path})", exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": str(exc)},
        )

    for exc_class in (UnableToCreateError, UnableToUpdateError, UnableToDeleteError):
        app.add_exception_handler(exc_class, persistence_exception_handler)

    @app.exception_handler(OSError)
    async def oserror_exception_handler(request: Request, exc: OSError):
        logger.error(
            f"OSError caught: {exc}, errno: {exc.errno}, winerror: {getattr(exc, 'winerror', None)}"
        )
        is_timeout_or_refused = False
        if hasattr(exc, "winerror") and exc.winerror == 121:
            is_timeout_or_refused = True
        elif exc.errno in [errno.ETIMEDOUT, errno.ECONNREFUSED]:
            is_timeout_or_refused = True

        if is_timeout_or_refused:
            logger.error(
                f"Returning 503 due to DB connection issue: {settings.db_unavailable_hint}"
            )
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"detail": settings.db_unavailable_hint},
            )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": f"An unexpected OS error occurred: {exc}"},
        )

    app.include_router(auth_router)
    app.include_router(todo_lists_router)
    app.include_router(todo_tasks_router)
    app.include_router(tags_router)
    app.include_router(comments_router)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        expose_headers=["Token-Expired"],
    )

    return app


app = create_app()


def main():
    port = int(settings.server_port)
    host = settings.server_host

    logger.info(f"Starting to-do list API server on {host}:{port}")

    try:
        uvicorn.run(app, host=host, port=port, workers=settings.server_workers)
    except Exception as e:
        logger.error(f"Error starting server: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
