import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from config import Settings
from errors import AppError, UpstreamError

logger = logging.getLogger(__name__)


def error_body(exc: AppError) -> dict:
    return {"status": "error", "message": exc.message, "details": exc.details}


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time

        line = "%s %s -> %s (%.4fs)"
        args = (request.method, request.url.path, response.status_code, process_time)
        if response.status_code >= 500:
            logger.error(line, *args)
        elif response.status_code >= 400:
            logger.warning(line, *args)
        else:
            logger.info(line, *args)
        return response

    # CORS pro frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def setup_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        else:
            logger.warning("%s %s rejected (%s): %s", request.method, request.url.path, exc.status_code, exc.message)
        return JSONResponse(status_code=exc.status_code, content=error_body(exc))

    @app.exception_handler(SQLAlchemyError)
    async def store_error_handler(request: Request, exc: SQLAlchemyError):
        logger.exception("Database error on %s %s", request.method, request.url.path)
        error = UpstreamError("Database unavailable", details={"error": exc.__class__.__name__})
        return JSONResponse(status_code=error.status_code, content=error_body(error))
