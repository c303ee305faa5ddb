import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import get_cors_allowed_origins, get_port
from core.api import http_exception_handler, request_validation_exception_handler
from core.constants import INTERNAL_ERROR_MESSAGE
from core.http.session import cleanup_session
from db import db_manager
from mongodb_logging_handler import MongoDBHandler
from trips import router as trips_router

# Basic logging configuration
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

DEV_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:8080",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:8080",
]


def _attach_mongo_handler() -> MongoDBHandler:
    handler = MongoDBHandler(logging.INFO)
    logging.getLogger().addHandler(handler)
    return handler


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize the database on startup and release clients on shutdown."""
    mongo_handler = None
    try:
        await db_manager.init_beanie()
        mongo_handler = _attach_mongo_handler()
        logger.info("MongoDB logging handler initialized and configured.")
        logger.info("Application startup completed successfully.")
    except Exception as e:
        logger.critical(
            "CRITICAL: Failed to initialize application during startup: %s",
            str(e),
            exc_info=True,
        )
        raise

    yield

    if mongo_handler is not None:
        logging.getLogger().removeHandler(mongo_handler)
    await cleanup_session()
    await db_manager.cleanup_connections()
    logger.info("Application shutdown completed successfully")


async def not_found_handler(request: Request, exc: StarletteHTTPException):
    """Handle 404 Not Found errors."""
    logger.warning("404 Not Found: %s. Detail: %s", request.url, exc.detail)
    return await http_exception_handler(request, exc)


async def internal_error_handler(request: Request, exc: Exception):
    """Handle errors that escaped every route handler."""
    error_id = str(uuid.uuid4())
    logger.error(
        "Internal Server Error (ID: %s): Request %s %s failed. Exception: %s",
        error_id,
        request.method,
        request.url,
        str(exc),
        exc_info=True,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error": INTERNAL_ERROR_MESSAGE,
            "error_id": error_id,
        },
    )


async def health_check():
    """Liveness check that also reports whether MongoDB answers."""
    return {"status": "ok", "database": await db_manager.ping()}


def create_app() -> FastAPI:
    app = FastAPI(title="State Miles", lifespan=lifespan)

    origins = get_cors_allowed_origins()
    if origins:
        logger.info("CORS configured with specific origins: %s", origins)
    else:
        origins = DEV_CORS_ORIGINS
        logger.warning(
            "CORS_ALLOWED_ORIGINS not set. Using development defaults: %s",
            origins,
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    app.include_router(trips_router)
    app.add_api_route("/api/health", health_check, methods=["GET"], tags=["health"])

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(
        RequestValidationError,
        request_validation_exception_handler,
    )
    app.add_exception_handler(404, not_found_handler)
    app.add_exception_handler(500, internal_error_handler)
    return app


app = create_app()


# --- Main Execution Block ---
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app:app",
        host="0.0.0.0",
        port=get_port(),
        log_level="info",
    )
