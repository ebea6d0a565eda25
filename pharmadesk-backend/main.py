# main.py
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

import config
from database import close_database, open_database
from dispatcher import router as dispatch_router
from responses import http_exception_handler, validation_exception_handler
from routes import router as resource_router

# -------------------------------------------------------------------
# 1. Logging
# -------------------------------------------------------------------

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# -------------------------------------------------------------------
# 2. Startup / Shutdown
# -------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Connect to database and create tables if they don't exist
    await open_database(app, config.DATABASE_URL, config.DATABASE_URL1)
    logger.info("PharmaDesk API started")
    yield
    await close_database(app)


# -------------------------------------------------------------------
# 3. FastAPI app instantiation, CORS middleware, error envelopes
# -------------------------------------------------------------------


def create_app() -> FastAPI:
    app = FastAPI(title="PharmaDesk API", lifespan=lifespan)

    # CORS: any origin, preflight cached for an hour
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=[
            "Content-Type",
            "Access-Control-Allow-Headers",
            "Authorization",
            "X-Requested-With",
        ],
        max_age=config.CORS_MAX_AGE,
    )

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    app.include_router(dispatch_router)
    app.include_router(resource_router)

    @app.get("/health")
    async def health_check():
        """
        Simple health check endpoint.
        """
        return {"status": "OK", "timestamp": datetime.now(timezone.utc)}

    return app


app = create_app()
