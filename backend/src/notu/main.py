# Main application entry point
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from . import __version__
from .api import auth_router, health_router, notes_router, users_router
from .config import get_settings
from .core.logging import LoggingMiddleware, get_logger, setup_logging
from .core.redis_client import get_redis_client
from .database import create_tables

# Setup logging first
setup_logging()
logger = get_logger("main")

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info(
        "Starting Notu application",
        extra={
            "version": __version__,
            "environment": settings.environment,
            "debug": settings.debug,
            "storage_backend": settings.storage_backend,
        },
    )

    # Redis only backs the logout blacklist, so the app starts without it
    redis_client = get_redis_client()
    try:
        await redis_client.connect()
        logger.info("Redis connection established")
    except Exception as e:
        logger.warning(f"Redis connection failed: {e}. Continuing without Redis...")

    # Tests create their own schema on SQLite
    if os.getenv("NOTU_SKIP_LIFESPAN_DB") == "1":
        logger.info("Skipping DB table creation due to NOTU_SKIP_LIFESPAN_DB=1")
    else:
        try:
            await create_tables()
            logger.info("Database tables created/verified")
        except Exception as e:
            logger.error("Failed to create database tables", exc_info=e)
            raise

    yield

    logger.info("Shutting down Notu application")
    try:
        await redis_client.disconnect()
        logger.info("Redis connection closed")
    except Exception as e:
        logger.warning(f"Redis disconnect failed: {e}")


app = FastAPI(
    title=settings.app_name,
    description="Notes with friends, likes and image attachments",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(LoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router, prefix="/api")
app.include_router(users_router, prefix="/api")
app.include_router(notes_router, prefix="/api")
app.include_router(health_router, prefix="/api")

# Images written by the local storage backend
if settings.storage_backend == "local":
    app.mount(
        "/uploads",
        StaticFiles(directory=settings.upload_dir, check_dir=False),
        name="uploads",
    )


@app.get("/")
async def root():
    return {"message": "Notu API", "version": __version__}


@app.get("/api/")
async def api_root():
    return {
        "message": "Notu API",
        "version": __version__,
        "documentation": {
            "swagger_ui": "/docs",
            "redoc": "/redoc",
            "openapi_json": "/openapi.json",
        },
        "endpoints": {
            "authentication": "/api/auth/",
            "users": "/api/auth/users/",
            "friends": "/api/auth/friends",
            "notes": "/api/notes/",
            "health": "/api/health/",
        },
    }


# Plain liveness probe
@app.get("/health")
async def basic_health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("notu.main:app", host=settings.host, port=settings.port, reload=settings.reload)
