import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from shortlink_app.config import settings
from shortlink_app.logging_config import setup_logging
from shortlink_app.database.connection import engine, Base
from shortlink_app.api.errors import register_exception_handlers
from shortlink_app.api.v1 import links, redirect
from shortlink_app.dependencies import get_cache
from shortlink_app.sweeper.expiry_sweeper import ExpirySweeper

# Import models to ensure they're registered with Base
from shortlink_app.models import Link

setup_logging(settings.log_level)
logger = logging.getLogger(__name__)

# Create database tables
Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    sweeper = None
    sweeper_task = None
    if settings.sweeper_enabled:
        sweeper = ExpirySweeper(cache=get_cache())
        sweeper_task = asyncio.create_task(sweeper.start())

    yield

    # Shutdown
    if sweeper is not None:
        sweeper.stop()
        await sweeper_task
    logger.info("%s shut down", settings.app_name)


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="A URL shortener with expiring links, built with FastAPI",
    debug=settings.debug,
    lifespan=lifespan,
)

register_exception_handlers(app)


@app.get("/")
def read_root():
    """Root endpoint with API information"""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc"
    }


@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "environment": settings.environment}


######## Include routers
app.include_router(links.router, prefix="/api/v1")
app.include_router(redirect.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
