"""
FastAPI application entry point
"""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from api.middleware import RequestIDMiddleware
from api.routes import attachments as attachment_routes
from core.config import settings
from core.exceptions import register_exception_handlers
from core.logging_config import configure_logging, get_logger
from core.response import success_response
from infrastructure.storage import init_file_storage, shutdown_file_storage


# Configure logging at the entry point rather than as an import side effect
configure_logging()
logger = get_logger(__name__)


def create_app(upload_dir: Optional[str] = None) -> FastAPI:
    """Build the application; ``upload_dir`` overrides ``settings.storage.upload_dir``."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # A storage root that cannot be created aborts startup
        init_file_storage(upload_dir)
        logger.info("application_started", project=settings.PROJECT_NAME, version=settings.VERSION)
        try:
            yield
        finally:
            shutdown_file_storage()
            logger.info("application_stopped")

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    app.add_middleware(RequestIDMiddleware)
    register_exception_handlers(app)
    app.include_router(attachment_routes.router, prefix=settings.API_PREFIX)

    @app.get("/health", tags=["health"])
    async def health_check():
        return success_response({"status": "healthy", "environment": settings.ENVIRONMENT})

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
