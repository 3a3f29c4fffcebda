"""FastAPI application for the device registry.

This is the main entry point for the registry API server.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from ..config import Settings
from ..error_sanitizer import sanitize_error_message
from ..exceptions import RegistryError
from .api.catalog_router import router as catalog_router
from .api.dependencies import close_registry, init_registry
from .api.router import router

VERSION = "1.0.0"

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def registry_error_handler(request: Request, exc: RegistryError) -> JSONResponse:
    """Translate registry errors into {"error", "code"} payloads."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}", exc_info=exc)
        message = sanitize_error_message(exc.message)
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code} {exc.code}")
        message = exc.message
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": message, "code": exc.code},
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed input as 400 instead of FastAPI's default 422."""
    problems = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        problems.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    message = "Invalid request: " + "; ".join(problems) if problems else "Invalid request"
    logger.info(f"{request.method} {request.url.path} -> 400 {message}")
    return JSONResponse(
        status_code=400,
        content={"error": message, "code": "VALIDATION_ERROR"},
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: log the failure, never leak it."""
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the registry application.

    Args:
        settings: Service configuration; read from the environment if omitted
    """
    settings = settings or Settings.from_env()
    logging.getLogger().setLevel(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Load the registry on startup, release it on shutdown."""
        logger.info("Starting Device Registry API...")

        try:
            state = await init_registry(settings)
        except RegistryError as e:
            logger.error(f"Failed to load registry from {settings.data_file}: {e}")
            raise

        doc = state.document
        logger.info(
            f"Registry ready: {len(doc.devices)} devices, {len(doc.users)} users "
            f"(document {settings.data_file}, photos in {settings.upload_dir})"
        )

        yield

        logger.info("Shutting down Device Registry API...")
        await close_registry()

    app = FastAPI(
        title="Device Registry API",
        description="""
    API for a device catalog with photos and a user/device assignment registry.

    ## Features

    - **Upload**: Register a device by uploading its photo
    - **Catalog**: List, edit and delete devices; fetch their photos
    - **Users**: Create users
    - **Assignments**: Assign devices to users and release them again
    """,
        version=VERSION,
        lifespan=lifespan,
        docs_url="/api-docs",
    )

    app.add_exception_handler(RegistryError, registry_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "X-Requested-With", "Content-Type", "Accept"],
    )

    app.include_router(router)
    app.include_router(catalog_router)

    @app.get("/health")
    async def health():
        """Global health check."""
        return {"status": "healthy"}

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "name": "Device Registry API",
            "version": VERSION,
            "docs": "/api-docs",
        }

    # Uploaded photos, served directly by filename
    app.mount(
        "/uploads",
        StaticFiles(directory=str(settings.upload_dir), check_dir=False),
        name="uploads",
    )

    # Optional front end, mounted last so API routes take precedence
    if settings.static_dir and settings.static_dir.is_dir():
        app.mount("/static", StaticFiles(directory=str(settings.static_dir), html=True), name="static")
        logger.info(f"Serving static front end from {settings.static_dir}")

    return app


def main() -> None:
    """Run the API with uvicorn using environment settings."""
    import uvicorn

    settings = Settings.from_env()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


# Entry point for running with uvicorn
if __name__ == "__main__":
    main()
