import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from content_shield.config import settings
from content_shield.database import AsyncSessionLocal, Base, engine
from content_shield.exception_handlers import register_exception_handlers
from content_shield.middleware.logging import StructuredLoggingMiddleware, setup_structured_logging
from content_shield.routes import admin, auth, content, license_requests, users
from content_shield.services.user_service import UserService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging, create tables and the bootstrap admin account on startup."""
    setup_structured_logging(log_level=settings.log_level, json_format=settings.log_json)
    logger.info(f"Starting {settings.app_name} in {settings.environment} mode")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    if settings.admin_email and settings.admin_password:
        async with AsyncSessionLocal() as session:
            await UserService(session).ensure_admin(settings.admin_email, settings.admin_password)

    yield

    logger.info("Shutting down the application...")
    await engine.dispose()


def create_app() -> FastAPI:
    """Create the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        description="Content sharing with duplicate detection and license-gated access",
        debug=settings.debug,
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(StructuredLoggingMiddleware)

    register_exception_handlers(app)

    app.include_router(auth.router)
    app.include_router(content.router)
    app.include_router(users.router)
    app.include_router(license_requests.router)
    app.include_router(admin.router)

    @app.get("/health", tags=["Health"])
    async def health():
        return {"status": "ok"}

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=settings.debug)
