"""Site Metrics - FastAPI Application."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import IntegrityError

from .core.config import settings
from .core.database import async_session_factory, engine, init_db, wiki_engine
from .core.version import get_version
from .routers import auth, metrics, version
from .services.auth import create_admin_user, get_user_by_email

logger = logging.getLogger(__name__)


async def ensure_admin_user() -> None:
    """Create the bootstrap admin user if it does not exist yet."""
    async with async_session_factory() as db:
        try:
            existing_admin = await get_user_by_email(db, settings.admin_email)
            if existing_admin is None:
                await create_admin_user(db, settings.admin_email, settings.admin_password)
                await db.commit()
                logger.info(f"Created initial admin user: {settings.admin_email}")
            else:
                logger.info(f"Admin user already exists: {settings.admin_email}")
        except IntegrityError:
            # Another worker created it between our check and insert
            await db.rollback()
            logger.info("Admin user already exists (created by another worker).")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup and shutdown events."""
    logger.info(f"Site Metrics v{get_version()} starting...")

    await init_db()
    await ensure_admin_user()

    yield

    await wiki_engine.dispose()
    await engine.dispose()


app = FastAPI(
    title="Site Metrics",
    description="Usage statistics for wiki social features",
    version=get_version(),
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(auth.router)
app.include_router(metrics.router)
app.include_router(version.router)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok"}
