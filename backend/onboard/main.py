import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from onboard.config import configure_logging, settings, validate_for_production
from onboard.database import async_session
from onboard.middleware.exceptions import register_exception_handlers
from onboard.middleware.rate_limit import RateLimitMiddleware
from onboard.middleware.security import SecurityHeadersMiddleware
from onboard.routers import admin, auth, documents, health, onboarding, profile
from onboard.services.onboarding import ensure_step_catalog
from onboard.utils.redis_client import close_redis

API_PREFIX = "/api/v1"

configure_logging(settings)
logger = logging.getLogger("onboard")


@asynccontextmanager
async def lifespan(app: FastAPI):
    validate_for_production(settings)
    if settings.seed_steps_on_startup:
        async with async_session() as db:
            await ensure_step_catalog(db)
            await db.commit()
    logger.info("Onboard API started (%s)", settings.environment)
    yield
    await close_redis()
    logger.info("Onboard API stopped")


app = FastAPI(
    title="Onboard",
    description="Client onboarding API: accounts, onboarding steps, documents, admin review",
    version="1.0.0",
    lifespan=lifespan,
)

# ── Exception Handlers ───────────────────────────────────────
register_exception_handlers(app)

# ── Middleware (outermost last) ──────────────────────────────
app.add_middleware(RateLimitMiddleware, prefix="/api")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(SecurityHeadersMiddleware)

# ── Routers ──────────────────────────────────────────────────
app.include_router(health.router, prefix=API_PREFIX)
app.include_router(auth.router, prefix=f"{API_PREFIX}/auth", tags=["auth"])
app.include_router(profile.router, prefix=f"{API_PREFIX}/profile", tags=["profile"])
app.include_router(onboarding.router, prefix=f"{API_PREFIX}/onboarding", tags=["onboarding"])
app.include_router(documents.router, prefix=f"{API_PREFIX}/documents", tags=["documents"])
app.include_router(admin.router, prefix=f"{API_PREFIX}/admin", tags=["admin"])


@app.get("/")
async def root():
    return {
        "success": True,
        "message": "Onboard API",
        "version": app.version,
        "docs": "/docs",
    }
