"""Liveness and readiness probes.

/health never touches a dependency. /health/ready answers 503 unless the
database answers, Redis answers and the onboarding step catalog is seeded.
"""

import asyncio
import logging
from typing import Awaitable, Callable

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import func, select

from onboard.config import settings
from onboard.database import async_session, utcnow
from onboard.models.onboarding import OnboardingStep
from onboard.utils.redis_client import get_redis

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

PROBE_TIMEOUT_SECONDS = 3


async def _database() -> str:
    async with async_session() as db:
        steps = (await db.execute(select(func.count(OnboardingStep.id)))).scalar_one()
    if not steps:
        raise RuntimeError("onboarding step catalog is empty")
    return "ok"


async def _redis() -> str:
    await (await get_redis()).ping()
    return "ok"


async def _probe(name: str, check: Callable[[], Awaitable[str]]) -> tuple[str, str, bool]:
    try:
        return name, await asyncio.wait_for(check(), PROBE_TIMEOUT_SECONDS), True
    except Exception as e:
        logger.warning("Readiness probe %s failed: %s", name, e)
        return name, f"error: {str(e)[:100]}", False


@router.get("/health")
async def health_check():
    return {
        "success": True,
        "status": "ok",
        "service": "onboard",
        "environment": settings.environment,
        "timestamp": utcnow().isoformat(),
    }


@router.get("/health/ready")
async def readiness_check():
    results = await asyncio.gather(_probe("database", _database), _probe("redis", _redis))
    healthy = all(ok for _, _, ok in results)
    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "success": healthy,
            "status": "ready" if healthy else "unavailable",
            "checks": {name: outcome for name, outcome, _ in results},
            "timestamp": utcnow().isoformat(),
        },
    )
