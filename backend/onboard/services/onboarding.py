"""Onboarding tracker: catalog-driven, ordered steps with save/resume.

Rules:
  - The step catalog (`onboarding_steps`) is the only source of N, the
    number of steps. Nothing here assumes there are four.
  - Saving draft data never moves `current_step`.
  - A step can only be completed once every earlier step has been
    reached: `step_number <= current_step`.
  - Re-completing an earlier step never moves progress backwards, and a
    COMPLETED onboarding stays COMPLETED.
  - Completing step 1 copies the submitted name, company and phone onto
    the client record.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from onboard.database import utcnow
from onboard.middleware.exceptions import BadRequestError, ResourceNotFoundError
from onboard.models.client import Client
from onboard.models.onboarding import (
    OnboardingProgress,
    OnboardingStatus,
    OnboardingStep,
    StepProgress,
    StepStatus,
)
from onboard.schemas.onboarding import (
    OnboardingStatusOut,
    StepCompletionOut,
    StepProgressOut,
    StepStatusOut,
    validate_step_data,
)

logger = logging.getLogger(__name__)

DEFAULT_STEPS: list[dict] = [
    {
        "step_number": 1,
        "name": "personal_info",
        "title": "Personal Information",
        "description": "Tell us about yourself and your company",
        "is_required": True,
    },
    {
        "step_number": 2,
        "name": "documents",
        "title": "Document Upload",
        "description": "Upload required verification documents",
        "is_required": True,
    },
    {
        "step_number": 3,
        "name": "verification",
        "title": "Verification",
        "description": "Wait for document verification",
        "is_required": True,
    },
    {
        "step_number": 4,
        "name": "setup",
        "title": "Final Setup",
        "description": "Configure your preferences and complete onboarding",
        "is_required": True,
    },
]

# Step-1 payload fields mirrored onto the client record
PROFILE_FIELDS = ("first_name", "last_name", "company_name", "phone")


# ── Catalog ──────────────────────────────────────────────────

async def ensure_step_catalog(db: AsyncSession, steps: list[dict] | None = None) -> int:
    """Insert or update the catalog rows, keyed by step_number. Idempotent."""
    steps = steps if steps is not None else DEFAULT_STEPS
    existing = {
        s.step_number: s
        for s in (await db.execute(select(OnboardingStep))).scalars().all()
    }
    for entry in steps:
        row = existing.get(entry["step_number"])
        if row is None:
            db.add(OnboardingStep(**entry))
        else:
            for key, value in entry.items():
                setattr(row, key, value)
    await db.flush()
    logger.info("Onboarding step catalog seeded (%d steps)", len(steps))
    return len(steps)


async def list_steps(db: AsyncSession) -> list[OnboardingStep]:
    result = await db.execute(
        select(OnboardingStep).order_by(OnboardingStep.step_number)
    )
    return list(result.scalars().all())


async def total_steps(db: AsyncSession) -> int:
    return (await db.execute(select(func.count(OnboardingStep.id)))).scalar_one()


async def _get_step(db: AsyncSession, step_number: int) -> OnboardingStep:
    step = (
        await db.execute(
            select(OnboardingStep).where(OnboardingStep.step_number == step_number)
        )
    ).scalar_one_or_none()
    if not step:
        raise ResourceNotFoundError("Onboarding step")
    return step


# ── Progress ─────────────────────────────────────────────────

async def get_or_create_progress(db: AsyncSession, client_id: str) -> OnboardingProgress:
    result = await db.execute(
        select(OnboardingProgress).where(OnboardingProgress.client_id == client_id)
    )
    progress = result.scalar_one_or_none()
    if not progress:
        progress = OnboardingProgress(
            client_id=client_id,
            current_step=1,
            status=OnboardingStatus.PENDING,
        )
        db.add(progress)
        await db.flush()
    return progress


async def _get_or_create_step_progress(
    db: AsyncSession,
    progress: OnboardingProgress,
    step: OnboardingStep,
) -> StepProgress:
    result = await db.execute(
        select(StepProgress).where(
            StepProgress.onboarding_progress_id == progress.id,
            StepProgress.onboarding_step_id == step.id,
        )
    )
    step_progress = result.scalar_one_or_none()
    if not step_progress:
        step_progress = StepProgress(
            onboarding_progress_id=progress.id,
            onboarding_step_id=step.id,
            status=StepStatus.PENDING,
        )
        db.add(step_progress)
    return step_progress


def _step_progress_out(step: OnboardingStep, sp: StepProgress) -> StepProgressOut:
    return StepProgressOut(
        step_number=step.step_number,
        status=sp.status,
        data=sp.data,
        completed_at=sp.completed_at,
    )


async def get_status(db: AsyncSession, client_id: str) -> OnboardingStatusOut:
    """Every catalog step merged with the client's progress on it."""
    progress = await get_or_create_progress(db, client_id)
    steps = await list_steps(db)

    rows = (
        await db.execute(
            select(StepProgress).where(StepProgress.onboarding_progress_id == progress.id)
        )
    ).scalars().all()
    by_step = {sp.onboarding_step_id: sp for sp in rows}

    merged = []
    for step in steps:
        sp = by_step.get(step.id)
        item = StepStatusOut.model_validate(step)
        if sp:
            item.status = sp.status
            item.data = sp.data
            item.completed_at = sp.completed_at
        merged.append(item)

    return OnboardingStatusOut(
        current_step=progress.current_step,
        total_steps=len(steps),
        status=progress.status,
        completed_at=progress.completed_at,
        steps=merged,
    )


async def save_step_data(
    db: AsyncSession,
    client_id: str,
    step_number: int,
    data: dict | None,
) -> StepProgressOut:
    """Store a draft payload for a step without completing it."""
    step = await _get_step(db, step_number)
    payload = validate_step_data(step_number, data or {}, complete=False)

    progress = await get_or_create_progress(db, client_id)
    step_progress = await _get_or_create_step_progress(db, progress, step)

    step_progress.data = payload
    # A completed step only has its data replaced
    if step_progress.status != StepStatus.COMPLETED:
        step_progress.status = StepStatus.IN_PROGRESS

    if progress.status == OnboardingStatus.PENDING:
        progress.status = OnboardingStatus.IN_PROGRESS

    await db.flush()
    return _step_progress_out(step, step_progress)


async def complete_step(
    db: AsyncSession,
    client_id: str,
    step_number: int,
    data: dict | None = None,
) -> StepCompletionOut:
    """Mark a step completed and advance the client's progress."""
    step = await _get_step(db, step_number)
    progress = await get_or_create_progress(db, client_id)

    if step_number > progress.current_step:
        raise BadRequestError("Cannot complete a step ahead of current progress")

    step_progress = await _get_or_create_step_progress(db, progress, step)

    # Without a new payload the stored draft is what gets completed
    submitted = data if data is not None else (step_progress.data or {})
    payload = validate_step_data(step_number, submitted, complete=True)

    now = utcnow()
    step_progress.status = StepStatus.COMPLETED
    step_progress.completed_at = now
    if data is not None:
        step_progress.data = payload

    n = await total_steps(db)
    if step_number == n:
        progress.current_step = n
        progress.status = OnboardingStatus.COMPLETED
        if progress.completed_at is None:
            progress.completed_at = now
    else:
        progress.current_step = max(progress.current_step, min(step_number + 1, n))
        if progress.status != OnboardingStatus.COMPLETED:
            progress.status = OnboardingStatus.IN_PROGRESS

    if step_number == 1 and data:
        await _merge_personal_info(db, client_id, payload)

    await db.flush()
    logger.info("Client %s completed onboarding step %d/%d", client_id, step_number, n)

    return StepCompletionOut(
        step_progress=_step_progress_out(step, step_progress),
        current_step=progress.current_step,
        status=progress.status,
        completed_at=progress.completed_at,
        is_complete=progress.status == OnboardingStatus.COMPLETED,
    )


async def _merge_personal_info(db: AsyncSession, client_id: str, payload: dict) -> None:
    client = await db.get(Client, client_id)
    if not client:
        return
    for field in PROFILE_FIELDS:
        value = payload.get(field)
        # Empty values never blank out the existing profile
        if value:
            setattr(client, field, value)
