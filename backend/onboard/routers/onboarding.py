"""Onboarding wizard: catalog-driven steps with save/resume.

Endpoints:
  GET  /status                  → current step, status, every step with its progress
  GET  /steps                   → the step catalog
  PUT  /steps/{n}/data          → save a draft for step n
  POST /steps/{n}/complete      → complete step n (body optional)
"""

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from onboard.auth.deps import get_current_client
from onboard.database import get_db
from onboard.models.client import Client
from onboard.schemas.common import ApiResponse
from onboard.schemas.onboarding import (
    OnboardingStatusOut,
    StepCompletionOut,
    StepDataRequest,
    StepOut,
    StepProgressOut,
)
from onboard.services import onboarding as tracker

router = APIRouter()


@router.get("/status", response_model=ApiResponse[OnboardingStatusOut])
async def get_status(
    db: AsyncSession = Depends(get_db),
    client: Client = Depends(get_current_client),
):
    return {"data": await tracker.get_status(db, client.id)}


@router.get("/steps", response_model=ApiResponse[list[StepOut]])
async def get_steps(
    db: AsyncSession = Depends(get_db),
    client: Client = Depends(get_current_client),
):
    steps = await tracker.list_steps(db)
    return {"data": [StepOut.model_validate(s) for s in steps]}


@router.put("/steps/{step_number}/data", response_model=ApiResponse[StepProgressOut])
async def save_step_data(
    step_number: int,
    body: StepDataRequest,
    db: AsyncSession = Depends(get_db),
    client: Client = Depends(get_current_client),
):
    """Save a draft; never advances the current step."""
    step_progress = await tracker.save_step_data(db, client.id, step_number, body.data)
    return {"data": step_progress}


@router.post("/steps/{step_number}/complete", response_model=ApiResponse[StepCompletionOut])
async def complete_step(
    step_number: int,
    body: StepDataRequest | None = Body(default=None),
    db: AsyncSession = Depends(get_db),
    client: Client = Depends(get_current_client),
):
    result = await tracker.complete_step(
        db, client.id, step_number, body.data if body else None
    )
    if result.is_complete:
        message = "Onboarding completed!"
    else:
        message = f"Step {step_number} completed. Proceed to step {result.current_step}."
    return {"data": result, "message": message}
