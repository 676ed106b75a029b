"""
Alarm API endpoints
Schedule, cancel and silence the alarm
"""

import asyncio
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from backend.api import get_control
from backend.control import AlarmControl
from backend.exceptions import AppError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/alarm", tags=["alarm"])


class StartRequest(BaseModel):
  """Request to schedule the alarm"""

  # optional here so a missing value gets the ARG_ERROR response
  fire_at: Optional[int] = Field(None, description="Fire time in epoch milliseconds")
  title: Optional[str] = None
  vibrate: bool = False
  sound: Optional[str] = Field(
    None, description="'default', 'assets/<file>' or a value containing 'silence'"
  )


class FireRequest(BaseModel):
  """Fire event delivered by the OS timer"""

  trigger_id: str


class CommandResponse(BaseModel):
  success: bool


class StartResponse(CommandResponse):
  trigger: Optional[Dict[str, Any]] = None


class FireResponse(BaseModel):
  fired: bool


@router.post("/start", response_model=StartResponse)
async def start_alarm(
  request: StartRequest, control: AlarmControl = Depends(get_control)
) -> StartResponse:
  """
  Schedule the alarm, replacing any pending one
  """
  # arming talks to the OS timer service (D-Bus / AlarmManager) and blocks
  success = await asyncio.to_thread(
    control.start,
    fire_at=request.fire_at,
    title=request.title,
    vibrate=request.vibrate,
    sound=request.sound,
  )
  return StartResponse(success=success, trigger=control.status()["pending"])


@router.post("/cancel", response_model=CommandResponse)
async def cancel_alarm(control: AlarmControl = Depends(get_control)) -> CommandResponse:
  """
  Disarm the pending alarm (no-op when none is pending)
  """
  return CommandResponse(success=await asyncio.to_thread(control.cancel))


@router.post("/stop", response_model=CommandResponse)
async def stop_ringing(control: AlarmControl = Depends(get_control)) -> CommandResponse:
  """
  Silence the ringing alarm. A future pending alarm stays scheduled.
  """
  return CommandResponse(success=await control.stop())


@router.get("/status")
async def alarm_status(control: AlarmControl = Depends(get_control)) -> Dict[str, Any]:
  """
  Pending trigger and ringing session
  """
  return control.status()


@router.post("/fire", response_model=FireResponse)
async def fire_alarm(
  request: FireRequest, control: AlarmControl = Depends(get_control)
) -> FireResponse:
  """
  Deliver a fire event from the OS timer
  """
  try:
    fired = await control.scheduler.fire(request.trigger_id)
    return FireResponse(fired=fired)
  except Exception as e:
    logger.error(f"Error firing trigger {request.trigger_id}: {e}")
    raise AppError.from_exception(
      e,
      name="ALARM_FIRE_ERROR",
      source="alarm",
      context="Failed to fire alarm",
    )
