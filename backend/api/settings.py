"""Platform permission and settings endpoints"""

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from backend.api import get_control
from backend.control import AlarmControl

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/settings", tags=["settings"])


class SettingsResult(BaseModel):
  result: bool


@router.post("/exact-alarm", response_model=SettingsResult)
async def open_exact_alarm_settings(
  control: AlarmControl = Depends(get_control),
) -> SettingsResult:
  """Open the exact alarm permission screen; false where the platform has none."""
  return SettingsResult(result=await control.open_exact_alarm_settings())


@router.post("/notifications", response_model=SettingsResult)
async def open_notification_settings(
  control: AlarmControl = Depends(get_control),
) -> SettingsResult:
  return SettingsResult(result=await control.open_notification_settings())


@router.get("/notifications/enabled", response_model=SettingsResult)
async def are_notifications_enabled(
  control: AlarmControl = Depends(get_control),
) -> SettingsResult:
  return SettingsResult(result=await control.are_notifications_enabled())


@router.post("/notifications/permission", response_model=SettingsResult)
async def request_post_notifications(
  control: AlarmControl = Depends(get_control),
) -> SettingsResult:
  """Ask the platform for the notification permission."""
  granted = await control.request_post_notifications()
  logger.info(f"Notification permission granted: {granted}")
  return SettingsResult(result=granted)
