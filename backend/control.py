"""
Alarm control surface
The commands a UI or API client uses to drive the alarm
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from pydantic import ValidationError

from alarm.runner import ActionRunner
from alarm_schedule.models import AlarmPayload
from alarm_schedule.scheduler import Scheduler
from backend.config import AppConfig
from backend.exceptions import AppError
from os_interfaces.base import PlatformSettings

logger = logging.getLogger(__name__)


class AlarmControl:
  """start/cancel/stop/status plus platform settings delegation

  `stop` only silences the ringing session. A trigger scheduled for the
  future stays armed; use `cancel` for that.
  """

  def __init__(
    self,
    scheduler: Scheduler,
    runner: ActionRunner,
    platform_settings: PlatformSettings,
  ):
    self.scheduler = scheduler
    self.runner = runner
    self.platform_settings = platform_settings

  # ---- alarm commands ----

  def start(
    self,
    fire_at: Optional[int],
    title: Optional[str] = None,
    vibrate: Optional[bool] = None,
    sound: Optional[str] = None,
  ) -> bool:
    """Schedule the alarm at `fire_at` (epoch ms), replacing any pending one"""
    if fire_at is None:
      raise AppError.invalid_argument("fire_at is required")
    if isinstance(fire_at, bool):
      raise AppError.invalid_argument(f"fire_at must be epoch milliseconds, got {fire_at!r}")
    try:
      fire_at_ms = int(fire_at)
    except (TypeError, ValueError):
      raise AppError.invalid_argument(f"fire_at must be epoch milliseconds, got {fire_at!r}")

    try:
      # pydantic coerces "false"/"true"/0/1 and rejects anything else
      payload = AlarmPayload(
        title=title if title is not None else AppConfig.DEFAULT_TITLE,
        vibrate=vibrate if vibrate is not None else False,
        sound=sound if sound is not None else AppConfig.DEFAULT_SOUND,
      )
    except ValidationError as e:
      raise AppError.invalid_argument(
        f"Invalid alarm payload: {e.error_count()} error(s)", caused_by=str(e)
      )

    try:
      self.scheduler.schedule(fire_at_ms, payload)
    except Exception as e:
      logger.exception("Failed to schedule alarm")
      raise AppError.from_exception(
        e,
        name="SCHEDULE_FAILED",
        source="alarm",
        context="Failed to schedule alarm",
      )
    return True

  def cancel(self) -> bool:
    self.scheduler.cancel()
    return True

  async def stop(self) -> bool:
    await self.runner.stop()
    return True

  def status(self) -> Dict[str, Any]:
    pending = self.scheduler.pending()
    session = self.runner.session
    return {
      "pending": pending.model_dump() if pending else None,
      "session": session.to_dict() if session else None,
    }

  # ---- platform settings ----

  async def _open_settings(self, opener: Callable[[], Awaitable[bool]]) -> bool:
    try:
      return await opener()
    except Exception as e:
      raise AppError.from_exception(
        e,
        name="OPEN_SETTINGS_FAILED",
        source="settings",
        context="Failed to open settings",
      )

  async def open_exact_alarm_settings(self) -> bool:
    return await self._open_settings(self.platform_settings.open_exact_alarm_settings)

  async def open_notification_settings(self) -> bool:
    return await self._open_settings(self.platform_settings.open_notification_settings)

  async def are_notifications_enabled(self) -> bool:
    try:
      return await self.platform_settings.are_notifications_enabled()
    except Exception as e:
      logger.warning(f"Could not query notification permission: {e}")
      return False

  async def request_post_notifications(self) -> bool:
    try:
      return await self.platform_settings.request_post_notifications()
    except Exception as e:
      logger.warning(f"Notification permission request failed: {e}")
      return False

  # ---- method channel ----

  async def dispatch(self, method: str, arguments: Optional[Dict[str, Any]] = None) -> Any:
    """Run a command by its method-channel name"""
    args = arguments or {}
    match method:
      case "startPomodoro":
        return await asyncio.to_thread(
          self.start,
          fire_at=args.get("endAt"),
          title=args.get("title"),
          vibrate=args.get("vibrate"),
          sound=args.get("sound"),
        )
      case "cancelPomodoro":
        return await asyncio.to_thread(self.cancel)
      case "stopRingtone":
        return await self.stop()
      case "openExactAlarmSettings":
        return await self.open_exact_alarm_settings()
      case "openNotificationSettings":
        return await self.open_notification_settings()
      case "areNotificationsEnabled":
        return await self.are_notifications_enabled()
      case "requestPostNotifications":
        return await self.request_post_notifications()
      case _:
        raise AppError(
          description=f"Method '{method}' is not implemented",
          name="NOT_IMPLEMENTED",
          source="channel",
        )
