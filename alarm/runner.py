"""
Alarm action runner.

Starts the ringing experience (ongoing alert, looping sound, repeating
vibration) and tears it down again. Every effect is started and released on
its own: one failing never keeps the others from running.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional

from alarm_schedule.models import VIBRATION_PATTERN_MS, AlarmPayload, now_ms
from os_interfaces.base import NotificationManager, SoundHandle, SoundPlayer, Vibrator

logger = logging.getLogger(__name__)

ALARM_NOTIFICATION_ID = 424242
DEFAULT_ALERT_TEXT = "Time's up"


@dataclass
class ReleaseResult:
  """Outcome of releasing one session resource"""

  resource: str
  released: bool
  error: Optional[str] = None


@dataclass
class ActiveAlarmSession:
  """The live side effects of one fired trigger"""

  payload: AlarmPayload
  session_id: str = field(default_factory=lambda: uuid.uuid4().hex)
  started_at_ms: int = field(default_factory=now_ms)
  notification_id: Optional[int] = None
  sound: Optional[SoundHandle] = None
  sound_source: Optional[str] = None  # "asset" or "default"
  vibrating: bool = False

  def to_dict(self) -> dict[str, Any]:
    return {
      "session_id": self.session_id,
      "payload": self.payload.model_dump(),
      "started_at_ms": self.started_at_ms,
      "alert_shown": self.notification_id is not None,
      "sound_source": self.sound_source,
      "vibrating": self.vibrating,
    }


class ActionRunner:
  """Owns the single ActiveAlarmSession

  `run` and `stop` share one lock, so a stop never interleaves with a
  half-started session.
  """

  def __init__(
    self,
    notification_manager: NotificationManager,
    sound_player: SoundPlayer,
    vibrator: Vibrator,
    alert_text: str = DEFAULT_ALERT_TEXT,
    notification_id: int = ALARM_NOTIFICATION_ID,
    on_alert_clicked: Optional[Callable] = None,
  ):
    self.notification_manager = notification_manager
    self.sound_player = sound_player
    self.vibrator = vibrator
    self.alert_text = alert_text
    self.notification_id = notification_id
    self.on_alert_clicked = on_alert_clicked
    self._session: Optional[ActiveAlarmSession] = None
    self._lock = asyncio.Lock()

  @property
  def session(self) -> Optional[ActiveAlarmSession]:
    return self._session

  @property
  def is_active(self) -> bool:
    return self._session is not None

  # ---- start ----

  async def run(self, payload: AlarmPayload) -> ActiveAlarmSession:
    """Start ringing with `payload`, replacing any live session"""
    async with self._lock:
      await self._teardown()

      session = ActiveAlarmSession(payload=payload)
      # registered before the effects start so a partial start is still torn down
      self._session = session

      await self._start_alert(session)
      self._start_sound(session)
      self._start_vibration(session)

      logger.info(
        f"Alarm session {session.session_id} started: '{payload.title}', "
        f"sound={session.sound_source}, vibrating={session.vibrating}"
      )
      return session

  async def _start_alert(self, session: ActiveAlarmSession) -> None:
    try:
      await self.notification_manager.show_ongoing(
        self.notification_id,
        title=session.payload.title,
        body=self.alert_text,
        on_clicked=self.on_alert_clicked,
      )
      session.notification_id = self.notification_id
    except Exception as e:
      logger.error(f"Failed to show alarm alert: {e}")

  def _start_sound(self, session: ActiveAlarmSession) -> None:
    payload = session.payload
    if payload.is_silent:
      logger.info("Silent alarm, no sound")
      return

    asset = payload.asset_path
    if asset:
      try:
        session.sound = self.sound_player.play_asset(asset, loop=True)
        session.sound_source = "asset"
        return
      except Exception as e:
        logger.warning(f"Asset {asset} failed to play, using default sound: {e}")

    try:
      session.sound = self.sound_player.play_default(loop=True)
      session.sound_source = "default"
    except Exception as e:
      logger.error(f"Default alarm sound failed to play: {e}")

  def _start_vibration(self, session: ActiveAlarmSession) -> None:
    if not session.payload.vibrate:
      return
    try:
      if not self.vibrator.has_vibrator():
        logger.info("No vibrator on this device, skipping vibration")
        return
      self.vibrator.start(VIBRATION_PATTERN_MS, repeat=True)
      session.vibrating = True
    except Exception as e:
      logger.error(f"Failed to start vibration: {e}")

  # ---- stop ----

  async def stop(self) -> list[ReleaseResult]:
    """Stop sound and vibration and dismiss the alert. Safe to repeat."""
    async with self._lock:
      return await self._teardown()

  def _release(self, resource: str, release: Callable[[], Any]) -> ReleaseResult:
    try:
      release()
      return ReleaseResult(resource=resource, released=True)
    except Exception as e:
      return ReleaseResult(resource=resource, released=False, error=str(e))

  async def _release_async(
    self, resource: str, release: Callable[[], Awaitable[Any]]
  ) -> ReleaseResult:
    try:
      await release()
      return ReleaseResult(resource=resource, released=True)
    except Exception as e:
      return ReleaseResult(resource=resource, released=False, error=str(e))

  async def _teardown(self) -> list[ReleaseResult]:
    session = self._session
    if session is None:
      return []

    results: list[ReleaseResult] = []
    try:
      sound = session.sound
      if sound is not None:
        session.sound = None
        results.append(self._release("sound", sound.release))

      if session.vibrating:
        session.vibrating = False
        results.append(self._release("vibration", self.vibrator.cancel))

      notification_id = session.notification_id
      if notification_id is not None:
        session.notification_id = None
        results.append(
          await self._release_async(
            "alert", lambda: self.notification_manager.dismiss(notification_id)
          )
        )
    finally:
      self._session = None

    for result in results:
      if result.released:
        logger.debug(f"Released {result.resource}")
      else:
        logger.warning(f"Failed to release {result.resource}: {result.error}")
    logger.info(f"Alarm session {session.session_id} stopped")
    return results
