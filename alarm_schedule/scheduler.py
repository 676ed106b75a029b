"""
Single-shot alarm scheduler.

Arms exactly one OS timer for the pending trigger. The OS timer runs the fire
program, which hands the fire event back to `Scheduler.fire`; the trigger store
decides whether that event is still current.
"""

import asyncio
import logging
from datetime import datetime
from threading import Lock
from typing import Any, Awaitable, Callable, Optional

from alarm_schedule.models import TRIGGER_KEY, AlarmPayload, PendingTrigger, now_ms
from alarm_schedule.store import TriggerStore
from os_interfaces.base import TimerConfig, TimerManager

logger = logging.getLogger(__name__)

FireCallback = Callable[[AlarmPayload], Awaitable[Any]]


class Scheduler:
  """Arms, replaces and disarms the one pending alarm"""

  def __init__(
    self,
    timer_manager: TimerManager,
    store: TriggerStore,
    on_fire: FireCallback,
    fire_command: str = "pomodoro-alarm-fire",
    daemon_url: Optional[str] = None,
    min_lead_ms: int = 1000,
  ):
    """
    Args:
      timer_manager: OS timer facility (system of record for the wake-up)
      store: Durable pending-trigger slot
      on_fire: Awaited once with the payload when the trigger fires
      fire_command: Program the OS timer runs at fire time
      daemon_url: Passed to the fire program as --url. The OS timer runs it
        outside the daemon's environment, so it cannot read HOST/PORT itself.
      min_lead_ms: Timers are never armed closer than this to now, so past
        timestamps still fire as soon as possible
    """
    self.timer_manager = timer_manager
    self.store = store
    self._on_fire = on_fire
    self.fire_command = fire_command
    self.daemon_url = daemon_url
    self.min_lead_ms = min_lead_ms
    self._lock = Lock()

  def pending(self) -> Optional[PendingTrigger]:
    return self.store.get()

  def _exact_allowed(self) -> bool:
    try:
      return self.timer_manager.can_schedule_exact()
    except Exception as e:
      logger.warning(f"Could not query exact timer capability: {e}")
      return False

  def _disarm(self, trigger: Optional[PendingTrigger]) -> None:
    if trigger is None or trigger.timer_id is None:
      return
    try:
      self.timer_manager.cancel_timer(trigger.timer_id)
      logger.info(f"Disarmed timer {trigger.timer_id} for trigger {trigger.trigger_id}")
    except Exception as e:
      logger.warning(f"Failed to disarm timer {trigger.timer_id}: {e}")

  def _fire_args(self, trigger: PendingTrigger) -> list[str]:
    args = ["--trigger-id", trigger.trigger_id]
    if self.daemon_url:
      args += ["--url", self.daemon_url]
    return args

  def _arm(self, trigger: PendingTrigger) -> str:
    arm_at_ms = max(trigger.fire_at_ms, now_ms() + self.min_lead_ms)
    timer_config = TimerConfig(
      timing=datetime.fromtimestamp(arm_at_ms / 1000),
      command=self.fire_command,
      args=self._fire_args(trigger),
      name=TRIGGER_KEY,
      exact=trigger.exact,
    )
    try:
      return self.timer_manager.schedule_timer(timer_config)
    except Exception as e:
      if not trigger.exact:
        raise
      # permission can be revoked between the capability check and arming
      logger.warning(f"Exact timer refused, falling back to inexact delivery: {e}")
      trigger.exact = False
      timer_config.exact = False
      return self.timer_manager.schedule_timer(timer_config)

  def schedule(self, fire_at_ms: int, payload: AlarmPayload) -> PendingTrigger:
    """Arm the alarm at `fire_at_ms`, replacing any pending one

    Past timestamps are accepted and fire as soon as feasible.
    """
    with self._lock:
      self._disarm(self.store.get())

      exact = self._exact_allowed()
      if not exact:
        logger.warning("Exact timers not permitted, scheduling inexact alarm")

      trigger = PendingTrigger(fire_at_ms=fire_at_ms, payload=payload, exact=exact)
      try:
        trigger.timer_id = self._arm(trigger)
      except Exception:
        # the previous timer is already disarmed, its record must not outlive it
        dropped = self.store.clear()
        if dropped is not None:
          logger.warning(f"Dropped trigger {dropped.trigger_id} after failed re-arm")
        raise
      self.store.set(trigger)

    logger.info(
      f"Scheduled trigger {trigger.trigger_id} '{payload.title}' at "
      f"{trigger.fire_at.isoformat()} ({'exact' if trigger.exact else 'inexact'})"
    )
    return trigger

  def cancel(self) -> bool:
    """Disarm the pending alarm. Returns whether one was pending."""
    with self._lock:
      trigger = self.store.clear()
      self._disarm(trigger)

    if trigger is None:
      logger.debug("Cancel requested with no pending trigger")
      return False
    logger.info(f"Cancelled trigger {trigger.trigger_id}")
    return True

  def _take(self, trigger_id: Optional[str]) -> Optional[PendingTrigger]:
    with self._lock:
      return self.store.take(trigger_id)

  async def fire(self, trigger_id: Optional[str] = None) -> bool:
    """Run the pending trigger's action once

    Fire events for a trigger that was replaced or cancelled are ignored.

    Returns:
      Whether the action was run
    """
    trigger = await asyncio.to_thread(self._take, trigger_id)
    if trigger is None:
      logger.info(f"Ignoring fire event for {trigger_id}: not the pending trigger")
      return False

    logger.info(f"Firing trigger {trigger.trigger_id} '{trigger.payload.title}'")
    await self._on_fire(trigger.payload)
    return True

  async def fire_overdue(self, current_ms: Optional[int] = None) -> bool:
    """Fire a stored trigger whose time passed while nobody was listening"""
    trigger = self.store.get()
    if trigger is None or not trigger.is_due(current_ms):
      return False
    logger.warning(f"Trigger {trigger.trigger_id} is overdue, firing now")
    return await self.fire(trigger.trigger_id)
