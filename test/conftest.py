"""Shared fakes for the platform interfaces"""

from dataclasses import dataclass
from typing import Callable, Optional

import pytest

from alarm.runner import ActionRunner
from alarm_schedule.scheduler import Scheduler
from alarm_schedule.store import TriggerStore
from os_interfaces.base import (
  NotificationManager,
  OSImplementations,
  PlatformSettings,
  SoundHandle,
  SoundPlayer,
  TimerConfig,
  TimerManager,
  Vibrator,
)


class FakeTimerManager(TimerManager):
  def __init__(self, exact_allowed: bool = True, refuse_exact: bool = False):
    self.exact_allowed = exact_allowed
    self.refuse_exact = refuse_exact
    self.armed: dict[str, TimerConfig] = {}
    self.scheduled: list[TimerConfig] = []
    self.cancelled: list[str] = []

  def schedule_timer(self, timer_config: TimerConfig) -> str:
    if self.refuse_exact and timer_config.exact:
      raise PermissionError("exact alarms not permitted")
    timer_id = f"timer-{timer_config.name}"
    self.armed[timer_id] = timer_config
    self.scheduled.append(timer_config)
    return timer_id

  def cancel_timer(self, timer_id: str) -> None:
    self.cancelled.append(timer_id)
    self.armed.pop(timer_id, None)

  def can_schedule_exact(self) -> bool:
    return self.exact_allowed


class FakeSoundHandle(SoundHandle):
  def __init__(self, player: "FakeSoundPlayer", source: str, loop: bool):
    self.player = player
    self.source = source
    self.loop = loop
    self.released = False

  def release(self) -> None:
    if self.player.fail_release:
      raise RuntimeError("player already released")
    self.released = True
    self.player.active.remove(self)


class FakeSoundPlayer(SoundPlayer):
  def __init__(self, fail_assets: bool = False, fail_default: bool = False):
    self.fail_assets = fail_assets
    self.fail_default = fail_default
    self.fail_release = False
    self.active: list[FakeSoundHandle] = []

  def play_asset(self, asset_path: str, loop: bool = True) -> SoundHandle:
    if self.fail_assets:
      raise RuntimeError(f"cannot decode {asset_path}")
    handle = FakeSoundHandle(self, asset_path, loop)
    self.active.append(handle)
    return handle

  def play_default(self, loop: bool = True) -> SoundHandle:
    if self.fail_default:
      raise RuntimeError("no default sound")
    handle = FakeSoundHandle(self, "default", loop)
    self.active.append(handle)
    return handle


class FakeVibrator(Vibrator):
  def __init__(self, present: bool = True):
    self.present = present
    self.vibrating = False
    self.pattern: Optional[list[int]] = None
    self.repeat: Optional[bool] = None
    self.starts = 0
    self.cancels = 0

  def has_vibrator(self) -> bool:
    return self.present

  def start(self, pattern: list[int], repeat: bool = True) -> None:
    self.vibrating = True
    self.pattern = pattern
    self.repeat = repeat
    self.starts += 1

  def cancel(self) -> None:
    self.vibrating = False
    self.cancels += 1


class FakeNotificationManager(NotificationManager):
  def __init__(self, fail_show: bool = False):
    self.fail_show = fail_show
    self.shown: dict[int, tuple[str, str]] = {}
    self.history: list[str] = []

  async def show_ongoing(
    self,
    notification_id: int,
    title: str,
    body: str,
    on_clicked: Optional[Callable] = None,
  ) -> None:
    if self.fail_show:
      raise RuntimeError("notifications disabled")
    self.shown[notification_id] = (title, body)
    self.history.append(title)

  async def dismiss(self, notification_id: int) -> None:
    self.shown.pop(notification_id, None)


class FakePlatformSettings(PlatformSettings):
  def __init__(self):
    self.exact_alarm_screen = True
    self.notifications_enabled = True
    self.grant = True
    self.fail_open = False

  async def open_exact_alarm_settings(self) -> bool:
    if self.fail_open:
      raise RuntimeError("no activity found")
    return self.exact_alarm_screen

  async def open_notification_settings(self) -> bool:
    if self.fail_open:
      raise RuntimeError("no activity found")
    return True

  async def are_notifications_enabled(self) -> bool:
    return self.notifications_enabled

  async def request_post_notifications(self) -> bool:
    return self.grant


@dataclass
class FakeOS:
  timer_manager: FakeTimerManager
  sound_player: FakeSoundPlayer
  vibrator: FakeVibrator
  notification_manager: FakeNotificationManager
  platform_settings: FakePlatformSettings

  def implementations(self) -> OSImplementations:
    return OSImplementations(
      notification_manager_cls=lambda **_: self.notification_manager,
      timer_manager_cls=lambda **_: self.timer_manager,
      sound_player_cls=lambda **_: self.sound_player,
      vibrator_cls=lambda **_: self.vibrator,
      platform_settings_cls=lambda **_: self.platform_settings,
    )


@pytest.fixture
def fake_os() -> FakeOS:
  return FakeOS(
    timer_manager=FakeTimerManager(),
    sound_player=FakeSoundPlayer(),
    vibrator=FakeVibrator(),
    notification_manager=FakeNotificationManager(),
    platform_settings=FakePlatformSettings(),
  )


@pytest.fixture
def store(tmp_path) -> TriggerStore:
  return TriggerStore(tmp_path)


@pytest.fixture
def runner(fake_os) -> ActionRunner:
  return ActionRunner(
    notification_manager=fake_os.notification_manager,
    sound_player=fake_os.sound_player,
    vibrator=fake_os.vibrator,
  )


@pytest.fixture
def scheduler(fake_os, store, runner) -> Scheduler:
  return Scheduler(
    timer_manager=fake_os.timer_manager,
    store=store,
    on_fire=runner.run,
  )
