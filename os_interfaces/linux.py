"""Linux-specific implementations of OS interfaces"""

import logging
import shlex
import shutil
import subprocess
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Optional

import pygame
from desktop_notifier import DesktopNotifier, Urgency
from pystemd.dbuslib import DBus
from pystemd.systemd1 import Manager

from .base import (
  NotificationManager,
  PlatformSettings,
  SoundHandle,
  SoundPlayer,
  TimerConfig,
  TimerManager,
  Vibrator,
)

logger = logging.getLogger(__name__)

# freedesktop sound theme, first existing file wins
DEFAULT_ALARM_SOUNDS = (
  Path("/usr/share/sounds/freedesktop/stereo/alarm-clock-elapsed.oga"),
  Path("/usr/share/sounds/freedesktop/stereo/complete.oga"),
  Path("/usr/share/sounds/freedesktop/stereo/bell.oga"),
)


def open_url(url: str) -> None:
  """Open a URL (usually the app UI) with the desktop default handler."""
  try:
    subprocess.Popen(
      ["xdg-open", url],
      stdout=subprocess.DEVNULL,
      stderr=subprocess.DEVNULL,
    )
    logger.info(f"Opened {url}")
  except Exception as e:
    logger.error(f"Failed to open {url}: {e}")


class LinuxNotificationManager(NotificationManager):
  """Linux notification manager using desktop-notifier"""

  def __init__(self, app_name: str, app_url: str | None = None):
    self.notifier = DesktopNotifier(app_name=app_name)
    self.app_url = app_url
    # our fixed ids -> desktop-notifier identifiers
    self._shown: dict[int, str] = {}

  async def show_ongoing(
    self,
    notification_id: int,
    title: str,
    body: str,
    on_clicked: Optional[Callable] = None,
  ) -> None:
    """Show a critical notification; critical ones stay until dismissed"""
    if on_clicked is None and self.app_url:
      app_url = self.app_url

      def on_clicked() -> None:
        open_url(app_url)

    notification = await self.notifier.send(
      title=title,
      message=body,
      urgency=Urgency.Critical,
      on_clicked=on_clicked,
    )
    self._shown[notification_id] = notification.identifier
    logger.info(f"Notification sent: {title}")

  async def dismiss(self, notification_id: int) -> None:
    identifier = self._shown.pop(notification_id, None)
    if identifier is None:
      return
    await self.notifier.clear(identifier)
    logger.info(f"Notification {notification_id} dismissed")


class LinuxTimerManager(TimerManager):
  """Linux timer manager using persistent systemd user units"""

  def __init__(self, app_name: str):
    self.app_name = app_name

  # ---- helpers ----
  @contextmanager
  def _connect_systemd(self):
    with DBus(user_mode=True) as bus:
      manager = Manager(bus=bus)
      manager.load()
      yield manager

  def _user_unit_dir(self) -> Path:
    return Path.home() / ".config/systemd/user"

  def _write_unit(self, name: str, content: str) -> Path:
    d = self._user_unit_dir()
    d.mkdir(parents=True, exist_ok=True)
    p = d / name
    p.write_text(content)
    return p

  def _remove_unit(self, name: str) -> None:
    p = self._user_unit_dir() / name
    if p.exists():
      p.unlink()

  def _enable_and_restart_timer(self, manager: Manager, timer: str) -> None:
    # restart so a rewritten OnCalendar replaces the armed one
    manager.Manager.EnableUnitFiles([f"{timer}.timer".encode()], False, True)
    manager.Manager.RestartUnit(f"{timer}.timer".encode(), b"replace")

  def _reload(self, manager: Manager) -> None:
    manager.Manager.Reload()

  def _unit_name(self, name: str | None) -> str:
    return f"{self.app_name}-alarm-{name or 'trigger'}"

  def _service_content(self, base: str, command: str, args: list[str]) -> str:
    executable = shutil.which(command) or command
    exec_line = shlex.join([executable, *args])
    return (
      "[Unit]\n"
      f"Description={self.app_name} alarm {base}\n"
      "\n[Service]\n"
      "Type=oneshot\n"
      f"ExecStart={exec_line}\n"
    )

  def _timer_content(self, base: str, on_calendar: str, exact: bool) -> str:
    # exact: wake the machine from suspend and fire within a second
    accuracy = "AccuracySec=1s\nWakeSystem=true\n" if exact else "AccuracySec=1min\n"
    return (
      "[Unit]\n"
      f"Description={self.app_name} alarm timer {base}\n"
      "\n[Timer]\n"
      f"OnCalendar={on_calendar}\n"
      "Persistent=true\n"
      "RemainAfterElapse=false\n"
      f"{accuracy}"
      f"Unit={base}.service\n"
      "\n[Install]\n"
      "WantedBy=timers.target\n"
    )

  # ---- public API ----
  def schedule_timer(self, timer_config: TimerConfig) -> str:
    """Write persistent oneshot timer units and (re)start the timer"""
    base = self._unit_name(timer_config.name)
    on_cal = timer_config.timing.strftime("%Y-%m-%d %H:%M:%S")

    service_txt = self._service_content(base, timer_config.command, timer_config.args)
    timer_txt = self._timer_content(base, on_cal, timer_config.exact)

    with self._connect_systemd() as m:
      self._write_unit(f"{base}.service", service_txt)
      self._write_unit(f"{base}.timer", timer_txt)
      self._reload(m)
      self._enable_and_restart_timer(m, base)

    logger.info(f"Scheduled oneshot '{timer_config.command}' as {base} at {on_cal}")
    return base

  def cancel_timer(self, timer_id: str) -> None:
    """Stop, disable and remove a timer. timer_id is the base unit name."""
    try:
      with self._connect_systemd() as m:
        try:
          m.Manager.StopUnit(f"{timer_id}.timer".encode(), b"replace")
          m.Manager.DisableUnitFiles([f"{timer_id}.timer".encode()], False)
          logger.info(f"Cancelled timer {timer_id}")
        except Exception as e:
          logger.warning(f"Could not cancel timer {timer_id}: {e}")
        self._remove_unit(f"{timer_id}.timer")
        self._remove_unit(f"{timer_id}.service")
        self._reload(m)
    except Exception as e:
      logger.error(f"Failed to cancel timer: {e}")


class _MusicHandle(SoundHandle):
  def __init__(self, source: Path):
    self.source = source

  def release(self) -> None:
    pygame.mixer.music.stop()
    pygame.mixer.music.unload()


class LinuxSoundPlayer(SoundPlayer):
  """Sound playback with pygame's music stream (non-blocking)"""

  def __init__(self, app_name: str, assets_dir: Path | str = "."):
    self.app_name = app_name
    self.assets_dir = Path(assets_dir).expanduser()

  def _ensure_mixer(self) -> None:
    if not pygame.mixer.get_init():
      pygame.mixer.init()

  def _play_file(self, path: Path, loop: bool) -> SoundHandle:
    self._ensure_mixer()
    pygame.mixer.music.load(str(path))
    pygame.mixer.music.play(loops=-1 if loop else 0)
    logger.info(f"Playing {path}")
    return _MusicHandle(path)

  def play_asset(self, asset_path: str, loop: bool = True) -> SoundHandle:
    path = self.assets_dir / asset_path
    if not path.is_file():
      raise FileNotFoundError(f"Sound asset not found: {path}")
    return self._play_file(path, loop)

  def play_default(self, loop: bool = True) -> SoundHandle:
    path = next((p for p in DEFAULT_ALARM_SOUNDS if p.is_file()), None)
    if path is None:
      raise FileNotFoundError("No default alarm sound found in the sound theme")
    return self._play_file(path, loop)


class LinuxVibrator(Vibrator):
  """Desktops have no vibration motor"""

  def __init__(self, app_name: str):
    self.app_name = app_name

  def has_vibrator(self) -> bool:
    return False

  def start(self, pattern: list[int], repeat: bool = True) -> None:
    raise NotImplementedError("Vibration is not supported on Linux")

  def cancel(self) -> None:
    pass


class LinuxPlatformSettings(PlatformSettings):
  """Notification permission queries through desktop-notifier"""

  settings_command = ["gnome-control-center", "notifications"]

  def __init__(self, app_name: str):
    self.notifier = DesktopNotifier(app_name=app_name)

  async def open_exact_alarm_settings(self) -> bool:
    # systemd timers need no permission
    return False

  async def open_notification_settings(self) -> bool:
    subprocess.Popen(
      self.settings_command,
      stdout=subprocess.DEVNULL,
      stderr=subprocess.DEVNULL,
    )
    return True

  async def are_notifications_enabled(self) -> bool:
    return await self.notifier.has_authorisation()

  async def request_post_notifications(self) -> bool:
    return await self.notifier.request_authorisation()
