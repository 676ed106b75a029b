"""Linux entrypoint for the alarm daemon (`pomodoro-alarm`).

This entrypoint injects Linux OS interface implementations.
"""

from __future__ import annotations

from functools import partial

from backend.config import AppConfig
from entrypoints.daemon_core import run_daemon
from os_interfaces.base import OSImplementations
from os_interfaces.linux import (
  LinuxNotificationManager,
  LinuxPlatformSettings,
  LinuxSoundPlayer,
  LinuxTimerManager,
  LinuxVibrator,
)


def main() -> None:
  os_impl = OSImplementations(
    notification_manager_cls=partial(LinuxNotificationManager, app_url=AppConfig.APP_URL),
    timer_manager_cls=LinuxTimerManager,
    sound_player_cls=partial(LinuxSoundPlayer, assets_dir=AppConfig.ASSETS_DIR),
    vibrator_cls=LinuxVibrator,
    platform_settings_cls=LinuxPlatformSettings,
  )
  run_daemon(os_impl=os_impl)


if __name__ == "__main__":
  main()
