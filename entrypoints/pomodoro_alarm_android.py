"""Android entrypoint for the alarm daemon.

Injects Android OS interfaces into the shared daemon bootstrap.
"""

from __future__ import annotations

from functools import partial

from alarm.main import main as fire_main
from backend.config import AppConfig
from entrypoints.daemon_core import run_daemon
from os_interfaces.android import (
  AndroidNotificationManager,
  AndroidPlatformSettings,
  AndroidSoundPlayer,
  AndroidTimerManager,
  AndroidVibrator,
)
from os_interfaces.base import OSImplementations


def run_fire_program(command: str, args: list[str]) -> None:
  # p4a installs no console scripts, so the fire program runs in-process
  fire_main(args)


def main() -> None:
  os_impl = OSImplementations(
    notification_manager_cls=AndroidNotificationManager,
    timer_manager_cls=partial(AndroidTimerManager, run_command=run_fire_program),
    sound_player_cls=AndroidSoundPlayer,
    vibrator_cls=AndroidVibrator,
    platform_settings_cls=partial(
      AndroidPlatformSettings, permission_timeout=AppConfig.PERMISSION_TIMEOUT_SECONDS
    ),
  )
  run_daemon(os_impl=os_impl)


if __name__ == "__main__":
  main()
