"""OS interface module - platform-specific implementations

Since we build separate executables for each platform,
import the appropriate implementation directly in the entry points:
- entrypoints/pomodoro_alarm_linux.py imports from os_interfaces.linux
- entrypoints/pomodoro_alarm_android.py imports from os_interfaces.android
"""

from .base import (
  NotificationManager,
  OSImplementations,
  PlatformSettings,
  SoundHandle,
  SoundPlayer,
  TimerConfig,
  TimerManager,
  Vibrator,
)

__all__ = [
  "NotificationManager",
  "OSImplementations",
  "PlatformSettings",
  "SoundHandle",
  "SoundPlayer",
  "TimerConfig",
  "TimerManager",
  "Vibrator",
]
