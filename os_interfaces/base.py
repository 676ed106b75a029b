"""Abstract base classes for OS-specific interfaces"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional


class NotificationManager(ABC):
  """Abstract base class for the visible alarm alert"""

  @abstractmethod
  async def show_ongoing(
    self,
    notification_id: int,
    title: str,
    body: str,
    on_clicked: Optional[Callable] = None,
  ) -> None:
    """Show an ongoing (not swipe-dismissible) notification

    Args:
      notification_id: Fixed id used to replace or dismiss the notification
      title: Notification title
      body: Notification body text
      on_clicked: Optional callback when notification is clicked
    """
    raise NotImplementedError

  @abstractmethod
  async def dismiss(self, notification_id: int) -> None:
    """Dismiss a notification previously shown with `show_ongoing`"""
    raise NotImplementedError


@dataclass
class TimerConfig:
  timing: datetime
  command: str
  args: list[str] = field(default_factory=list)
  name: str | None = None
  exact: bool = True


class TimerManager(ABC):
  """Abstract base class for timer/alarm management"""

  @abstractmethod
  def schedule_timer(self, timer_config: TimerConfig) -> str:
    """Schedule a one-shot timer to run a command.

    Scheduling a timer with the same name replaces the previous one.

    Args:
      timer_config: Configuration with absolute timing, command, args, name and
        whether exact (idle-tolerant) delivery is requested

    Returns:
      Timer ID that can be used to cancel the timer
    """
    raise NotImplementedError

  @abstractmethod
  def cancel_timer(self, timer_id: str) -> None:
    """Cancel a scheduled timer

    Args:
      timer_id: ID of the timer to cancel
    """
    raise NotImplementedError

  def can_schedule_exact(self) -> bool:
    """Whether the OS currently allows exact, idle-tolerant timers"""
    return True


class SoundHandle(ABC):
  """A playing sound that can be stopped"""

  @abstractmethod
  def release(self) -> None:
    """Stop playback and free the underlying player"""
    raise NotImplementedError


class SoundPlayer(ABC):
  """Abstract base class for alarm sound playback"""

  @abstractmethod
  def play_asset(self, asset_path: str, loop: bool = True) -> SoundHandle:
    """Start playing a bundled asset. Raises if the asset can't be played."""
    raise NotImplementedError

  @abstractmethod
  def play_default(self, loop: bool = True) -> SoundHandle:
    """Start playing the platform default alert sound"""
    raise NotImplementedError


class Vibrator(ABC):
  """Abstract base class for vibration control"""

  @abstractmethod
  def has_vibrator(self) -> bool:
    raise NotImplementedError

  @abstractmethod
  def start(self, pattern: list[int], repeat: bool = True) -> None:
    """Start a vibration waveform

    Args:
      pattern: Alternating off/on durations in milliseconds
      repeat: Loop the waveform from its start until cancelled
    """
    raise NotImplementedError

  @abstractmethod
  def cancel(self) -> None:
    raise NotImplementedError


class PlatformSettings(ABC):
  """Permission and settings introspection, delegated to the platform"""

  @abstractmethod
  async def open_exact_alarm_settings(self) -> bool:
    """Open the exact alarm permission screen; False if the platform has none"""
    raise NotImplementedError

  @abstractmethod
  async def open_notification_settings(self) -> bool:
    raise NotImplementedError

  @abstractmethod
  async def are_notifications_enabled(self) -> bool:
    raise NotImplementedError

  @abstractmethod
  async def request_post_notifications(self) -> bool:
    """Ask for the notification permission; returns whether it is granted"""
    raise NotImplementedError


@dataclass
class OSImplementations:
  """Bundle of platform implementation factories injected into the app"""

  notification_manager_cls: Callable[..., NotificationManager]
  timer_manager_cls: Callable[..., TimerManager]
  sound_player_cls: Callable[..., SoundPlayer]
  vibrator_cls: Callable[..., Vibrator]
  platform_settings_cls: Callable[..., PlatformSettings]

  def notification_manager(self, **kwargs: Any) -> NotificationManager:
    return self.notification_manager_cls(**kwargs)

  def timer_manager(self, **kwargs: Any) -> TimerManager:
    return self.timer_manager_cls(**kwargs)

  def sound_player(self, **kwargs: Any) -> SoundPlayer:
    return self.sound_player_cls(**kwargs)

  def vibrator(self, **kwargs: Any) -> Vibrator:
    return self.vibrator_cls(**kwargs)

  def platform_settings(self, **kwargs: Any) -> PlatformSettings:
    return self.platform_settings_cls(**kwargs)
