"""Android-specific implementations of OS interfaces."""

from __future__ import annotations

import asyncio
import json
import logging
import subprocess
import threading
from datetime import datetime
from typing import Callable, Optional

from android.permissions import Permission, check_permission, request_permissions  # type: ignore
from jnius import PythonJavaClass, autoclass, java_method  # type: ignore

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


# --- PyJNIus handles ---
PythonActivity = autoclass("org.kivy.android.PythonActivity")
Intent = autoclass("android.content.Intent")
IntentFilter = autoclass("android.content.IntentFilter")
PendingIntent = autoclass("android.app.PendingIntent")
NotificationManagerJava = autoclass("android.app.NotificationManager")
NotificationChannel = autoclass("android.app.NotificationChannel")
BuildVersion = autoclass("android.os.Build$VERSION")
NotificationCompatBuilder = autoclass("androidx.core.app.NotificationCompat$Builder")
NotificationCompat = autoclass("androidx.core.app.NotificationCompat")
NotificationManagerCompat = autoclass("androidx.core.app.NotificationManagerCompat")
AlarmManagerJava = autoclass("android.app.AlarmManager")
AndroidRDrawable = autoclass("android.R$drawable")
Context = autoclass("android.content.Context")
Settings = autoclass("android.provider.Settings")
MediaPlayer = autoclass("android.media.MediaPlayer")
AudioAttributes = autoclass("android.media.AudioAttributes")
AudioAttributesBuilder = autoclass("android.media.AudioAttributes$Builder")
RingtoneManager = autoclass("android.media.RingtoneManager")
VibrationEffect = autoclass("android.os.VibrationEffect")

ACTION_ALARM_FIRE = "com.pomodoro.ALARM_FIRED"
CHANNEL_ID = "pomodoro_alarm_service"
# one alarm slot: the same request code makes a new PendingIntent replace the old
REQUEST_CODE = 4242
ASSET_PREFIX = "flutter_assets/"


def _context():
  return PythonActivity.mActivity.getApplicationContext()


def _flags(base: int | None = None) -> int:
  flag_immutable = PendingIntent.FLAG_IMMUTABLE
  flag_update = PendingIntent.FLAG_UPDATE_CURRENT
  return (base or 0) | flag_immutable | flag_update


def _ensure_channel(manager, name: str) -> None:
  if BuildVersion.SDK_INT < 26:
    return
  channel = NotificationChannel(
    CHANNEL_ID,
    name,
    NotificationManagerJava.IMPORTANCE_HIGH,
  )
  channel.setDescription("Foreground alarm service")
  manager.createNotificationChannel(channel)


def _millis(dt: datetime) -> int:
  return int(dt.timestamp() * 1000)


CommandRunner = Callable[[str, list[str]], None]


def _run_subprocess(command: str, args: list[str]) -> None:
  subprocess.Popen([command, *args])


class _AlarmReceiver(PythonJavaClass):
  __javainterfaces__ = ["android/content/BroadcastReceiver"]
  __javacontext__ = "app"

  def __init__(self, run_command: CommandRunner = _run_subprocess):
    super().__init__()
    self.run_command = run_command

  @java_method("(Landroid/content/Context;Landroid/content/Intent;)V")
  def onReceive(self, _context, intent):
    cmd = intent.getStringExtra("command")
    args_json = intent.getStringExtra("args")
    args = json.loads(args_json) if args_json else []

    def run():
      try:
        self.run_command(cmd, args)
      except Exception:
        logger.exception("Failed to run alarm command")

    threading.Thread(target=run, daemon=True).start()


_alarm_receiver: _AlarmReceiver | None = None


def _ensure_alarm_receiver(ctx, run_command: CommandRunner) -> _AlarmReceiver:
  global _alarm_receiver
  if _alarm_receiver is None:
    _alarm_receiver = _AlarmReceiver(run_command)
    intent_filter = IntentFilter()
    intent_filter.addAction(ACTION_ALARM_FIRE)
    ctx.registerReceiver(_alarm_receiver, intent_filter)
  return _alarm_receiver


class AndroidNotificationManager(NotificationManager):
  """Ongoing high-priority alarm notification via NotificationCompat."""

  def __init__(self, app_name: str = "Pomodoro Alarm"):
    self.ctx = _context()
    self.manager = self.ctx.getSystemService(Context.NOTIFICATION_SERVICE)
    _ensure_channel(self.manager, app_name)

  def _tap_intent(self):
    tap_intent = Intent(self.ctx, PythonActivity)
    tap_intent.setFlags(Intent.FLAG_ACTIVITY_NEW_TASK | Intent.FLAG_ACTIVITY_CLEAR_TOP)
    return PendingIntent.getActivity(self.ctx, 0, tap_intent, _flags())

  async def show_ongoing(
    self,
    notification_id: int,
    title: str,
    body: str,
    on_clicked: Optional[Callable] = None,
  ) -> None:
    # tapping always brings PythonActivity back; on_clicked has no Android hook
    builder = (
      NotificationCompatBuilder(self.ctx, CHANNEL_ID)
      .setSmallIcon(AndroidRDrawable.ic_lock_idle_alarm)
      .setContentTitle(title)
      .setContentText(body)
      .setContentIntent(self._tap_intent())
      .setAutoCancel(False)
      .setOngoing(True)
      .setPriority(NotificationCompat.PRIORITY_HIGH)
    )
    self.manager.notify(notification_id, builder.build())
    logger.info("Notification %s created", notification_id)

  async def dismiss(self, notification_id: int) -> None:
    self.manager.cancel(notification_id)
    logger.info("Notification %s dismissed", notification_id)


class AndroidTimerManager(TimerManager):
  """Android timer manager using AlarmManager with a single request code."""

  def __init__(
    self, app_name: str = "Pomodoro Alarm", run_command: CommandRunner = _run_subprocess
  ):
    """
    Args:
      run_command: Called on the receiver thread with the timer's command and
        args when the alarm goes off
    """
    self.ctx = _context()
    self.alarm_manager = self.ctx.getSystemService(Context.ALARM_SERVICE)
    _ensure_alarm_receiver(self.ctx, run_command)

  def _fire_intent(self, timer_config: TimerConfig | None = None):
    intent = Intent(ACTION_ALARM_FIRE)
    intent.setPackage(self.ctx.getPackageName())
    if timer_config is not None:
      intent.putExtra("command", timer_config.command)
      intent.putExtra("args", json.dumps(timer_config.args))
    return intent

  def can_schedule_exact(self) -> bool:
    if BuildVersion.SDK_INT >= 31:
      return bool(self.alarm_manager.canScheduleExactAlarms())
    return True

  def schedule_timer(self, timer_config: TimerConfig) -> str:
    trigger_at = _millis(timer_config.timing)
    pending_intent = PendingIntent.getBroadcast(
      self.ctx, REQUEST_CODE, self._fire_intent(timer_config), _flags()
    )

    rtc = AlarmManagerJava.RTC_WAKEUP
    if timer_config.exact and BuildVersion.SDK_INT >= 23:
      self.alarm_manager.setExactAndAllowWhileIdle(rtc, trigger_at, pending_intent)
    elif timer_config.exact:
      self.alarm_manager.setExact(rtc, trigger_at, pending_intent)
    elif BuildVersion.SDK_INT >= 23:
      self.alarm_manager.setAndAllowWhileIdle(rtc, trigger_at, pending_intent)
    else:
      self.alarm_manager.set(rtc, trigger_at, pending_intent)

    timer_id = f"alarm-{REQUEST_CODE}"
    logger.info(
      "Scheduled %s alarm %s at %s",
      "exact" if timer_config.exact else "inexact",
      timer_id,
      timer_config.timing.isoformat(),
    )
    return timer_id

  def cancel_timer(self, timer_id: str) -> None:
    pending_intent = PendingIntent.getBroadcast(
      self.ctx,
      REQUEST_CODE,
      self._fire_intent(),
      PendingIntent.FLAG_NO_CREATE | PendingIntent.FLAG_IMMUTABLE,
    )
    if pending_intent is None:
      return
    self.alarm_manager.cancel(pending_intent)
    pending_intent.cancel()
    logger.info("Cancelled alarm %s", timer_id)


class _PreparedListener(PythonJavaClass):
  __javainterfaces__ = ["android/media/MediaPlayer$OnPreparedListener"]
  __javacontext__ = "app"

  @java_method("(Landroid/media/MediaPlayer;)V")
  def onPrepared(self, player):
    player.start()


class _MediaPlayerHandle(SoundHandle):
  def __init__(self, player, listener: _PreparedListener):
    self.player = player
    # keep the Java callback alive as long as the player
    self.listener = listener

  def release(self) -> None:
    try:
      self.player.stop()
      self.player.reset()
    finally:
      self.player.release()


class _RingtoneHandle(SoundHandle):
  def __init__(self, ringtone):
    self.ringtone = ringtone

  def release(self) -> None:
    self.ringtone.stop()


class AndroidSoundPlayer(SoundPlayer):
  """Asset playback with MediaPlayer, default sound with Ringtone."""

  def __init__(self, app_name: str = "Pomodoro Alarm", asset_prefix: str = ASSET_PREFIX):
    self.ctx = _context()
    self.asset_prefix = asset_prefix

  def _alarm_attributes(self):
    return (
      AudioAttributesBuilder()
      .setUsage(AudioAttributes.USAGE_ALARM)
      .setContentType(AudioAttributes.CONTENT_TYPE_SONIFICATION)
      .build()
    )

  def play_asset(self, asset_path: str, loop: bool = True) -> SoundHandle:
    afd = self.ctx.getAssets().openFd(f"{self.asset_prefix}{asset_path}")
    player = MediaPlayer()
    try:
      player.setAudioAttributes(self._alarm_attributes())
      player.setDataSource(afd.getFileDescriptor(), afd.getStartOffset(), afd.getLength())
      player.setLooping(loop)
      listener = _PreparedListener()
      player.setOnPreparedListener(listener)
      player.prepareAsync()
    except Exception:
      player.release()
      raise
    finally:
      afd.close()
    logger.info("Playing asset %s", asset_path)
    return _MediaPlayerHandle(player, listener)

  def play_default(self, loop: bool = True) -> SoundHandle:
    uri = RingtoneManager.getDefaultUri(
      RingtoneManager.TYPE_ALARM
    ) or RingtoneManager.getDefaultUri(RingtoneManager.TYPE_NOTIFICATION)
    ringtone = RingtoneManager.getRingtone(self.ctx, uri)
    if ringtone is None:
      raise RuntimeError("No default ringtone available")
    if loop and BuildVersion.SDK_INT >= 28:
      ringtone.setLooping(True)
    ringtone.play()
    logger.info("Playing default ringtone")
    return _RingtoneHandle(ringtone)


class AndroidVibrator(Vibrator):
  def __init__(self, app_name: str = "Pomodoro Alarm"):
    self.ctx = _context()
    self.vibrator = self.ctx.getSystemService(Context.VIBRATOR_SERVICE)

  def has_vibrator(self) -> bool:
    return self.vibrator is not None and bool(self.vibrator.hasVibrator())

  def start(self, pattern: list[int], repeat: bool = True) -> None:
    repeat_index = 0 if repeat else -1
    if BuildVersion.SDK_INT >= 26:
      effect = VibrationEffect.createWaveform(pattern, repeat_index)
      self.vibrator.vibrate(effect)
    else:
      self.vibrator.vibrate(pattern, repeat_index)

  def cancel(self) -> None:
    self.vibrator.cancel()


class AndroidPlatformSettings(PlatformSettings):
  def __init__(self, app_name: str = "Pomodoro Alarm", permission_timeout: float = 30.0):
    self.ctx = _context()
    self.permission_timeout = permission_timeout

  def _start_activity(self, intent) -> None:
    intent.setFlags(Intent.FLAG_ACTIVITY_NEW_TASK)
    PythonActivity.mActivity.startActivity(intent)

  async def open_exact_alarm_settings(self) -> bool:
    if BuildVersion.SDK_INT < 31:
      return False
    self._start_activity(Intent(Settings.ACTION_REQUEST_SCHEDULE_EXACT_ALARM))
    return True

  async def open_notification_settings(self) -> bool:
    intent = Intent()
    intent.setAction(Settings.ACTION_APP_NOTIFICATION_SETTINGS)
    intent.putExtra("android.provider.extra.APP_PACKAGE", self.ctx.getPackageName())
    self._start_activity(intent)
    return True

  async def are_notifications_enabled(self) -> bool:
    return bool(getattr(NotificationManagerCompat, "from")(self.ctx).areNotificationsEnabled())

  def _request_blocking(self) -> bool:
    done = threading.Event()
    granted: list[bool] = []

    def on_result(_permissions, results):
      granted.extend(results)
      done.set()

    request_permissions([Permission.POST_NOTIFICATIONS], on_result)
    if not done.wait(self.permission_timeout):
      logger.warning("Notification permission request timed out")
    return bool(granted and granted[0])

  async def request_post_notifications(self) -> bool:
    # no runtime permission before API 33
    if BuildVersion.SDK_INT < 33:
      return True
    if check_permission(Permission.POST_NOTIFICATIONS):
      return True
    return await asyncio.to_thread(self._request_blocking)
