"""Tests for Linux OS interfaces"""

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

pytest.importorskip("pystemd")
pytest.importorskip("desktop_notifier")
pytest.importorskip("pygame")

from os_interfaces.base import TimerConfig  # noqa: E402
from os_interfaces.linux import (  # noqa: E402
  LinuxNotificationManager,
  LinuxSoundPlayer,
  LinuxTimerManager,
  LinuxVibrator,
)


class TestLinuxNotificationManager:
  """Tests for LinuxNotificationManager"""

  @patch("os_interfaces.linux.DesktopNotifier")
  def test_init(self, mock_notifier_class):
    manager = LinuxNotificationManager(app_name="TestApp")
    mock_notifier_class.assert_called_once_with(app_name="TestApp")
    assert manager.notifier is not None

  @pytest.mark.asyncio
  @patch("os_interfaces.linux.DesktopNotifier")
  async def test_show_and_dismiss(self, mock_notifier_class):
    """The fixed id maps to the identifier desktop-notifier hands back"""
    mock_notifier = MagicMock()
    mock_notifier.send = AsyncMock(return_value=MagicMock(identifier="abc"))
    mock_notifier.clear = AsyncMock()
    mock_notifier_class.return_value = mock_notifier

    manager = LinuxNotificationManager(app_name="TestApp")
    callback = MagicMock()
    await manager.show_ongoing(424242, "Focus", "Time's up", on_clicked=callback)

    kwargs = mock_notifier.send.call_args.kwargs
    assert kwargs["title"] == "Focus"
    assert kwargs["message"] == "Time's up"
    assert kwargs["on_clicked"] is callback

    await manager.dismiss(424242)
    mock_notifier.clear.assert_awaited_once_with("abc")

    # already dismissed
    await manager.dismiss(424242)
    mock_notifier.clear.assert_awaited_once()


class TestLinuxTimerManager:
  """Tests for LinuxTimerManager"""

  @pytest.fixture
  def unit_dir(self, tmp_path):
    with patch.object(LinuxTimerManager, "_user_unit_dir", return_value=tmp_path):
      yield tmp_path

  @patch("os_interfaces.linux.DBus")
  @patch("os_interfaces.linux.Manager")
  def test_schedule_exact_timer(self, mock_manager_class, mock_dbus, unit_dir):
    mock_manager = MagicMock()
    mock_manager_class.return_value = mock_manager

    manager = LinuxTimerManager(app_name="pomo")
    timer_id = manager.schedule_timer(
      TimerConfig(
        timing=datetime(2026, 3, 1, 9, 25, 0),
        command="pomodoro-alarm-fire",
        args=["--trigger-id", "abc"],
        name="pending_trigger",
      )
    )

    assert timer_id == "pomo-alarm-pending_trigger"
    timer_txt = (unit_dir / f"{timer_id}.timer").read_text()
    assert "OnCalendar=2026-03-01 09:25:00" in timer_txt
    assert "Persistent=true" in timer_txt
    assert "WakeSystem=true" in timer_txt
    assert "AccuracySec=1s" in timer_txt

    service_txt = (unit_dir / f"{timer_id}.service").read_text()
    assert "Type=oneshot" in service_txt
    assert "--trigger-id abc" in service_txt

    mock_manager.Manager.Reload.assert_called_once()
    mock_manager.Manager.RestartUnit.assert_called_once_with(
      b"pomo-alarm-pending_trigger.timer", b"replace"
    )

  @patch("os_interfaces.linux.DBus")
  @patch("os_interfaces.linux.Manager")
  def test_schedule_inexact_timer(self, mock_manager_class, mock_dbus, unit_dir):
    manager = LinuxTimerManager(app_name="pomo")
    timer_id = manager.schedule_timer(
      TimerConfig(
        timing=datetime(2026, 3, 1, 9, 25, 0),
        command="pomodoro-alarm-fire",
        name="pending_trigger",
        exact=False,
      )
    )

    timer_txt = (unit_dir / f"{timer_id}.timer").read_text()
    assert "WakeSystem" not in timer_txt
    assert "AccuracySec=1min" in timer_txt

  @patch("os_interfaces.linux.DBus")
  @patch("os_interfaces.linux.Manager")
  def test_cancel_timer_removes_units(self, mock_manager_class, mock_dbus, unit_dir):
    mock_manager = MagicMock()
    mock_manager_class.return_value = mock_manager
    (unit_dir / "pomo-alarm-pending_trigger.timer").write_text("[Timer]\n")
    (unit_dir / "pomo-alarm-pending_trigger.service").write_text("[Service]\n")

    LinuxTimerManager(app_name="pomo").cancel_timer("pomo-alarm-pending_trigger")

    mock_manager.Manager.StopUnit.assert_called_once_with(
      b"pomo-alarm-pending_trigger.timer", b"replace"
    )
    assert list(unit_dir.iterdir()) == []

  @patch("os_interfaces.linux.DBus")
  def test_cancel_timer_swallows_dbus_errors(self, mock_dbus, unit_dir):
    mock_dbus.side_effect = Exception("no session bus")

    LinuxTimerManager(app_name="pomo").cancel_timer("pomo-alarm-pending_trigger")


class TestLinuxSoundPlayer:
  """Tests for LinuxSoundPlayer"""

  @patch("os_interfaces.linux.pygame")
  def test_play_asset_loops(self, mock_pygame, tmp_path):
    (tmp_path / "assets").mkdir()
    (tmp_path / "assets" / "bell.mp3").write_bytes(b"ID3")
    mock_pygame.mixer.get_init.return_value = None

    player = LinuxSoundPlayer(app_name="pomo", assets_dir=tmp_path)
    handle = player.play_asset("assets/bell.mp3")

    mock_pygame.mixer.init.assert_called_once()
    mock_pygame.mixer.music.load.assert_called_once_with(str(tmp_path / "assets" / "bell.mp3"))
    mock_pygame.mixer.music.play.assert_called_once_with(loops=-1)

    handle.release()
    mock_pygame.mixer.music.stop.assert_called_once()

  @patch("os_interfaces.linux.pygame")
  def test_missing_asset(self, mock_pygame, tmp_path):
    player = LinuxSoundPlayer(app_name="pomo", assets_dir=tmp_path)

    with pytest.raises(FileNotFoundError):
      player.play_asset("assets/missing.mp3")
    mock_pygame.mixer.music.play.assert_not_called()


def test_linux_has_no_vibrator():
  vibrator = LinuxVibrator(app_name="pomo")
  assert vibrator.has_vibrator() is False
  vibrator.cancel()
