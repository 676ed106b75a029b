"""Tests for the program the OS timer runs at fire time"""

from unittest.mock import MagicMock, patch

import httpx
import pytest

from alarm.main import main, send_fire_event


def _response(fired: bool) -> MagicMock:
  response = MagicMock()
  response.json.return_value = {"fired": fired}
  return response


def test_send_fire_event_posts_trigger_id():
  with patch("alarm.main.httpx.post", return_value=_response(True)) as mock_post:
    assert send_fire_event("abc123", "http://127.0.0.1:9999/") is True

  mock_post.assert_called_once_with(
    "http://127.0.0.1:9999/api/alarm/fire",
    json={"trigger_id": "abc123"},
    timeout=10.0,
  )
  mock_post.return_value.raise_for_status.assert_called_once()


def test_stale_trigger_is_not_an_error():
  with patch("alarm.main.httpx.post", return_value=_response(False)):
    main(["--trigger-id", "old", "--url", "http://localhost:1"])


def test_unreachable_daemon_exits_nonzero():
  with patch(
    "alarm.main.httpx.post", side_effect=httpx.ConnectError("connection refused")
  ):
    with pytest.raises(SystemExit) as exc_info:
      main(["--trigger-id", "abc123", "--url", "http://localhost:1"])

  assert exc_info.value.code == 1


def test_trigger_id_is_required():
  with pytest.raises(SystemExit) as exc_info:
    main([])
  assert exc_info.value.code == 2
