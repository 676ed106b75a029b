"""
Alarm trigger models
The payload a trigger carries and the single pending trigger record
"""

import time
import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

# Fixed identity of the one pending trigger slot
TRIGGER_KEY = "pending_trigger"

SILENT_MARKER = "silence"
ASSET_PREFIX = "assets/"

# off, on, off, on (ms); repeats from the first entry
VIBRATION_PATTERN_MS = [0, 600, 250, 600]


def now_ms() -> int:
  """Current wall-clock time in epoch milliseconds"""
  return int(time.time() * 1000)


class AlarmPayload(BaseModel):
  """What to do when the alarm rings"""

  title: str = "Pomodoro"
  vibrate: bool = False
  sound: str = Field(
    default="default",
    description="'default', an 'assets/...' path, or anything containing 'silence'",
  )

  @property
  def is_silent(self) -> bool:
    return SILENT_MARKER in self.sound.lower()

  @property
  def asset_path(self) -> Optional[str]:
    """Bundled asset to play, or None to use the platform default sound"""
    if self.sound.startswith(ASSET_PREFIX):
      return self.sound
    return None


class PendingTrigger(BaseModel):
  """The scheduled alarm waiting for its OS timer"""

  trigger_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
  fire_at_ms: int
  payload: AlarmPayload = Field(default_factory=AlarmPayload)
  timer_id: Optional[str] = None
  exact: bool = True
  created_at_ms: int = Field(default_factory=now_ms)

  @property
  def fire_at(self) -> datetime:
    return datetime.fromtimestamp(self.fire_at_ms / 1000)

  def is_due(self, current_ms: Optional[int] = None) -> bool:
    if current_ms is None:
      current_ms = now_ms()
    return self.fire_at_ms <= current_ms
