"""Durable single-slot store for the pending alarm trigger.

The slot lives in a small YAML file in the user data directory so the trigger
survives process restarts between scheduling and firing.
"""

import logging
from pathlib import Path
from threading import Lock
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from alarm_schedule.models import TRIGGER_KEY, PendingTrigger

logger = logging.getLogger(__name__)


class TriggerStore:
  """Holds zero or one PendingTrigger under a fixed key"""

  def __init__(self, data_dir: str | Path):
    """
    Initialize store

    Args:
      data_dir: Directory holding trigger.yaml
    """
    self.data_dir = Path(data_dir).expanduser()
    self.path = self.data_dir / "trigger.yaml"
    self._lock = Lock()

  # ============== YAML I/O ==============

  def _read(self) -> Optional[PendingTrigger]:
    if not self.path.exists():
      return None

    try:
      with open(self.path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
      logger.error(f"Failed to read trigger store {self.path}: {e}")
      return None

    if not isinstance(data, dict):
      logger.error(f"Trigger store {self.path} is not a mapping, ignoring it")
      return None

    raw = data.get(TRIGGER_KEY)
    if not raw:
      return None

    try:
      return PendingTrigger.model_validate(raw)
    except ValidationError as e:
      logger.error(f"Discarding malformed pending trigger: {e}")
      return None

  def _write(self, data: dict[str, Any]) -> None:
    """Write the slot atomically (temp file + rename)"""
    self.data_dir.mkdir(parents=True, exist_ok=True)
    temp_path = self.path.with_suffix(".tmp")
    with open(temp_path, "w", encoding="utf-8") as f:
      f.write("# Pomodoro alarm pending trigger (managed by the daemon)\n")
      yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
    temp_path.replace(self.path)

  # ============== Slot operations ==============

  def get(self) -> Optional[PendingTrigger]:
    with self._lock:
      return self._read()

  def set(self, trigger: PendingTrigger) -> None:
    """Store the trigger, replacing any previous one"""
    with self._lock:
      self._write({TRIGGER_KEY: trigger.model_dump(mode="json")})
    logger.debug(f"Stored trigger {trigger.trigger_id}")

  def clear(self) -> Optional[PendingTrigger]:
    """Empty the slot and return what was in it"""
    with self._lock:
      previous = self._read()
      if self.path.exists():
        self._write({})
      return previous

  def take(self, trigger_id: Optional[str] = None) -> Optional[PendingTrigger]:
    """Atomically remove and return the trigger if its id matches

    A None trigger_id matches whatever is pending.
    """
    with self._lock:
      trigger = self._read()
      if trigger is None:
        return None
      if trigger_id is not None and trigger.trigger_id != trigger_id:
        return None
      self._write({})
      return trigger
