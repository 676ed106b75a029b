"""Alarm scheduling module"""

from .models import (
  VIBRATION_PATTERN_MS,
  AlarmPayload,
  PendingTrigger,
  now_ms,
)
from .scheduler import Scheduler
from .store import TriggerStore

__all__ = [
  "VIBRATION_PATTERN_MS",
  "AlarmPayload",
  "PendingTrigger",
  "Scheduler",
  "TriggerStore",
  "now_ms",
]
