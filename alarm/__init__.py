"""Alarm ringing: the action runner and the fire program"""

from .runner import ActionRunner, ActiveAlarmSession, ReleaseResult

__all__ = ["ActionRunner", "ActiveAlarmSession", "ReleaseResult"]
