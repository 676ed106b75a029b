"""HTTP API routers"""

from fastapi import Request

from backend.control import AlarmControl


def get_control(request: Request) -> AlarmControl:
  """Dependency returning the app's alarm control surface"""
  return request.app.state.control
