"""
Error types shared by the alarm daemon's control surface and HTTP layer
"""

from typing import Literal, Optional
from pydantic import BaseModel, Field


ErrorSource = Literal[
  "rate_limiter",
  "validation",  # bad or missing command arguments
  "alarm",  # scheduling and ringing
  "settings",  # platform permission screens
  "channel",  # unknown method-channel command
  "http",
  "unknown",
]

_STATUS_BY_SOURCE: dict[str, int] = {
  "rate_limiter": 429,
  "validation": 400,
  "channel": 404,
}


def get_status_code(source: ErrorSource) -> int:
  """HTTP status for an error source; everything not listed is a server error"""
  return _STATUS_BY_SOURCE.get(source, 500)


class ErrorResponse(BaseModel):
  """JSON body of every failed request"""

  description: str = Field(..., description="Human-readable error message")
  name: str = Field(..., description="Stable error identifier, e.g. ARG_ERROR")
  source: ErrorSource
  caused_by: Optional[str] = Field(None, description="Wrapped exception, if any")


class AppError(Exception):
  """An error with a stable name, raised by commands and rendered as ErrorResponse"""

  def __init__(
    self,
    description: str,
    name: str,
    source: ErrorSource,
    caused_by: Optional[str] = None,
  ):
    self.description = description
    self.name = name
    self.source: ErrorSource = source
    self.caused_by = caused_by
    super().__init__(description)

  @property
  def status_code(self) -> int:
    return get_status_code(self.source)

  def to_response(self) -> ErrorResponse:
    return ErrorResponse(
      description=self.description,
      name=self.name,
      source=self.source,
      caused_by=self.caused_by,
    )

  @classmethod
  def invalid_argument(cls, description: str, caused_by: Optional[str] = None) -> "AppError":
    """The ARG_ERROR a command raises for a missing or malformed argument"""
    return cls(
      description=description,
      name="ARG_ERROR",
      source="validation",
      caused_by=caused_by,
    )

  @classmethod
  def from_exception(
    cls,
    e: Exception,
    name: str,
    source: ErrorSource,
    context: Optional[str] = None,
  ) -> "AppError":
    """Wrap `e`, keeping its class and message in `caused_by`

    Args:
        e: The original exception
        name: Error identifier for this error
        source: Where this error originated
        context: Prefix for the description
    """
    description = f"{context}: {e}" if context else str(e)
    return cls(
      description=description,
      name=name,
      source=source,
      caused_by=f"{e.__class__.__name__}: {e}",
    )
