"""
Error rendering and request logging for the alarm daemon
"""

import logging
import time
import traceback

from asgi_correlation_id import CorrelationIdMiddleware
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException
from starlette.types import ASGIApp, Receive, Scope, Send

from backend.exceptions import AppError

logger = logging.getLogger(__name__)

# polled by status pages, not worth an INFO line per request
QUIET_PATHS = {"/health", "/api/alarm/status"}


def _describe_validation_error(exc: RequestValidationError) -> str:
  problems = []
  for err in exc.errors():
    # drop the "body"/"query" prefix, callers know arguments by field name
    field = ".".join(str(part) for part in err.get("loc", ())[1:]) or "request"
    problems.append(f"{field}: {err.get('msg', 'invalid value')}")
  return "; ".join(problems) or "Invalid request"


def to_app_error(exc: Exception) -> AppError:
  """Map any exception raised while serving a request onto an AppError"""
  match exc:
    case AppError():
      return exc

    case RequestValidationError():
      return AppError.invalid_argument(_describe_validation_error(exc))

    case RateLimitExceeded():
      return AppError(
        description="Rate limit exceeded. Please try again later.",
        name="RATE_LIMIT_EXCEEDED",
        source="rate_limiter",
        caused_by=str(exc.detail),
      )

    case HTTPException():
      return AppError(
        description=str(exc.detail),
        name=f"HTTP_{exc.status_code}",
        source="http",
      )

    case _:
      return AppError(
        description=str(exc),
        name="INTERNAL_ERROR",
        source="unknown",
        caused_by=f"{exc.__class__.__name__}: {exc}\n\n{traceback.format_exc()}",
      )


def error_handler(exc: Exception) -> JSONResponse:
  """Render an exception as an ErrorResponse with the matching status code"""
  app_error = to_app_error(exc)
  # HTTPExceptions keep their own status (404 for unknown routes, 405, ...)
  status_code = exc.status_code if isinstance(exc, HTTPException) else app_error.status_code

  if status_code >= 500:
    logger.error(f"[{app_error.source}] {app_error.name}: {app_error.description}")
  else:
    logger.warning(f"[{app_error.source}] {app_error.name}: {app_error.description}")

  return JSONResponse(status_code=status_code, content=app_error.to_response().model_dump())


def handle_exception(request: Request, exc: Exception) -> JSONResponse:
  """FastAPI/slowapi exception handler signature for `error_handler`

  Kept synchronous: slowapi calls the RateLimitExceeded handler without awaiting.
  """
  return error_handler(exc)


class ErrorHandlingMiddleware:
  """Catches exceptions that escape the routes and renders them as JSON"""

  def __init__(self, app: ASGIApp):
    self.app = app

  async def __call__(self, scope: Scope, receive: Receive, send: Send):
    if scope["type"] != "http":
      await self.app(scope, receive, send)
      return

    response_started = False

    async def send_wrapper(message):
      nonlocal response_started
      if message["type"] == "http.response.start":
        response_started = True
      await send(message)

    try:
      await self.app(scope, receive, send_wrapper)
    except Exception as e:
      if response_started:
        logger.error(f"Error after response started for {scope['path']}: {e}")
        return
      await error_handler(e)(scope, receive, send)


class LoggingMiddleware:
  """Logs one line per request and one per response, with timing"""

  def __init__(self, app: ASGIApp):
    self.app = app

  async def __call__(self, scope: Scope, receive: Receive, send: Send):
    if scope["type"] != "http":
      await self.app(scope, receive, send)
      return

    start_time = time.time()
    method = scope["method"]
    path = scope["path"]
    client = (scope.get("client") or ("unknown", 0))[0]
    level = logging.DEBUG if path in QUIET_PATHS else logging.INFO

    logger.log(level, f"Request: {method} {path} from {client}")

    status_code = None

    async def send_wrapper(message):
      nonlocal status_code
      if message["type"] == "http.response.start":
        status_code = message["status"]
      await send(message)

    await self.app(scope, receive, send_wrapper)

    duration = time.time() - start_time
    logger.log(level, f"Response: {status_code} for {method} {path} (took {duration:.3f}s)")


def setup_error_handling(app: FastAPI) -> None:
  """Render validation, rate limit and unexpected errors as ErrorResponse

  Must run before the other middlewares are added so that the error
  middleware sits innermost.
  """
  app.add_exception_handler(RequestValidationError, handle_exception)
  app.add_exception_handler(RateLimitExceeded, handle_exception)
  app.add_middleware(ErrorHandlingMiddleware)


def setup_logging_middleware(app: FastAPI) -> None:
  """Request logging plus correlation ids, outermost"""
  app.add_middleware(LoggingMiddleware)
  app.add_middleware(CorrelationIdMiddleware)
