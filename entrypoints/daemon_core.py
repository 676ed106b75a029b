"""Platform-agnostic daemon bootstrap.

The platform-specific entrypoints (Linux/Android) import this module and
provide the correct OS-interface implementations.
"""

from __future__ import annotations

import logging
import sys

import uvicorn

from backend.config import AppConfig
from backend.main import configure_logging, create_app
from os_interfaces.base import OSImplementations

logger = logging.getLogger(__name__)


def run_daemon(*, os_impl: OSImplementations) -> None:
  configure_logging()
  try:
    logger.info("Starting alarm daemon on %s:%s", AppConfig.HOST, AppConfig.PORT)
    app = create_app(os_impl=os_impl)
    uvicorn.run(
      app,
      host=AppConfig.HOST,
      port=AppConfig.PORT,
      log_level=AppConfig.LOG_LEVEL.lower(),
      access_log=True,
    )
  except Exception:
    logger.exception("Failed to start alarm daemon")
    sys.exit(1)
