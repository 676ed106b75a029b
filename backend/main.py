"""
Pomodoro Alarm Daemon - FastAPI server
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional
import logging

from asgi_correlation_id import CorrelationIdFilter
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.middleware import SlowAPIMiddleware

from alarm.runner import ActionRunner
from alarm_schedule.scheduler import Scheduler
from alarm_schedule.store import TriggerStore
from backend.api.alarm import router as alarm_router
from backend.api.channel import router as channel_router
from backend.api.settings import router as settings_router
from backend.config import AppConfig
from backend.control import AlarmControl
from backend.middleware import setup_error_handling, setup_logging_middleware
from os_interfaces.base import OSImplementations

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


def configure_logging(level: Optional[str] = None) -> None:
  """Configure root logging with correlation ids on every handler"""
  logging.basicConfig(
    level=level or AppConfig.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - [%(correlation_id)s] %(message)s",
  )
  for handler in logging.root.handlers:
    handler.addFilter(CorrelationIdFilter(uuid_length=8))


def build_control(
  os_impl: OSImplementations, data_dir: Optional[Path] = None
) -> AlarmControl:
  """Wire platform implementations into the scheduler, runner and control"""
  app_name = AppConfig.APP_NAME
  runner = ActionRunner(
    notification_manager=os_impl.notification_manager(app_name=app_name),
    sound_player=os_impl.sound_player(app_name=app_name),
    vibrator=os_impl.vibrator(app_name=app_name),
    alert_text=AppConfig.ALERT_TEXT,
  )
  scheduler = Scheduler(
    timer_manager=os_impl.timer_manager(app_name=app_name),
    store=TriggerStore(data_dir or AppConfig.DATA_DIR),
    on_fire=runner.run,
    fire_command=AppConfig.FIRE_COMMAND,
    daemon_url=AppConfig.daemon_url(),
  )
  return AlarmControl(
    scheduler=scheduler,
    runner=runner,
    platform_settings=os_impl.platform_settings(app_name=app_name),
  )


def create_app(
  os_impl: OSImplementations, data_dir: Optional[Path] = None
) -> FastAPI:
  """Create the daemon app for the given platform implementations"""
  control = build_control(os_impl, data_dir)

  @asynccontextmanager
  async def lifespan(app: FastAPI):
    """Manage application lifecycle"""
    logger.info("Starting pomodoro alarm daemon...")
    try:
      await control.scheduler.fire_overdue()
    except Exception as e:
      logger.error(f"Failed to fire overdue alarm: {e}")
    yield
    logger.info("Shutting down pomodoro alarm daemon...")
    await control.runner.stop()

  app = FastAPI(
    title="Pomodoro Alarm",
    description="Single-shot alarm scheduler with sound, vibration and alert",
    version=VERSION,
    lifespan=lifespan,
  )
  app.state.control = control

  # innermost
  setup_error_handling(app)

  app.add_middleware(
    CORSMiddleware,
    allow_origins=AppConfig.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
  )

  limiter = Limiter(key_func=get_remote_address, default_limits=[AppConfig.RATE_LIMIT])
  app.state.limiter = limiter

  app.add_middleware(SlowAPIMiddleware)

  # outermost
  setup_logging_middleware(app)

  app.include_router(alarm_router)
  app.include_router(settings_router)
  app.include_router(channel_router)

  @app.get("/health")
  async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": AppConfig.APP_NAME, "version": VERSION}

  return app
