"""
Configuration module for the Pomodoro alarm daemon
Settings come from the environment (optionally a .env file)
"""

import os
import logging
from pathlib import Path

from dotenv import load_dotenv
from platformdirs import user_data_dir

logger = logging.getLogger(__name__)

# Load environment variables from .env file
load_dotenv()

APP_NAME = os.getenv("POMODORO_APP_NAME", "pomodoro-alarm")


class AppConfig:
  """Application configuration settings"""

  APP_NAME = APP_NAME

  # Server settings
  HOST = os.getenv("HOST", "127.0.0.1")
  PORT = int(os.getenv("PORT", "8765"))

  # CORS settings
  CORS_ORIGINS = os.getenv(
    "CORS_ORIGINS", "http://localhost:5173,http://localhost:8765"
  ).split(",")

  # Rate limiting
  RATE_LIMIT = os.getenv("RATE_LIMIT", "3600/hour")

  # Storage
  DATA_DIR = Path(os.getenv("POMODORO_DATA_DIR") or user_data_dir(APP_NAME))

  # Alarm behaviour
  FIRE_COMMAND = os.getenv("POMODORO_FIRE_COMMAND", "pomodoro-alarm-fire")
  ASSETS_DIR = Path(os.getenv("POMODORO_ASSETS_DIR", "."))
  ALERT_TEXT = os.getenv("POMODORO_ALERT_TEXT", "Time's up")
  DEFAULT_TITLE = os.getenv("POMODORO_DEFAULT_TITLE", "Pomodoro")
  DEFAULT_SOUND = os.getenv("POMODORO_DEFAULT_SOUND", "default")
  # Where a click on the alert takes the user (Linux)
  APP_URL = os.getenv("POMODORO_APP_URL")
  PERMISSION_TIMEOUT_SECONDS = float(os.getenv("PERMISSION_TIMEOUT_SECONDS", "30"))

  # Logging
  LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

  @classmethod
  def daemon_url(cls) -> str:
    return f"http://{cls.HOST}:{cls.PORT}"
