"""
Alarm fire program.

The OS timer runs this when the pending alarm is due. It hands the fire event
to the running daemon, which rings the alarm if the trigger is still current.

Usage:
    pomodoro-alarm-fire --trigger-id <id>
"""

import argparse
import logging
import sys
from typing import Optional

import httpx

from backend.config import AppConfig

logger = logging.getLogger(__name__)


def send_fire_event(trigger_id: str, url: str, timeout: float = 10.0) -> bool:
  """Tell the daemon a trigger's timer went off.

  Args:
      trigger_id: Id of the trigger the timer was armed for
      url: Base URL of the daemon
      timeout: Request timeout in seconds

  Returns:
      Whether the daemon rang the alarm (False for a stale trigger)
  """
  response = httpx.post(
    f"{url.rstrip('/')}/api/alarm/fire",
    json={"trigger_id": trigger_id},
    timeout=timeout,
  )
  response.raise_for_status()
  return bool(response.json().get("fired", False))


def main(argv: Optional[list[str]] = None) -> None:
  """Main entrypoint for the fire program."""
  logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
  )
  parser = argparse.ArgumentParser(
    description="Deliver a due alarm trigger to the pomodoro alarm daemon."
  )
  parser.add_argument(
    "--trigger-id",
    required=True,
    help="Id of the trigger this timer was armed for",
  )
  parser.add_argument(
    "--url",
    default=AppConfig.daemon_url(),
    help=f"Daemon base URL (default: {AppConfig.daemon_url()})",
  )
  args = parser.parse_args(argv)

  try:
    fired = send_fire_event(args.trigger_id, args.url)
  except httpx.HTTPError as e:
    # the daemon fires overdue triggers when it starts
    logger.error(f"Could not deliver trigger {args.trigger_id}: {e}")
    sys.exit(1)

  if fired:
    logger.info(f"Trigger {args.trigger_id} fired")
  else:
    logger.info(f"Trigger {args.trigger_id} was no longer pending")


if __name__ == "__main__":
  main()
