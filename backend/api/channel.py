"""
Method channel endpoint
Accepts commands by their UI method names (startPomodoro, stopRingtone, ...)
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel

from backend.api import get_control
from backend.control import AlarmControl

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/channel", tags=["channel"])


class ChannelResult(BaseModel):
  result: Any = None


@router.post("/{method}", response_model=ChannelResult)
async def invoke_method(
  method: str,
  arguments: Optional[Dict[str, Any]] = Body(default=None),
  control: AlarmControl = Depends(get_control),
) -> ChannelResult:
  logger.debug(f"Channel call {method} with {arguments}")
  return ChannelResult(result=await control.dispatch(method, arguments))
