"""
TCX export API routes.

Turns a pace plan into a downloadable lap-based training log.
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter
from fastapi.responses import Response
from pydantic import BaseModel, Field

from ...exceptions import ValidationError
from ...export.tcx import TCXEncoder, build_race_laps
from ...metrics.pacing import calculate_paces
from ...models.pacing import CurrentPaceInput, GoalTime, PacingMode


router = APIRouter()
logger = logging.getLogger(__name__)


TCX_MEDIA_TYPE = "application/vnd.garmin.tcx+xml"


class ExportTCXRequest(BaseModel):
    """Request body for a race-plan TCX export."""
    course: str = Field(..., description="olympic or ironman")
    goal: GoalTime
    paces: Optional[CurrentPaceInput] = None
    mode: Optional[PacingMode] = None
    start: datetime = Field(..., description="Race start; naive values are taken as UTC")
    name: Optional[str] = Field(None, description="File name without extension")


@router.post("/tcx")
async def export_tcx(request: ExportTCXRequest):
    """
    Export a pace plan as a TCX file.

    Laps are swim, T1, bike, T2 and run, each starting where the previous
    one ended.
    """
    logger.info(f"[export_tcx] course={request.course}, start={request.start.isoformat()}")

    try:
        result = calculate_paces(request.course, request.goal, request.paces, mode=request.mode)
    except ValueError as e:
        raise ValidationError(str(e)) from e

    laps = build_race_laps(result, request.goal.t1_minutes, request.goal.t2_minutes)
    tcx_bytes = TCXEncoder().encode(request.start, laps)

    safe_name = (request.name or f"{result.course.value}_race_plan").replace(" ", "_").lower()[:40]
    filename = f"{safe_name}.tcx"

    return Response(
        content=tcx_bytes,
        media_type=TCX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
