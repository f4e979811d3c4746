# app/routers/recommendations.py
from typing import Annotated

from fastapi import APIRouter, Depends, Path

from depth_charts.db.enums import Capability
from depth_charts.app.middlewares.caller import require
from depth_charts.app.routers.utils import ok, recommendation_service
from depth_charts.app.services.permission import Caller
from depth_charts.app.services.recommendation import RecommendationService

router = APIRouter(prefix="/depth-charts", tags=["recommendations"])


# one handler for both paths
@router.get("/{chart_id}/recommended-players/{position_id}")
@router.get("/byId/{chart_id}/recommended-players/{position_id}")
async def recommended_players(
    chart_id: Annotated[int, Path(gt=0)],
    position_id: Annotated[int, Path(gt=0)],
    caller: Annotated[Caller, Depends(require(Capability.ASSIGN_PLAYERS))],
    svc: Annotated[RecommendationService, Depends(recommendation_service)],
):
    return ok(await svc.recommend_for_position(chart_id, position_id, caller.team_id))
