# app/routers/positions.py
from typing import Annotated

from fastapi import APIRouter, Depends, Path, status

from depth_charts.db.enums import Capability
from depth_charts.db.schemas.position import PositionCreate, PositionUpdate
from depth_charts.app.middlewares.caller import require
from depth_charts.app.routers.utils import ok, position_service
from depth_charts.app.services.permission import Caller
from depth_charts.app.services.position import PositionService

router = APIRouter(prefix="/depth-charts", tags=["positions"])

Positions = Annotated[PositionService, Depends(position_service)]
Manager = Annotated[Caller, Depends(require(Capability.MANAGE_POSITIONS))]


@router.post("/{chart_id}/positions", status_code=status.HTTP_201_CREATED)
async def add_position(
    chart_id: Annotated[int, Path(gt=0)],
    payload: PositionCreate,
    caller: Manager,
    svc: Positions,
):
    position = await svc.add(chart_id, caller.team_id, payload, actor_id=caller.user_id)
    return ok(position, message="Position added successfully")


@router.put("/positions/{position_id}")
async def update_position(
    position_id: Annotated[int, Path(gt=0)],
    patch: PositionUpdate,
    caller: Manager,
    svc: Positions,
):
    position = await svc.update(position_id, caller.team_id, patch, actor_id=caller.user_id)
    return ok(position, message="Position updated successfully")


@router.delete("/positions/{position_id}")
async def delete_position(position_id: Annotated[int, Path(gt=0)], caller: Manager, svc: Positions):
    await svc.soft_delete(position_id, caller.team_id, actor_id=caller.user_id)
    return ok(message="Position deleted successfully")
