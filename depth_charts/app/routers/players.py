# app/routers/players.py
from typing import Annotated

from fastapi import APIRouter, Depends, Path, status

from depth_charts.db.enums import Capability
from depth_charts.db.schemas.assignment import AssignmentCreate
from depth_charts.app.middlewares.caller import require
from depth_charts.app.routers.utils import assignment_service, ok
from depth_charts.app.services.assignment import AssignmentService
from depth_charts.app.services.permission import Caller

router = APIRouter(prefix="/depth-charts", tags=["players"])

Assignments = Annotated[AssignmentService, Depends(assignment_service)]
Assigner = Annotated[Caller, Depends(require(Capability.ASSIGN_PLAYERS))]


@router.post("/positions/{position_id}/players", status_code=status.HTTP_201_CREATED)
async def assign_player(
    position_id: Annotated[int, Path(gt=0)],
    payload: AssignmentCreate,
    caller: Assigner,
    svc: Assignments,
):
    assignment = await svc.assign(position_id, caller.team_id, caller.user_id, payload)
    return ok(assignment, message="Player assigned successfully")


@router.delete("/players/{assignment_id}")
async def unassign_player(
    assignment_id: Annotated[int, Path(gt=0)],
    caller: Annotated[Caller, Depends(require(Capability.UNASSIGN_PLAYERS))],
    svc: Assignments,
):
    await svc.unassign(assignment_id, caller.team_id, actor_id=caller.user_id)
    return ok(message="Player removed from depth chart successfully")


@router.get("/{chart_id}/available-players")
@router.get("/byId/{chart_id}/available-players")
async def available_players(chart_id: Annotated[int, Path(gt=0)], caller: Assigner, svc: Assignments):
    return ok(await svc.available_players(chart_id, caller.team_id))
