# app/routers/depth_charts.py
from typing import Annotated

from fastapi import APIRouter, Depends, Path, status

from depth_charts.db.enums import Capability
from depth_charts.db.schemas.depth_chart import DepthChartCreate, DepthChartUpdate, DuplicatedChart
from depth_charts.app.middlewares.caller import require
from depth_charts.app.routers.utils import chart_service, ok
from depth_charts.app.services.chart import ChartService
from depth_charts.app.services.permission import Caller

router = APIRouter(prefix="/depth-charts", tags=["depth-charts"])

ChartId = Annotated[int, Path(gt=0)]
Charts = Annotated[ChartService, Depends(chart_service)]


# --------- read ---------
@router.get("/")
async def list_charts(caller: Annotated[Caller, Depends(require(Capability.VIEW_CHART))], svc: Charts):
    return ok(await svc.list_charts(caller.team_id))


@router.get("/byId/{chart_id}")
async def get_chart(chart_id: ChartId, caller: Annotated[Caller, Depends(require(Capability.VIEW_CHART))], svc: Charts):
    return ok(await svc.get(chart_id, caller.team_id))


@router.get("/{chart_id}/history")
async def chart_history(chart_id: ChartId, caller: Annotated[Caller, Depends(require(Capability.VIEW_CHART))], svc: Charts):
    return ok(await svc.history(chart_id, caller.team_id))


# --------- write ---------
@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_chart(
    payload: DepthChartCreate,
    caller: Annotated[Caller, Depends(require(Capability.CREATE_CHART))],
    svc: Charts,
):
    chart = await svc.create(caller.team_id, caller.user_id, payload)
    return ok(chart, message="Depth chart created successfully")


@router.put("/byId/{chart_id}")
async def update_chart(
    chart_id: ChartId,
    patch: DepthChartUpdate,
    caller: Annotated[Caller, Depends(require(Capability.EDIT_CHART))],
    svc: Charts,
):
    chart = await svc.update(chart_id, caller.team_id, patch, actor_id=caller.user_id)
    return ok(chart, message="Depth chart updated successfully")


@router.delete("/byId/{chart_id}")
async def delete_chart(chart_id: ChartId, caller: Annotated[Caller, Depends(require(Capability.DELETE_CHART))], svc: Charts):
    await svc.soft_delete(chart_id, caller.team_id, actor_id=caller.user_id)
    return ok(message="Depth chart deleted successfully")


@router.post("/{chart_id}/duplicate")
async def duplicate_chart(
    chart_id: ChartId,
    caller: Annotated[Caller, Depends(require(Capability.CREATE_CHART))],
    svc: Charts,
):
    copy = await svc.duplicate(chart_id, caller.team_id, caller.user_id)
    return ok(DuplicatedChart(id=copy.id), message="Depth chart duplicated successfully")
