# db/schemas/depth_chart.py
from datetime import date, datetime
from typing import Annotated, Optional
from pydantic import StringConstraints
from depth_charts.db.schemas._base import OrmModel
from depth_charts.db.schemas.position import PositionCreate, PositionDetail
from depth_charts.utils.sentinels import Missing

ChartName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
LongText = Annotated[str, StringConstraints(max_length=1000)]

class DepthChartBase(OrmModel):
    name: ChartName
    description: Optional[LongText] = None
    is_default: bool = False
    effective_date: Optional[date] = None
    notes: Optional[LongText] = None

class DepthChartCreate(DepthChartBase):
    positions: Optional[list[PositionCreate]] = None

class DepthChartUpdate(OrmModel):
    name: ChartName | Missing = Missing()
    description: LongText | Missing | None = Missing()
    is_default: bool | Missing = Missing()
    effective_date: date | Missing | None = Missing()
    notes: LongText | Missing | None = Missing()

class DepthChartRead(DepthChartBase):
    id: int
    team_id: int
    is_active: bool
    version: int
    created_by: int
    created_at: datetime
    updated_at: datetime

class DepthChartDetail(DepthChartRead):
    positions: list[PositionDetail] = []

class DuplicatedChart(OrmModel):
    id: int

class ChartHistoryEntry(OrmModel):
    id: Optional[int] = None
    action: str
    description: str
    actor_id: Optional[int] = None
    created_at: datetime
    changes: dict = {}
