# db/schemas/position.py
from datetime import datetime
from typing import Annotated, Optional
from pydantic import Field, StringConstraints
from depth_charts.db.schemas._base import OrmModel
from depth_charts.db.schemas.assignment import AssignmentWithPlayer
from depth_charts.utils.sentinels import Missing

PositionCode = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=10)]
PositionName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]
HexColor = Annotated[str, StringConstraints(pattern=r"^#[0-9A-Fa-f]{6}$")]
Icon = Annotated[str, StringConstraints(max_length=50)]
SortOrder = Annotated[int, Field(ge=0)]
MaxPlayers = Annotated[int, Field(ge=1)]
PositionDescription = Annotated[str, StringConstraints(max_length=500)]

class PositionBase(OrmModel):
    position_code: PositionCode
    position_name: PositionName
    color: Optional[HexColor] = None
    icon: Optional[Icon] = None
    sort_order: SortOrder = 0
    max_players: Optional[MaxPlayers] = None
    description: Optional[PositionDescription] = None

class PositionCreate(PositionBase): ...
class PositionUpdate(OrmModel):
    position_code: PositionCode | Missing = Missing()
    position_name: PositionName | Missing = Missing()
    color: HexColor | Missing | None = Missing()
    icon: Icon | Missing | None = Missing()
    sort_order: SortOrder | Missing = Missing()
    max_players: MaxPlayers | Missing | None = Missing()
    description: PositionDescription | Missing | None = Missing()

class PositionRead(PositionBase):
    id: int
    depth_chart_id: int
    is_active: bool
    created_at: datetime

class PositionDetail(PositionRead):
    assignments: list[AssignmentWithPlayer] = []
