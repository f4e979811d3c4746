# db/schemas/assignment.py
from datetime import datetime
from typing import Annotated, Optional
from pydantic import Field, StringConstraints
from depth_charts.db.schemas._base import OrmModel
from depth_charts.db.schemas.player import PlayerBrief

class AssignmentCreate(OrmModel):
    player_id: Annotated[int, Field(ge=1)]
    depth_order: Annotated[int, Field(ge=1)]
    notes: Optional[Annotated[str, StringConstraints(max_length=500)]] = None

class AssignmentRead(OrmModel):
    id: int
    depth_chart_id: int
    position_id: int
    player_id: int
    depth_order: int
    notes: Optional[str] = None
    assigned_by: int
    is_active: bool
    assigned_at: datetime

class AssignmentWithPlayer(AssignmentRead):
    player: Optional[PlayerBrief] = None
