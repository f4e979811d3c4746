# db/schemas/player.py
from typing import Optional
from depth_charts.db.schemas._base import OrmModel
from depth_charts.db.enums import PlayerStatus, SchoolType

class PlayerBrief(OrmModel):
    id: int
    first_name: str
    last_name: str
    position: Optional[str] = None
    school_type: SchoolType = SchoolType.HS
    graduation_year: Optional[int] = None
    status: PlayerStatus = PlayerStatus.ACTIVE
    batting_avg: Optional[float] = None
    home_runs: Optional[int] = None
    rbi: Optional[int] = None
    stolen_bases: Optional[int] = None
    era: Optional[float] = None
    wins: Optional[int] = None
    losses: Optional[int] = None
    strikeouts: Optional[int] = None
    has_medical_issues: bool = False

class PlayerBase(OrmModel):
    team_id: int
    first_name: str
    last_name: str
    position: Optional[str] = None
    school_type: SchoolType = SchoolType.HS
    graduation_year: Optional[int] = None
    status: PlayerStatus = PlayerStatus.ACTIVE
    batting_avg: Optional[float] = None
    home_runs: Optional[int] = None
    rbi: Optional[int] = None
    stolen_bases: Optional[int] = None
    era: Optional[float] = None
    wins: Optional[int] = None
    losses: Optional[int] = None
    strikeouts: Optional[int] = None
    innings_pitched: Optional[float] = None
    has_medical_issues: bool = False
    injury_details: Optional[str] = None

class PlayerCreate(PlayerBase): ...
class PlayerRead(PlayerBase):
    id: int

class RankedPlayer(PlayerRead):
    score: int
    reasons: list[str] = []
