# db/schemas/audit_log.py
from datetime import datetime
from typing import Optional
from ._base import OrmModel

class AuditLogBase(OrmModel):
    actor_id: Optional[int] = None
    team_id: Optional[int] = None
    depth_chart_id: Optional[int] = None
    action: str
    payload: dict = {}

class AuditLogCreate(AuditLogBase): ...
class AuditLogRead(AuditLogBase):
    id: int
    created_at: datetime
