# db/schemas/user_permission.py
from datetime import datetime
from typing import Optional
from depth_charts.db.schemas._base import OrmModel
from depth_charts.db.enums import Capability

class UserPermissionBase(OrmModel):
    user_id: int
    team_id: int
    capability: Capability
    is_granted: bool = True
    expires_at: Optional[datetime] = None
    granted_by: Optional[int] = None

class UserPermissionCreate(UserPermissionBase): ...
class UserPermissionRead(UserPermissionBase):
    id: int
    created_at: datetime
