# db/models/user_permission.py
from datetime import datetime
from typing import Optional
from sqlalchemy import Boolean, DateTime, Enum as SAEnum, Integer, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column
from depth_charts.db.models._base import Base
from depth_charts.db.enums import Capability

class UserPermission(Base):
    __tablename__ = "user_permission"
    __table_args__ = (
        UniqueConstraint("user_id", "team_id", "capability", name="uq_user_permission_capability"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False)
    team_id: Mapped[int] = mapped_column(Integer, nullable=False)
    capability: Mapped[Capability] = mapped_column(SAEnum(Capability, name="capability"), nullable=False)
    is_granted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=False), nullable=True)
    granted_by: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, server_default=func.now())
