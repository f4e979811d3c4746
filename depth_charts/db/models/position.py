# db/models/position.py
from datetime import datetime
from typing import List, Optional
from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from depth_charts.db.models._base import Base

class Position(Base):
    __tablename__ = "depth_chart_position"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    depth_chart_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("depth_chart.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position_code: Mapped[str] = mapped_column(String(10), nullable=False)
    position_name: Mapped[str] = mapped_column(String(50), nullable=False)
    color: Mapped[Optional[str]] = mapped_column(String(7), nullable=True)
    icon: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_players: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, server_default=func.now())

    depth_chart: Mapped["DepthChart"] = relationship(back_populates="positions")
    assignments: Mapped[List["Assignment"]] = relationship(
        back_populates="position", order_by="[Assignment.depth_order, Assignment.id]"
    )
