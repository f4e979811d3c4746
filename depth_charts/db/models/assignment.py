# db/models/assignment.py
from datetime import datetime
from typing import Optional
from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, func, text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from depth_charts.db.models._base import Base

class Assignment(Base):
    __tablename__ = "depth_chart_player"
    __table_args__ = (
        Index(
            "uq_depth_chart_player_active",
            "depth_chart_id",
            "position_id",
            "player_id",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active"),
        ),
        Index("ix_depth_chart_player_chart_active", "depth_chart_id", "is_active"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    depth_chart_id: Mapped[int] = mapped_column(Integer, ForeignKey("depth_chart.id", ondelete="CASCADE"), nullable=False)
    position_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("depth_chart_position.id", ondelete="CASCADE"), nullable=False, index=True
    )
    player_id: Mapped[int] = mapped_column(Integer, ForeignKey("player.id", ondelete="CASCADE"), nullable=False, index=True)
    depth_order: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    notes: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    assigned_by: Mapped[int] = mapped_column(Integer, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    assigned_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, server_default=func.now())

    position: Mapped["Position"] = relationship(back_populates="assignments")
    player: Mapped["Player"] = relationship()
