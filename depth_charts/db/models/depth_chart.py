# db/models/depth_chart.py
from datetime import date, datetime
from typing import List, Optional
from sqlalchemy import Boolean, Date, DateTime, Index, Integer, String, Text, func, text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from depth_charts.db.models._base import Base

class DepthChart(Base):
    __tablename__ = "depth_chart"
    __table_args__ = (
        # at most one active default chart per team
        Index(
            "uq_depth_chart_team_default",
            "team_id",
            unique=True,
            postgresql_where=text("is_default AND is_active"),
            sqlite_where=text("is_default AND is_active"),
        ),
        Index("ix_depth_chart_team_active", "team_id", "is_active"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    team_id: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    effective_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_by: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    positions: Mapped[List["Position"]] = relationship(
        back_populates="depth_chart", order_by="[Position.sort_order, Position.id]"
    )
