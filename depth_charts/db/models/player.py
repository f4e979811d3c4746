# db/models/player.py
from decimal import Decimal
from typing import Optional
from sqlalchemy import Boolean, Enum as SAEnum, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from depth_charts.db.models._base import Base
from depth_charts.db.enums import PlayerStatus, SchoolType

class Player(Base):
    __tablename__ = "player"
    __table_args__ = (
        Index("ix_player_team_status", "team_id", "status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    team_id: Mapped[int] = mapped_column(Integer, nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    school_type: Mapped[SchoolType] = mapped_column(
        SAEnum(SchoolType, name="school_type"), nullable=False, default=SchoolType.HS
    )
    position: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    graduation_year: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    status: Mapped[PlayerStatus] = mapped_column(
        SAEnum(PlayerStatus, name="player_status"), nullable=False, default=PlayerStatus.ACTIVE
    )

    # batting
    batting_avg: Mapped[Optional[Decimal]] = mapped_column(Numeric(4, 3), nullable=True)
    home_runs: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    rbi: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    stolen_bases: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # pitching
    era: Mapped[Optional[Decimal]] = mapped_column(Numeric(4, 2), nullable=True)
    wins: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    losses: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    strikeouts: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    innings_pitched: Mapped[Optional[Decimal]] = mapped_column(Numeric(4, 1), nullable=True)

    has_medical_issues: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    injury_details: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
