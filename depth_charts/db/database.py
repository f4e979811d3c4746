# db/database.py
from contextlib import asynccontextmanager
from contextvars import ContextVar
from typing import AsyncIterator, Optional, ClassVar, Self, Any, Iterable, Tuple

from sqlalchemy import Select, select, func, update
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload
from sqlalchemy.pool import NullPool

from depth_charts.config import Settings
from depth_charts.db.enums import Capability, PlayerStatus
from depth_charts.db.models._base import Base
from depth_charts.db.models.depth_chart import DepthChart
from depth_charts.db.models.position import Position
from depth_charts.db.models.assignment import Assignment
from depth_charts.db.models.player import Player
from depth_charts.db.models.user_permission import UserPermission
from depth_charts.db.models.audit_log import AuditLog
from depth_charts.db.schemas.depth_chart import DepthChartCreate, DepthChartUpdate, DepthChartRead, DepthChartDetail
from depth_charts.db.schemas.position import PositionCreate, PositionUpdate, PositionRead
from depth_charts.db.schemas.assignment import AssignmentCreate, AssignmentRead, AssignmentWithPlayer
from depth_charts.db.schemas.player import PlayerCreate, PlayerRead
from depth_charts.db.schemas.user_permission import UserPermissionCreate, UserPermissionRead
from depth_charts.db.schemas.audit_log import AuditLogCreate, AuditLogRead
from depth_charts.errors import Conflict, NotFound
from depth_charts.utils.sentinels import provided_fields


# ---------------------------------
# Active-row predicates
# ---------------------------------
# Every read or write path goes through one of these so that soft-deleted rows
# and rows of other teams can never leak into a query by omission.

def _chart_scope(team_id: int, *, include_deleted: bool = False) -> Select:
    stmt = select(DepthChart).where(DepthChart.team_id == team_id)
    if not include_deleted:
        stmt = stmt.where(DepthChart.is_active.is_(True))
    return stmt


def _position_scope(team_id: int) -> Select:
    return (
        select(Position)
        .join(DepthChart, DepthChart.id == Position.depth_chart_id)
        .where(
            DepthChart.team_id == team_id,
            DepthChart.is_active.is_(True),
            Position.is_active.is_(True),
        )
    )


def _assignment_scope(team_id: int) -> Select:
    # the position itself may be soft-deleted: orphaned assignments stay removable
    return (
        select(Assignment)
        .join(Position, Position.id == Assignment.position_id)
        .join(DepthChart, DepthChart.id == Position.depth_chart_id)
        .where(
            DepthChart.team_id == team_id,
            DepthChart.is_active.is_(True),
            Assignment.is_active.is_(True),
        )
    )


def _assigned_player_ids(chart_id: int) -> Select:
    return select(Assignment.player_id).where(
        Assignment.depth_chart_id == chart_id,
        Assignment.is_active.is_(True),
    )


# session of the enclosing DataBase.transaction(), per task
_current_session: ContextVar[Optional[AsyncSession]] = ContextVar("depth_charts_session", default=None)


class DataBase():
    """
    Async SQLAlchemy database singleton.
    Usage:
        db = DataBase()  # same instance everywhere
        async with db.session() as s:
            ...

    Each public method runs in its own transaction. Methods that must be atomic
    across several statements (default switching, duplication, assignment) do all
    of their work inside a single ``session()`` block. Services wrap a mutation
    and its audit entry in :meth:`transaction` so both commit together.
    """
    _instance: ClassVar[Optional["DataBase"]] = None

    def __new__(cls, *args: Any, **kwargs: Any) -> Self:
        if cls._instance is None:
            cls._instance = super().__new__(cls)

        return cls._instance

    def __init__(self, echo: Optional[bool] = None, url: Optional[str] = None) -> None:
        if getattr(self, "_initialized", False):
            return

        settings = Settings()
        url = url or settings.database_url
        echo = settings.sql_echo if echo is None else echo

        engine_kwargs: dict[str, Any] = {"echo": echo, "pool_pre_ping": True}
        if url.startswith("sqlite"):
            # aiosqlite connections are bound to the loop that opened them
            engine_kwargs["poolclass"] = NullPool

        self._engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        self._sessionmaker: async_sessionmaker[AsyncSession] = async_sessionmaker(
            bind=self._engine,
            expire_on_commit=False,
            autoflush=False,
        )

        self._initialized = True

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Provides an AsyncSession with safe commit/rollback semantics.

        Inside :meth:`transaction` the enclosing session is reused and the
        commit (or rollback) is left to the transaction.
        """
        current = _current_session.get()
        if current is not None:
            yield current
            return

        session: AsyncSession = self._sessionmaker()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """
        Run several facade calls as one unit of work.

        Usage:
            async with db.transaction():
                chart = await db.update_depth_chart(...)
                await db.create_audit_log(...)
        """
        async with self.session() as s:
            token = _current_session.set(s)
            try:
                yield
            finally:
                _current_session.reset(token)

    # --- schema management helpers ---

    async def create_all(self) -> None:
        """
        Create tables based on Base metadata. Use only in dev/tests; prefer migrations in prod.
        """
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        """Close pooled connections and forget the singleton (used between test runs)."""
        await self._engine.dispose()
        type(self)._instance = None

    # ---------------------------------
    # Depth charts
    # ---------------------------------

    async def list_depth_charts(self, team_id: int) -> list[DepthChartRead]:
        """Active charts of a team: the default chart first, then newest first."""
        async with self.session() as s:
            stmt = _chart_scope(team_id).order_by(
                DepthChart.is_default.desc(),
                DepthChart.created_at.desc(),
                DepthChart.id.desc(),
            )
            rows = (await s.execute(stmt)).scalars().all()

        return [DepthChartRead.model_validate(r) for r in rows]

    async def get_depth_chart(
        self,
        chart_id: int,
        team_id: int,
        *,
        include_deleted: bool = False,
    ) -> Optional[DepthChartRead]:
        """
        Fetch a chart of a team.

        Args:
            chart_id: Chart primary key.
            team_id: Owning team; a chart of another team is reported as missing.
            include_deleted: Also return soft-deleted charts (history lookups).

        Returns:
            Optional[DepthChartRead]: DTO if found; otherwise None.
        """
        async with self.session() as s:
            stmt = _chart_scope(team_id, include_deleted=include_deleted).where(DepthChart.id == chart_id)
            row = (await s.execute(stmt)).scalar_one_or_none()

        return DepthChartRead.model_validate(row) if row is not None else None

    async def get_depth_chart_detail(self, chart_id: int, team_id: int) -> Optional[DepthChartDetail]:
        """
        Fetch an active chart with its active positions (by sort_order) and each
        position's active assignments (by depth_order) with a player projection.
        """
        async with self.session() as s:
            stmt = (
                _chart_scope(team_id)
                .where(DepthChart.id == chart_id)
                .options(
                    selectinload(DepthChart.positions.and_(Position.is_active.is_(True)))
                    .selectinload(Position.assignments.and_(Assignment.is_active.is_(True)))
                    .selectinload(Assignment.player)
                )
            )
            row = (await s.execute(stmt)).scalar_one_or_none()
            detail = DepthChartDetail.model_validate(row) if row is not None else None

        return detail

    async def _clear_team_defaults(self, s: AsyncSession, team_id: int, *, keep_id: Optional[int] = None) -> None:
        # lock the team's active charts so concurrent default switches serialize
        lock_stmt = (
            select(DepthChart.id)
            .where(DepthChart.team_id == team_id, DepthChart.is_active.is_(True))
            .with_for_update()
        )
        await s.execute(lock_stmt)

        stmt = (
            update(DepthChart)
            .where(
                DepthChart.team_id == team_id,
                DepthChart.is_active.is_(True),
                DepthChart.is_default.is_(True),
            )
            .values(is_default=False)
            .execution_options(synchronize_session=False)
        )
        if keep_id is not None:
            stmt = stmt.where(DepthChart.id != keep_id)
        await s.execute(stmt)

    @staticmethod
    def _position_row(chart_id: int, position: PositionCreate | PositionRead) -> Position:
        return Position(
            depth_chart_id=chart_id,
            position_code=position.position_code,
            position_name=position.position_name,
            color=position.color,
            icon=position.icon,
            sort_order=position.sort_order,
            max_players=position.max_players,
            description=position.description,
            is_active=True,
        )

    async def create_depth_chart(
        self,
        *,
        team_id: int,
        created_by: int,
        payload: DepthChartCreate,
        positions: Iterable[PositionCreate],
    ) -> DepthChartRead:
        """
        Create a chart (version 1) with the given positions.

        When ``payload.is_default`` is set, the other defaults of the team are
        cleared in the same transaction as the insert.

        Raises:
            IntegrityError: a concurrent transaction committed another default first
                (partial unique index on team_id).
        """
        chart = DepthChart(
            team_id=team_id,
            name=payload.name,
            description=payload.description,
            is_default=payload.is_default,
            is_active=True,
            version=1,
            effective_date=payload.effective_date,
            notes=payload.notes,
            created_by=created_by,
        )

        async with self.session() as s:
            if payload.is_default:
                await self._clear_team_defaults(s, team_id)

            s.add(chart)
            await s.flush()
            s.add_all([self._position_row(chart.id, p) for p in positions])
            await s.flush()
            await s.refresh(chart)

        return DepthChartRead.model_validate(chart)

    async def update_depth_chart(
        self,
        chart_id: int,
        team_id: int,
        payload: DepthChartUpdate,
    ) -> Tuple[DepthChartRead, DepthChartRead]:
        """
        Partially update an active chart and bump its version by exactly one.

        Only fields explicitly provided (i.e., not MISSING) are updated. The
        version is incremented even when nothing else changes.

        Returns:
            (before, after) snapshots.

        Raises:
            NotFound: no active chart with this id for the team.
            IntegrityError: on a concurrent default switch.
        """
        async with self.session() as s:
            stmt = _chart_scope(team_id).where(DepthChart.id == chart_id).with_for_update()
            db_chart = (await s.execute(stmt)).scalar_one_or_none()
            if db_chart is None:
                raise NotFound("Depth chart not found")

            before = DepthChartRead.model_validate(db_chart)
            changes = provided_fields(payload)

            if changes.get("is_default") is True and not db_chart.is_default:
                await self._clear_team_defaults(s, team_id, keep_id=db_chart.id)

            for field, value in changes.items():
                setattr(db_chart, field, value)
            db_chart.version = DepthChart.version + 1

            await s.flush()
            await s.refresh(db_chart)
            after = DepthChartRead.model_validate(db_chart)

        return before, after

    async def soft_delete_depth_chart(self, chart_id: int, team_id: int) -> DepthChartRead:
        """
        Raises:
            NotFound: no active chart with this id for the team (including a second delete).
        """
        async with self.session() as s:
            stmt = _chart_scope(team_id).where(DepthChart.id == chart_id).with_for_update()
            db_chart = (await s.execute(stmt)).scalar_one_or_none()
            if db_chart is None:
                raise NotFound("Depth chart not found")

            db_chart.is_active = False
            await s.flush()
            await s.refresh(db_chart)

        return DepthChartRead.model_validate(db_chart)

    async def duplicate_depth_chart(self, chart_id: int, team_id: int, created_by: int) -> DepthChartRead:
        """
        Copy an active chart and its active positions into a new non-default chart.
        Assignments are never copied.

        Raises:
            NotFound: source chart missing, deleted or owned by another team.
        """
        async with self.session() as s:
            stmt = _chart_scope(team_id).where(DepthChart.id == chart_id)
            source = (await s.execute(stmt)).scalar_one_or_none()
            if source is None:
                raise NotFound("Depth chart not found")

            pos_stmt = (
                select(Position)
                .where(Position.depth_chart_id == source.id, Position.is_active.is_(True))
                .order_by(Position.sort_order.asc(), Position.id.asc())
            )
            source_positions = (await s.execute(pos_stmt)).scalars().all()

            copy = DepthChart(
                team_id=team_id,
                name=f"{source.name} (Copy)"[:100],
                description=source.description,
                is_default=False,
                is_active=True,
                version=1,
                effective_date=None,
                notes=f"Duplicated from {source.name}",
                created_by=created_by,
            )
            s.add(copy)
            await s.flush()
            s.add_all([
                self._position_row(copy.id, PositionRead.model_validate(p)) for p in source_positions
            ])
            await s.flush()
            await s.refresh(copy)

        return DepthChartRead.model_validate(copy)

    # ---------------------------------
    # Positions
    # ---------------------------------

    async def get_position(self, position_id: int, team_id: int) -> Optional[PositionRead]:
        """Active position whose chart is active and owned by the team."""
        async with self.session() as s:
            stmt = _position_scope(team_id).where(Position.id == position_id)
            row = (await s.execute(stmt)).scalar_one_or_none()

        return PositionRead.model_validate(row) if row is not None else None

    async def create_position(self, chart_id: int, team_id: int, payload: PositionCreate) -> PositionRead:
        """
        Raises:
            NotFound: chart missing, deleted or owned by another team.
        """
        async with self.session() as s:
            chart_stmt = _chart_scope(team_id).where(DepthChart.id == chart_id)
            chart = (await s.execute(chart_stmt)).scalar_one_or_none()
            if chart is None:
                raise NotFound("Depth chart not found")

            position = self._position_row(chart.id, payload)
            s.add(position)
            await s.flush()
            await s.refresh(position)

        return PositionRead.model_validate(position)

    async def update_position(
        self,
        position_id: int,
        team_id: int,
        payload: PositionUpdate,
    ) -> Tuple[PositionRead, PositionRead]:
        """
        Partially update a position resolved through its team-owned active chart.

        Raises:
            NotFound: position missing/deleted, or its chart is deleted or foreign.
        """
        async with self.session() as s:
            stmt = _position_scope(team_id).where(Position.id == position_id)
            db_position = (await s.execute(stmt)).scalar_one_or_none()
            if db_position is None:
                raise NotFound("Position not found")

            before = PositionRead.model_validate(db_position)
            for field, value in provided_fields(payload).items():
                setattr(db_position, field, value)

            await s.flush()
            await s.refresh(db_position)
            after = PositionRead.model_validate(db_position)

        return before, after

    async def soft_delete_position(self, position_id: int, team_id: int) -> PositionRead:
        """
        Flip ``is_active`` on a position. Its assignments are left untouched.

        Raises:
            NotFound: see :meth:`update_position`.
        """
        async with self.session() as s:
            stmt = _position_scope(team_id).where(Position.id == position_id)
            db_position = (await s.execute(stmt)).scalar_one_or_none()
            if db_position is None:
                raise NotFound("Position not found")

            db_position.is_active = False
            await s.flush()
            await s.refresh(db_position)

        return PositionRead.model_validate(db_position)

    # ---------------------------------
    # Assignments
    # ---------------------------------

    @staticmethod
    async def _holds_position(s: AsyncSession, position: Position, player_id: int) -> bool:
        stmt = select(Assignment.id).where(
            Assignment.depth_chart_id == position.depth_chart_id,
            Assignment.position_id == position.id,
            Assignment.player_id == player_id,
            Assignment.is_active.is_(True),
        )
        return (await s.execute(stmt)).first() is not None

    async def create_assignment(
        self,
        *,
        position_id: int,
        team_id: int,
        assigned_by: int,
        payload: AssignmentCreate,
    ) -> AssignmentWithPlayer:
        """
        Assign a player of the team to a position.

        Steps (one transaction):
          1) resolve the active position through the team's active chart;
          2) resolve the player by id and team;
          3) reject an already active (chart, position, player) triple;
          4) insert and return the assignment with a player projection.

        Raises:
            NotFound: position or player not found for the team.
            Conflict: the player already holds this position on the chart.
        """
        async with self.session() as s:
            pos_stmt = _position_scope(team_id).where(Position.id == position_id)
            position = (await s.execute(pos_stmt)).scalar_one_or_none()
            if position is None:
                raise NotFound("Position not found")

            player_stmt = select(Player).where(Player.id == payload.player_id, Player.team_id == team_id)
            player = (await s.execute(player_stmt)).scalar_one_or_none()
            if player is None:
                raise NotFound("Player not found")

            if await self._holds_position(s, position, player.id):
                raise Conflict("Player is already assigned to this position")

            assignment = Assignment(
                depth_chart_id=position.depth_chart_id,
                position_id=position.id,
                player_id=player.id,
                depth_order=payload.depth_order,
                notes=payload.notes,
                assigned_by=assigned_by,
                is_active=True,
            )
            s.add(assignment)
            try:
                await s.flush()
            except IntegrityError as exc:
                # a concurrent request inserted the same active triple
                raise Conflict("Player is already assigned to this position") from exc

            stmt = (
                select(Assignment)
                .where(Assignment.id == assignment.id)
                .options(selectinload(Assignment.player))
            )
            created = (await s.execute(stmt)).scalar_one()
            result = AssignmentWithPlayer.model_validate(created)

        return result

    async def soft_delete_assignment(self, assignment_id: int, team_id: int) -> AssignmentRead:
        """
        Raises:
            NotFound: assignment missing/removed, or its chart is deleted or foreign.
        """
        async with self.session() as s:
            stmt = _assignment_scope(team_id).where(Assignment.id == assignment_id)
            db_assignment = (await s.execute(stmt)).scalar_one_or_none()
            if db_assignment is None:
                raise NotFound("Assignment not found")

            db_assignment.is_active = False
            await s.flush()
            await s.refresh(db_assignment)

        return AssignmentRead.model_validate(db_assignment)

    async def count_active_assignments(self, position_id: int) -> int:
        async with self.session() as s:
            stmt = select(func.count(Assignment.id)).where(
                Assignment.position_id == position_id,
                Assignment.is_active.is_(True),
            )
            return int((await s.execute(stmt)).scalar_one())

    async def assigned_player_ids(self, chart_id: int) -> set[int]:
        """Player ids holding any active assignment on the chart, whatever the position."""
        async with self.session() as s:
            rows = (await s.execute(_assigned_player_ids(chart_id))).scalars().all()

        return set(rows)

    async def list_available_players(self, chart_id: int, team_id: int) -> list[PlayerRead]:
        """
        Active players of the team with no active assignment anywhere on the chart,
        ordered by first name then last name.
        """
        async with self.session() as s:
            stmt = (
                select(Player)
                .where(
                    Player.team_id == team_id,
                    Player.status == PlayerStatus.ACTIVE,
                    Player.id.not_in(_assigned_player_ids(chart_id)),
                )
                .order_by(Player.first_name.asc(), Player.last_name.asc(), Player.id.asc())
            )
            rows = (await s.execute(stmt)).scalars().all()

        return [PlayerRead.model_validate(r) for r in rows]

    # ---------------------------------
    # Players
    # ---------------------------------

    async def create_player(self, payload: PlayerCreate) -> PlayerRead:
        player = Player(**payload.model_dump())

        async with self.session() as s:
            s.add(player)
            await s.flush()
            await s.refresh(player)

        return PlayerRead.model_validate(player)

    # ---------------------------------
    # Permissions
    # ---------------------------------

    async def get_permission(
        self,
        user_id: int,
        team_id: int,
        capability: Capability,
    ) -> Optional[UserPermissionRead]:
        async with self.session() as s:
            stmt = select(UserPermission).where(
                UserPermission.user_id == user_id,
                UserPermission.team_id == team_id,
                UserPermission.capability == capability,
            )
            row = (await s.execute(stmt)).scalar_one_or_none()

        return UserPermissionRead.model_validate(row) if row is not None else None

    async def upsert_permission(self, payload: UserPermissionCreate) -> UserPermissionRead:
        """Create or overwrite the grant for (user, team, capability)."""
        async with self.session() as s:
            stmt = select(UserPermission).where(
                UserPermission.user_id == payload.user_id,
                UserPermission.team_id == payload.team_id,
                UserPermission.capability == payload.capability,
            )
            row = (await s.execute(stmt)).scalar_one_or_none()
            if row is None:
                row = UserPermission(**payload.model_dump())
                s.add(row)
            else:
                row.is_granted = payload.is_granted
                row.expires_at = payload.expires_at
                row.granted_by = payload.granted_by

            await s.flush()
            await s.refresh(row)

        return UserPermissionRead.model_validate(row)

    # ---------------------------------
    # Audit log helpers
    # ---------------------------------

    async def create_audit_log(self, payload: AuditLogCreate) -> AuditLogRead:
        """Persist a new audit log entry."""
        async with self.session() as s:
            record = AuditLog(
                actor_id=payload.actor_id,
                team_id=payload.team_id,
                depth_chart_id=payload.depth_chart_id,
                action=payload.action,
                payload=dict(payload.payload or {}),
            )
            s.add(record)
            await s.flush()
            await s.refresh(record)
            return AuditLogRead.model_validate(record)

    async def list_audit_logs(
        self,
        depth_chart_id: int,
        *,
        limit: int = 100,
        offset: int = 0,
    ) -> list[AuditLogRead]:
        """One page of a chart's audit entries, oldest first."""
        async with self.session() as s:
            stmt = (
                select(AuditLog)
                .where(AuditLog.depth_chart_id == depth_chart_id)
                .order_by(AuditLog.created_at.asc(), AuditLog.id.asc())
                .limit(max(1, int(limit)))
                .offset(max(0, int(offset)))
            )
            rows = (await s.execute(stmt)).scalars().all()

        return [AuditLogRead.model_validate(row) for row in rows]
