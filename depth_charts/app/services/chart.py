# app/services/chart.py
import logging
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError

from depth_charts.db.database import DataBase
from depth_charts.db.enums import ChartAction
from depth_charts.db.schemas.audit_log import AuditLogRead
from depth_charts.db.schemas.depth_chart import (
	ChartHistoryEntry,
	DepthChartCreate,
	DepthChartDetail,
	DepthChartRead,
	DepthChartUpdate,
)
from depth_charts.db.schemas.position import PositionCreate
from depth_charts.errors import Conflict, NotFound
from depth_charts.app.services.audit_log import AuditLogService

logger = logging.getLogger(__name__)

STANDARD_POSITIONS: tuple[PositionCreate, ...] = (
	PositionCreate(position_code="P", position_name="Pitcher", color="#EF4444", icon="Shield", sort_order=1),
	PositionCreate(position_code="C", position_name="Catcher", color="#3B82F6", icon="Shield", sort_order=2),
	PositionCreate(position_code="1B", position_name="First Base", color="#10B981", icon="Target", sort_order=3),
	PositionCreate(position_code="2B", position_name="Second Base", color="#F59E0B", icon="Target", sort_order=4),
	PositionCreate(position_code="3B", position_name="Third Base", color="#8B5CF6", icon="Target", sort_order=5),
	PositionCreate(position_code="SS", position_name="Shortstop", color="#6366F1", icon="Target", sort_order=6),
	PositionCreate(position_code="LF", position_name="Left Field", color="#EC4899", icon="Zap", sort_order=7),
	PositionCreate(position_code="CF", position_name="Center Field", color="#14B8A6", icon="Zap", sort_order=8),
	PositionCreate(position_code="RF", position_name="Right Field", color="#F97316", icon="Zap", sort_order=9),
	PositionCreate(position_code="DH", position_name="Designated Hitter", color="#06B6D4", icon="Heart", sort_order=10),
)

DEFAULT_TAKEN_MESSAGE = "Another default depth chart was set at the same time; retry the request"


class ChartService:
	"""
	Lifecycle of whole depth charts: create, update, soft delete, duplicate, history.

	Strict rule: this service does **not** touch SQLAlchemy sessions or models.
	It only calls the DataBase facade and returns DTOs.
	"""

	def __init__(self, database: Optional[DataBase] = None) -> None:
		self._database = database or DataBase()
		self._audit = AuditLogService(self._database)

	async def list_charts(self, team_id: int) -> list[DepthChartRead]:
		return await self._database.list_depth_charts(team_id)

	async def get(self, chart_id: int, team_id: int) -> DepthChartDetail:
		chart = await self._database.get_depth_chart_detail(chart_id, team_id)
		if chart is None:
			raise NotFound("Depth chart not found")
		return chart

	async def create(self, team_id: int, actor_id: int, payload: DepthChartCreate) -> DepthChartDetail:
		"""
		Create a chart at version 1.

		Omitted or empty ``positions`` seeds the ten standard positions; otherwise
		exactly the supplied list is created. With ``is_default`` the previous
		default of the team is cleared in the same transaction.

		Raises:
			Conflict: a concurrent request made another chart the default first.
		"""
		positions = payload.positions or list(STANDARD_POSITIONS)
		try:
			async with self._database.transaction():
				chart = await self._database.create_depth_chart(
					team_id=team_id,
					created_by=actor_id,
					payload=payload,
					positions=positions,
				)
				await self._audit.log(
					action=ChartAction.CREATED,
					actor_id=actor_id,
					team_id=team_id,
					depth_chart_id=chart.id,
					payload={"name": chart.name, "is_default": chart.is_default, "positions": len(positions)},
				)
		except IntegrityError as exc:
			logger.warning("Default chart race for team %s: %s", team_id, exc.orig)
			raise Conflict(DEFAULT_TAKEN_MESSAGE) from exc

		logger.info(
			"Created depth chart %s for team %s with %s positions (default=%s)",
			chart.id, team_id, len(positions), chart.is_default,
		)
		return await self.get(chart.id, team_id)

	async def update(
		self,
		chart_id: int,
		team_id: int,
		patch: DepthChartUpdate,
		actor_id: Optional[int] = None,
	) -> DepthChartRead:
		"""
		Apply a partial update. ``version`` goes up by one on every call, even an empty patch.

		Raises:
			NotFound: no active chart with this id for the team.
			Conflict: a concurrent request made another chart the default first.
		"""
		try:
			async with self._database.transaction():
				before, after = await self._database.update_depth_chart(chart_id, team_id, patch)
				await self._audit.log(
					action=ChartAction.UPDATED,
					actor_id=actor_id,
					team_id=team_id,
					depth_chart_id=after.id,
					payload={"version": after.version, "changes": self._audit.diff(before, after)},
				)
		except IntegrityError as exc:
			logger.warning("Default chart race for team %s: %s", team_id, exc.orig)
			raise Conflict(DEFAULT_TAKEN_MESSAGE) from exc

		logger.info("Updated depth chart %s to version %s", after.id, after.version)
		return after

	async def soft_delete(self, chart_id: int, team_id: int, actor_id: Optional[int] = None) -> DepthChartRead:
		"""
		Raises:
			NotFound: chart missing, foreign, or already deleted.
		"""
		async with self._database.transaction():
			chart = await self._database.soft_delete_depth_chart(chart_id, team_id)
			await self._audit.log(
				action=ChartAction.DELETED,
				actor_id=actor_id,
				team_id=team_id,
				depth_chart_id=chart.id,
				payload={"name": chart.name},
			)

		logger.info("Deleted depth chart %s of team %s", chart.id, team_id)
		return chart

	async def duplicate(self, chart_id: int, team_id: int, actor_id: int) -> DepthChartRead:
		"""
		Copy a chart's positions (never its assignments) into a new non-default chart.

		Raises:
			NotFound: source chart missing, foreign or deleted.
		"""
		async with self._database.transaction():
			copy = await self._database.duplicate_depth_chart(chart_id, team_id, actor_id)
			await self._audit.log(
				action=ChartAction.DUPLICATED,
				actor_id=actor_id,
				team_id=team_id,
				depth_chart_id=chart_id,
				payload={"copy_id": copy.id},
			)
			await self._audit.log(
				action=ChartAction.CREATED,
				actor_id=actor_id,
				team_id=team_id,
				depth_chart_id=copy.id,
				payload={"name": copy.name, "duplicated_from": chart_id},
			)

		logger.info("Duplicated depth chart %s into %s", chart_id, copy.id)
		return copy

	async def history(self, chart_id: int, team_id: int) -> list[ChartHistoryEntry]:
		"""
		Change events of a chart, oldest first. Soft-deleted charts keep their history.

		The first entry is always the "Created" event derived from the chart row;
		recorded mutations follow.

		Raises:
			NotFound: chart missing or owned by another team.
		"""
		chart = await self._database.get_depth_chart(chart_id, team_id, include_deleted=True)
		if chart is None:
			raise NotFound("Depth chart not found")

		history = [
			ChartHistoryEntry(
				action="Created",
				description=f'Depth chart "{chart.name}" was created',
				actor_id=chart.created_by,
				created_at=chart.created_at,
			)
		]
		for entry in await self._audit.list_chart_entries(chart.id):
			if entry.action == ChartAction.CREATED:
				continue
			history.append(self._history_entry(entry))
		return history

	@staticmethod
	def _history_entry(entry: AuditLogRead) -> ChartHistoryEntry:
		payload: dict[str, Any] = entry.payload or {}
		changes = payload.get("changes", {})

		match entry.action:
			case ChartAction.UPDATED:
				fields = ", ".join(sorted(k for k in changes if k != "version")) or "no fields"
				action = "Updated"
				description = f"Version {payload.get('version')}: {fields} changed"
			case ChartAction.DELETED:
				action = "Deleted"
				description = "Depth chart was deleted"
			case ChartAction.DUPLICATED:
				action = "Duplicated"
				description = f"Copied into depth chart #{payload.get('copy_id')}"
			case ChartAction.POSITION_ADDED:
				action = "Position added"
				description = f"Position {payload.get('position_code')} added"
			case ChartAction.POSITION_UPDATED:
				action = "Position updated"
				description = f"Position #{payload.get('position_id')} updated"
			case ChartAction.POSITION_DELETED:
				action = "Position deleted"
				description = f"Position {payload.get('position_code')} removed"
			case ChartAction.PLAYER_ASSIGNED:
				action = "Player assigned"
				description = (
					f"Player #{payload.get('player_id')} assigned to position "
					f"#{payload.get('position_id')} at depth {payload.get('depth_order')}"
				)
			case ChartAction.PLAYER_UNASSIGNED:
				action = "Player unassigned"
				description = f"Player #{payload.get('player_id')} removed from position #{payload.get('position_id')}"
			case _:
				action = entry.action
				description = entry.action

		return ChartHistoryEntry(
			id=entry.id,
			action=action,
			description=description,
			actor_id=entry.actor_id,
			created_at=entry.created_at,
			changes=changes,
		)
