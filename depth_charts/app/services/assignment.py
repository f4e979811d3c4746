# app/services/assignment.py
import logging
from typing import Optional

from depth_charts.db.database import DataBase
from depth_charts.db.enums import ChartAction
from depth_charts.db.schemas.assignment import AssignmentCreate, AssignmentRead, AssignmentWithPlayer
from depth_charts.db.schemas.player import PlayerRead
from depth_charts.errors import NotFound
from depth_charts.app.services.audit_log import AuditLogService

logger = logging.getLogger(__name__)


class AssignmentService:
	"""
	Player-to-position assignments.

	Strict rule: this service does **not** touch SQLAlchemy sessions or models.
	It only calls the DataBase facade and returns DTOs.
	"""

	def __init__(self, database: Optional[DataBase] = None) -> None:
		self._database = database or DataBase()
		self._audit = AuditLogService(self._database)

	async def assign(
		self,
		position_id: int,
		team_id: int,
		actor_id: int,
		payload: AssignmentCreate,
	) -> AssignmentWithPlayer:
		"""
		Put a player of the team on a position.

		The same player may hold several positions on one chart, but never the
		same position twice. ``max_players`` is advisory: going over it is logged,
		not rejected. ``depth_order`` is not required to be unique.

		Raises:
			NotFound: position (or its chart) or player not found for the team.
			Conflict: the player already holds this position.
		"""
		async with self._database.transaction():
			assignment = await self._database.create_assignment(
				position_id=position_id,
				team_id=team_id,
				assigned_by=actor_id,
				payload=payload,
			)
			await self._audit.log(
				action=ChartAction.PLAYER_ASSIGNED,
				actor_id=actor_id,
				team_id=team_id,
				depth_chart_id=assignment.depth_chart_id,
				payload={
					"assignment_id": assignment.id,
					"position_id": assignment.position_id,
					"player_id": assignment.player_id,
					"depth_order": assignment.depth_order,
				},
			)

		logger.info(
			"Assigned player %s to position %s on chart %s (depth %s)",
			assignment.player_id,
			assignment.position_id,
			assignment.depth_chart_id,
			assignment.depth_order,
		)
		await self._warn_if_over_capacity(assignment.position_id, team_id)
		return assignment

	async def unassign(self, assignment_id: int, team_id: int, actor_id: Optional[int] = None) -> AssignmentRead:
		"""
		Raises:
			NotFound: assignment missing, already removed, or on a foreign/deleted chart.
		"""
		async with self._database.transaction():
			assignment = await self._database.soft_delete_assignment(assignment_id, team_id)
			await self._audit.log(
				action=ChartAction.PLAYER_UNASSIGNED,
				actor_id=actor_id,
				team_id=team_id,
				depth_chart_id=assignment.depth_chart_id,
				payload={
					"assignment_id": assignment.id,
					"position_id": assignment.position_id,
					"player_id": assignment.player_id,
				},
			)

		logger.info("Removed assignment %s from chart %s", assignment.id, assignment.depth_chart_id)
		return assignment

	async def exclusion_set(self, chart_id: int) -> set[int]:
		"""Players already on the chart at any position."""
		return await self._database.assigned_player_ids(chart_id)

	async def available_players(self, chart_id: int, team_id: int) -> list[PlayerRead]:
		"""
		Active team players not assigned anywhere on the chart, by first then last name.

		The exclusion is position-agnostic, while :meth:`assign` lets one player
		hold several positions. Both behaviours are intentional.

		Raises:
			NotFound: chart missing, deleted or owned by another team.
		"""
		chart = await self._database.get_depth_chart(chart_id, team_id)
		if chart is None:
			raise NotFound("Depth chart not found")

		return await self._database.list_available_players(chart.id, team_id)

	async def _warn_if_over_capacity(self, position_id: int, team_id: int) -> None:
		position = await self._database.get_position(position_id, team_id)
		if position is None or position.max_players is None:
			return

		filled = await self._database.count_active_assignments(position.id)
		if filled > position.max_players:
			logger.warning(
				"Position %s (%s) holds %s players, over its advisory max of %s",
				position.id,
				position.position_code,
				filled,
				position.max_players,
			)
