# app/services/position.py
import logging
from typing import Optional

from depth_charts.db.database import DataBase
from depth_charts.db.enums import ChartAction
from depth_charts.db.schemas.position import PositionCreate, PositionRead, PositionUpdate
from depth_charts.app.services.audit_log import AuditLogService

logger = logging.getLogger(__name__)


class PositionService:
	"""Positions inside a depth chart. Every lookup is scoped to the caller's team."""

	def __init__(self, database: Optional[DataBase] = None) -> None:
		self._database = database or DataBase()
		self._audit = AuditLogService(self._database)

	async def add(
		self,
		chart_id: int,
		team_id: int,
		payload: PositionCreate,
		actor_id: Optional[int] = None,
	) -> PositionRead:
		async with self._database.transaction():
			position = await self._database.create_position(chart_id, team_id, payload)
			await self._audit.log(
				action=ChartAction.POSITION_ADDED,
				actor_id=actor_id,
				team_id=team_id,
				depth_chart_id=position.depth_chart_id,
				payload={"position_id": position.id, "position_code": position.position_code},
			)

		logger.info("Added position %s (%s) to chart %s", position.id, position.position_code, chart_id)
		return position

	async def update(
		self,
		position_id: int,
		team_id: int,
		patch: PositionUpdate,
		actor_id: Optional[int] = None,
	) -> PositionRead:
		async with self._database.transaction():
			before, after = await self._database.update_position(position_id, team_id, patch)
			await self._audit.log(
				action=ChartAction.POSITION_UPDATED,
				actor_id=actor_id,
				team_id=team_id,
				depth_chart_id=after.depth_chart_id,
				payload={"position_id": after.id, "changes": self._audit.diff(before, after)},
			)
		return after

	async def soft_delete(self, position_id: int, team_id: int, actor_id: Optional[int] = None) -> PositionRead:
		# assignments on the position stay active
		async with self._database.transaction():
			position = await self._database.soft_delete_position(position_id, team_id)
			await self._audit.log(
				action=ChartAction.POSITION_DELETED,
				actor_id=actor_id,
				team_id=team_id,
				depth_chart_id=position.depth_chart_id,
				payload={"position_id": position.id, "position_code": position.position_code},
			)

		logger.info("Deleted position %s from chart %s", position.id, position.depth_chart_id)
		return position
