# app/services/permission.py
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Optional, Protocol, runtime_checkable

from depth_charts.db.database import DataBase
from depth_charts.db.enums import Capability
from depth_charts.db.schemas.user_permission import UserPermissionCreate, UserPermissionRead
from depth_charts.errors import Forbidden

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Caller:
	"""Authenticated identity resolved upstream: who is calling and for which team."""
	user_id: int
	team_id: int


@runtime_checkable
class CapabilityChecker(Protocol):
	async def check(self, caller: Caller, capability: Capability) -> None:
		"""Return normally when allowed, raise :class:`Forbidden` otherwise."""
		...


class AllowAll:
	"""Checker for trusted internal callers (scripts, tests)."""

	async def check(self, caller: Caller, capability: Capability) -> None:
		return None


class PermissionService:
	"""
	Capability checks backed by the ``user_permission`` table.

	A grant is per (user, team, capability). Missing, revoked and expired grants
	are all refused with :class:`Forbidden`.
	"""

	def __init__(self, database: Optional[DataBase] = None) -> None:
		self._database = database or DataBase()

	async def check(self, caller: Caller, capability: Capability) -> None:
		permission = await self._database.get_permission(caller.user_id, caller.team_id, capability)

		if permission is None or not permission.is_granted:
			logger.info("Denied %s to user %s on team %s", capability, caller.user_id, caller.team_id)
			raise Forbidden(f"Access denied. Required permission: {capability}")

		if permission.expires_at is not None and datetime.now(UTC).replace(tzinfo=None) > permission.expires_at:
			logger.info("Expired %s for user %s on team %s", capability, caller.user_id, caller.team_id)
			raise Forbidden("Permission has expired")

	async def grant(
		self,
		user_id: int,
		team_id: int,
		capability: Capability,
		*,
		expires_at: Optional[datetime] = None,
		granted_by: Optional[int] = None,
	) -> UserPermissionRead:
		return await self._database.upsert_permission(
			UserPermissionCreate(
				user_id=user_id,
				team_id=team_id,
				capability=capability,
				is_granted=True,
				expires_at=expires_at,
				granted_by=granted_by,
			)
		)

	async def grant_all(self, user_id: int, team_id: int, *, granted_by: Optional[int] = None) -> list[UserPermissionRead]:
		return [
			await self.grant(user_id, team_id, capability, granted_by=granted_by)
			for capability in Capability
		]

	async def revoke(self, user_id: int, team_id: int, capability: Capability) -> UserPermissionRead:
		return await self._database.upsert_permission(
			UserPermissionCreate(
				user_id=user_id,
				team_id=team_id,
				capability=capability,
				is_granted=False,
			)
		)
