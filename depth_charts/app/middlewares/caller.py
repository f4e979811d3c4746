# app/middlewares/caller.py
from typing import Annotated, Awaitable, Callable, Optional

from fastapi import Depends, Header, Request

from depth_charts.db.enums import Capability
from depth_charts.errors import Unauthenticated
from depth_charts.app.services.permission import Caller, CapabilityChecker


async def current_caller(
	x_user_id: Annotated[Optional[int], Header()] = None,
	x_team_id: Annotated[Optional[int], Header()] = None,
) -> Caller:
	"""
	Identity forwarded by the authenticating gateway.

	Session and token handling happen upstream; by the time a request reaches
	this service the gateway has resolved the user and the team it acts for.
	"""
	if x_user_id is None or x_team_id is None or x_user_id < 1 or x_team_id < 1:
		raise Unauthenticated("Not authorized, no caller identity")
	return Caller(user_id=x_user_id, team_id=x_team_id)


def require(capability: Capability) -> Callable[..., Awaitable[Caller]]:
	"""Dependency factory: resolve the caller, then ask the app's checker for ``capability``."""

	async def dependency(request: Request, caller: Annotated[Caller, Depends(current_caller)]) -> Caller:
		checker: CapabilityChecker = request.app.state.capability_checker
		await checker.check(caller, capability)
		return caller

	dependency.__name__ = f"require_{capability.value}"
	return dependency
