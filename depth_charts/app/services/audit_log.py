# app/services/audit_log.py
from __future__ import annotations

import inspect
import logging
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

from depth_charts.db.database import DataBase
from depth_charts.db.schemas._base import OrmModel
from depth_charts.db.schemas.audit_log import AuditLogCreate, AuditLogRead

HISTORY_PAGE_SIZE = 500


class AuditLogService:
    """
    Append-only record of every depth chart mutation, stored in the ``audit_log`` table.

    Payloads are normalised into JSON-friendly dictionaries before being handed to
    :class:`depth_charts.db.database.DataBase`. Each entry is mirrored to the
    ``depth_charts.audit`` logger.
    """

    def __init__(self, database: Optional[DataBase] = None) -> None:
        self._database = database or DataBase()
        self._logger = logging.getLogger("depth_charts.audit")
        self._module_name = Path(__file__).name

    async def log(
        self,
        *,
        action: str,
        actor_id: int | None = None,
        team_id: int | None = None,
        depth_chart_id: int | None = None,
        payload: Any | None = None,
        include_context: bool = False,
    ) -> AuditLogRead:
        """
        Persist a low-level audit entry.

        :param action: short machine-readable label (``depth_chart.updated``, ``player.assigned``…)
        :param actor_id: user that initiated the action
        :param team_id: team scope of the action
        :param depth_chart_id: chart the entry belongs to; drives ``history`` lookups
        :param payload: arbitrary structure with details (will be serialised)
        :param include_context: whether to attach caller metadata
        """
        payload_map = self._prepare_payload(payload)
        if include_context:
            payload_map.setdefault("_meta", {}).update(self._call_context())

        entry = await self._database.create_audit_log(
            AuditLogCreate(
                action=str(action),
                actor_id=actor_id,
                team_id=team_id,
                depth_chart_id=depth_chart_id,
                payload=payload_map,
            )
        )
        self._logger.info(
            "AUDIT action=%s actor=%s chart=%s entry=%s",
            action,
            actor_id if actor_id is not None else "-",
            depth_chart_id if depth_chart_id is not None else "-",
            entry.id,
        )
        return entry

    async def list_chart_entries(self, depth_chart_id: int, *, page_size: int = HISTORY_PAGE_SIZE) -> list[AuditLogRead]:
        """Every entry of one chart, oldest first, fetched page by page."""
        entries: list[AuditLogRead] = []
        while True:
            page = await self._database.list_audit_logs(depth_chart_id, limit=page_size, offset=len(entries))
            entries.extend(page)
            if len(page) < page_size:
                return entries

    @staticmethod
    def diff(before: OrmModel, after: OrmModel) -> dict[str, dict[str, Any]]:
        """Field-level changes between two snapshots of the same record."""
        old = before.snapshot()
        new = after.snapshot()
        return {
            field: {"from": old.get(field), "to": value}
            for field, value in new.items()
            if old.get(field) != value
        }

    def _prepare_payload(self, payload: Any | None) -> dict[str, Any]:
        if payload is None:
            return {}
        serialized = self._serialize(payload)
        if isinstance(serialized, dict):
            return dict(serialized)
        return {"value": serialized}

    @classmethod
    def _serialize(cls, value: Any) -> Any:
        if value is None or isinstance(value, (str, int, float, bool)):
            return value
        if isinstance(value, Enum):
            return value.value
        if isinstance(value, Decimal):
            return float(value)
        if isinstance(value, (datetime, date)):
            return value.isoformat()
        if is_dataclass(value) and not isinstance(value, type):
            return {k: cls._serialize(v) for k, v in asdict(value).items()}
        if isinstance(value, Mapping):
            return {str(k): cls._serialize(v) for k, v in value.items()}
        if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
            return [cls._serialize(v) for v in value]
        if isinstance(value, (set, frozenset)):
            return [cls._serialize(v) for v in sorted(value, key=repr)]
        if hasattr(value, "model_dump"):
            return {k: cls._serialize(v) for k, v in value.model_dump().items()}
        return str(value)

    def _call_context(self) -> dict[str, Any]:
        stack = inspect.stack()
        for frame in stack[2:]:
            path = Path(frame.filename)
            if path.name != self._module_name:
                return {
                    "module": path.stem,
                    "location": f"{path.name}:{frame.lineno}",
                    "function": frame.function,
                }
        return {}


__all__ = ["AuditLogService"]
