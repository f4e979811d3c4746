# db/schemas/_base.py
from typing import Any
from pydantic import BaseModel, ConfigDict

class OrmModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    def snapshot(self, *, skip: tuple[str, ...] = ("updated_at",)) -> dict[str, Any]:
        """JSON-ready field values, as stored in audit payloads."""
        return self.model_dump(mode="json", exclude=set(skip))
