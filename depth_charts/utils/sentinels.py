# utils/sentinels.py
from typing import Any, Self, ClassVar, Optional
from pydantic_core import core_schema, PydanticCustomError
from pydantic.json_schema import JsonSchemaValue

class Missing:
	"""Marker for a patch field the caller did not send (distinct from an explicit null)."""
	_instance: ClassVar[Optional["Missing"]] = None

	def __new__(cls) -> Self:
		if cls._instance is None:
			cls._instance = super().__new__(cls)
		return cls._instance

	def __repr__(self) -> str:
		return "MISSING"

	def __bool__(self) -> bool:
		return False

	@classmethod
	def __get_pydantic_core_schema__(cls, _source, _handler) -> core_schema.CoreSchema:
		def validate(v):
			if v is cls._instance:
				return v
			raise PydanticCustomError("missing_sentinel", "value is not the Missing sentinel")
		return core_schema.no_info_plain_validator_function(validate)

	@classmethod
	def __get_pydantic_json_schema__(cls, _core_schema: core_schema.CoreSchema, _handler) -> JsonSchemaValue:
		return {
			"title": "Missing sentinel (internal)",
			"type": "string",
			"const": "MISSING",
			"description": "Internal placeholder meaning 'field not sent'.",
			"readOnly": True,
			"x-internal": True,
		}


MISSING = Missing()


def provided(value: Any) -> bool:
	return value is not MISSING


def provided_fields(patch: Any, *, exclude: tuple[str, ...] = ("id",)) -> dict[str, Any]:
	"""Collect the fields of a pydantic patch DTO that were actually sent."""
	return {
		name: getattr(patch, name)
		for name in type(patch).model_fields
		if name not in exclude and provided(getattr(patch, name))
	}
