"""Tool input schemas.

Model adapters receive ``to_json_schema()`` when advertising a tool; tool
resolution calls ``parse()`` on the raw call arguments, which providers emit
either as a decoded object or as a JSON string.
"""

from __future__ import annotations

import json
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel


@runtime_checkable
class ToolSchema(Protocol):
    def parse(self, raw: Any) -> Any: ...
    def to_json_schema(self) -> dict: ...


class PydanticSchema:
    """Validates call arguments into ``model``.

    With ``strict`` no type coercion happens ("3" is not an int) and the
    advertised schema rejects unknown properties.
    """

    def __init__(self, model: type[BaseModel], strict: bool = False) -> None:
        self.model = model
        self.strict = strict

    def parse(self, raw: Any) -> BaseModel:
        if isinstance(raw, (str, bytes)):
            return self.model.model_validate_json(raw or "{}", strict=self.strict)
        return self.model.model_validate(raw or {}, strict=self.strict)

    def to_json_schema(self) -> dict:
        schema = self.model.model_json_schema()
        if self.strict:
            schema.setdefault("additionalProperties", False)
        return schema


class DictSchema:
    """Raw JSON Schema for catalog tools; the remote server owns validation.

    Arguments are only decoded: a JSON-string payload becomes a dict, and
    anything that is not an object becomes ``{}``.
    """

    def __init__(self, schema: dict[str, Any] | None = None) -> None:
        self._schema = schema or {"type": "object", "properties": {}}

    def parse(self, raw: Any) -> dict[str, Any]:
        if isinstance(raw, (str, bytes)):
            raw = json.loads(raw) if raw else {}
        return dict(raw) if isinstance(raw, dict) else {}

    def to_json_schema(self) -> dict:
        return self._schema


def as_schema(
    parameters: type[BaseModel] | ToolSchema | dict[str, Any] | None,
    strict: bool = False,
) -> ToolSchema | None:
    if parameters is None:
        return None
    if isinstance(parameters, dict):
        return DictSchema(parameters)
    if isinstance(parameters, type) and issubclass(parameters, BaseModel):
        return PydanticSchema(parameters, strict=strict)
    if isinstance(parameters, ToolSchema):
        return parameters
    raise TypeError(f"Unsupported tool parameters: {parameters!r}")
