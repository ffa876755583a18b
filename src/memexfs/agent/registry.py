"""Closed tool table built on Pydantic v2 models."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable, Mapping
from enum import Enum
from time import perf_counter
from typing import Any, get_args

from langchain_core.tools import StructuredTool
from pydantic import BaseModel, ConfigDict

from memexfs.errors import UnknownTool
from memexfs.types import ToolTrace

logger = logging.getLogger(__name__)


class ToolName(str, Enum):
    """Every operation the dispatcher knows. Anything else is unknown."""

    GREP = "grep"
    READ = "read"
    LS = "ls"


class ToolParameter(BaseModel):
    type: str
    description: str


class ToolDefinition(BaseModel):
    """Schema descriptor handed to LLM tool-calling integrations."""

    name: str
    description: str
    parameters: dict[str, ToolParameter]
    required: list[str]


class ToolSpec(BaseModel):
    """Declarative tool specification: argument model plus handler."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    name: ToolName
    description: str
    args_schema: type[BaseModel]
    handler: Callable[[BaseModel], str]

    def invoke(self, payload: str | Mapping[str, Any]) -> str:
        if isinstance(payload, str):
            data = self.args_schema.model_validate_json(payload)
        else:
            data = self.args_schema.model_validate(dict(payload))
        return self.handler(data)

    def definition(self) -> ToolDefinition:
        parameters: dict[str, ToolParameter] = {}
        required: list[str] = []
        for field_name, field in self.args_schema.model_fields.items():
            parameters[field_name] = ToolParameter(
                type=_json_type(field.annotation),
                description=field.description or "",
            )
            if field.is_required():
                required.append(field_name)
        return ToolDefinition(
            name=self.name.value,
            description=self.description,
            parameters=parameters,
            required=required,
        )


class ToolDispatch:
    """Dispatches named calls to a fixed set of tool specs.

    The table is supplied once at construction, one spec per ``ToolName``,
    and cannot be extended afterwards. ``call`` resolves the name against the
    enumeration, validates the payload with the tool's argument model and
    returns the handler's string output.
    """

    def __init__(self, specs: Iterable[ToolSpec]) -> None:
        table: dict[ToolName, ToolSpec] = {}
        for spec in specs:
            if spec.name in table:
                raise ValueError(f"Tool already registered: {spec.name.value}")
            table[spec.name] = spec
        missing = set(ToolName) - set(table)
        if missing:
            names = ", ".join(sorted(name.value for name in missing))
            raise ValueError(f"Tool table is missing: {names}")
        self._tools: dict[ToolName, ToolSpec] = {name: table[name] for name in ToolName}
        self._observer: Callable[[ToolTrace], None] | None = None

    @property
    def observer(self) -> Callable[[ToolTrace], None] | None:
        return self._observer

    def set_observer(self, observer: Callable[[ToolTrace], None] | None) -> None:
        """Set an optional callback invoked after each tool execution."""
        self._observer = observer

    def call(self, name: str, payload: str | Mapping[str, Any]) -> str:
        try:
            tool_name = ToolName(name)
        except ValueError:
            raise UnknownTool(name) from None
        return self._execute_spec(self._tools[tool_name], payload)

    def tool_definitions(self) -> list[ToolDefinition]:
        return [spec.definition() for spec in self._tools.values()]

    def tool_definitions_json(self) -> str:
        return json.dumps(
            [definition.model_dump() for definition in self.tool_definitions()],
            ensure_ascii=False,
        )

    def as_langchain_tools(self) -> list[StructuredTool]:
        tools: list[StructuredTool] = []
        for spec in self._tools.values():
            tools.append(
                StructuredTool.from_function(
                    name=spec.name.value,
                    description=spec.description,
                    args_schema=spec.args_schema,
                    func=self._build_function(spec),
                )
            )
        return tools

    def _build_function(self, spec: ToolSpec) -> Callable[..., str]:
        def _callable(**kwargs: Any) -> str:
            return self._execute_spec(spec, kwargs)

        return _callable

    def _execute_spec(self, spec: ToolSpec, payload: str | Mapping[str, Any]) -> str:
        start = perf_counter()
        output = spec.invoke(payload)
        latency_ms = (perf_counter() - start) * 1000.0
        logger.debug("tool=%s latency_ms=%.3f", spec.name.value, latency_ms)

        if self._observer is not None:
            self._observer(
                ToolTrace(
                    name=spec.name.value,
                    input_payload=_payload_dict(payload),
                    output_preview=output[:320],
                    latency_ms=latency_ms,
                )
            )
        return output


def _json_type(annotation: Any) -> str:
    for candidate in get_args(annotation) or (annotation,):
        if candidate in (int, float):
            return "number"
    return "string"


def _payload_dict(payload: str | Mapping[str, Any]) -> dict[str, Any]:
    if not isinstance(payload, str):
        return dict(payload)
    decoded = json.loads(payload)
    return decoded if isinstance(decoded, dict) else {"raw": payload}
