"""
Tool registry data models.

Defines FieldSpec (one input field), ToolDefinition (a callable capability)
and ToolOutcome (the result of executing a tool), plus the ``tool`` factory
used to declare tools next to their handlers.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, Union

from ..config import Config
from ..errors import InvalidConfiguration
from .content import ContentBlock, TextBlock, content_text

FIELD_TYPES = ("number", "integer", "string", "boolean", "array", "object")

_TOOL_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_.\-]*$")

ToolHandler = Callable[[dict[str, Any]], Union[Any, Awaitable[Any]]]


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


@dataclass(frozen=True)
class FieldSpec:
    """
    Declared type and constraints of one tool input field.

    Invariants:
    - type must be one of FIELD_TYPES
    - minimum/maximum only apply to number and integer fields
    - min_length/max_length/pattern apply to strings (lengths also to arrays)
    """

    type: str
    description: str = ""
    required: bool = True
    default: Any = MISSING
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    pattern: Optional[str] = None
    enum: Optional[tuple[Any, ...]] = None

    @property
    def has_default(self) -> bool:
        return self.default is not MISSING

    def validate_invariants(self, field_name: str) -> None:
        """
        Check the field definition is internally consistent.

        Raises:
            InvalidConfiguration: If the field definition is unusable
        """
        if self.type not in FIELD_TYPES:
            raise InvalidConfiguration(
                f"Field '{field_name}' has unknown type '{self.type}' "
                f"(expected one of {list(FIELD_TYPES)})"
            )
        numeric = self.type in ("number", "integer")
        if not numeric and (self.minimum is not None or self.maximum is not None):
            raise InvalidConfiguration(
                f"Field '{field_name}': minimum/maximum need a numeric type"
            )
        if (
            self.minimum is not None
            and self.maximum is not None
            and self.minimum > self.maximum
        ):
            raise InvalidConfiguration(
                f"Field '{field_name}': minimum {self.minimum} > maximum {self.maximum}"
            )
        if self.pattern is not None:
            if self.type != "string":
                raise InvalidConfiguration(f"Field '{field_name}': pattern needs type string")
            try:
                re.compile(self.pattern)
            except re.error as e:
                raise InvalidConfiguration(f"Field '{field_name}': bad pattern: {e}")
        if self.enum is not None and len(self.enum) == 0:
            raise InvalidConfiguration(f"Field '{field_name}': enum must not be empty")

    @classmethod
    def from_value(cls, value: Any) -> "FieldSpec":
        """
        Build a FieldSpec from its shorthand forms.

        Accepts an existing FieldSpec, a bare type name ("number"), or a dict
        as found in YAML tool files.
        """
        if isinstance(value, FieldSpec):
            return value
        if isinstance(value, str):
            return cls(type=value)
        if isinstance(value, dict):
            data = dict(value)
            if "enum" in data and data["enum"] is not None:
                data["enum"] = tuple(data["enum"])
            try:
                return cls(**data)
            except TypeError as e:
                raise InvalidConfiguration(f"Invalid field spec {value!r}: {e}")
        raise InvalidConfiguration(f"Invalid field spec {value!r}")

    def describe(self) -> dict[str, Any]:
        """JSON-schema-like description shown to the model."""
        out: dict[str, Any] = {"type": self.type}
        if self.description:
            out["description"] = self.description
        for key in ("minimum", "maximum", "pattern"):
            if getattr(self, key) is not None:
                out[key] = getattr(self, key)
        if self.min_length is not None:
            out["minLength"] = self.min_length
        if self.max_length is not None:
            out["maxLength"] = self.max_length
        if self.enum is not None:
            out["enum"] = list(self.enum)
        if self.has_default:
            out["default"] = self.default
        return out


@dataclass(frozen=True, eq=False)
class ToolDefinition:
    """
    A named, schema-validated capability the agent may invoke.

    Invariants:
    - name must be a non-empty identifier, unique within a registry
    - description must not be empty (the model uses it to pick tools)
    - risk_level must be one of: safe, sensitive, dangerous
    """

    name: str
    description: str
    input_schema: dict[str, FieldSpec]
    handler: ToolHandler
    risk_level: str = Config.DEFAULT_RISK_LEVEL

    def validate_invariants(self) -> bool:
        """
        Validate ToolDefinition invariants.

        Raises:
            InvalidConfiguration: If any invariant is violated
        """
        if not self.name or not _TOOL_NAME_RE.match(self.name):
            raise InvalidConfiguration(f"Invalid tool name {self.name!r}")
        if not self.description or not self.description.strip():
            raise InvalidConfiguration(f"Tool '{self.name}' must have a description")
        if self.risk_level not in Config.RISK_LEVELS:
            raise InvalidConfiguration(
                f"Tool '{self.name}': risk_level must be one of "
                f"{list(Config.RISK_LEVELS)}, got '{self.risk_level}'"
            )
        if not callable(self.handler):
            raise InvalidConfiguration(f"Tool '{self.name}' handler is not callable")
        for field_name, spec in self.input_schema.items():
            spec.validate_invariants(field_name)
        return True

    def describe(self) -> dict[str, Any]:
        """Tool description as presented to the model."""
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": {
                "type": "object",
                "properties": {k: v.describe() for k, v in self.input_schema.items()},
                "required": [k for k, v in self.input_schema.items() if v.required],
            },
        }


@dataclass
class ToolOutcome:
    """Result of executing a tool: content blocks plus an error flag."""

    tool_name: str
    content: list[ContentBlock] = field(default_factory=list)
    is_error: bool = False
    error: Optional[Exception] = None

    @classmethod
    def failure(cls, tool_name: str, error: Exception) -> "ToolOutcome":
        return cls(
            tool_name=tool_name,
            content=[TextBlock(text=str(error))],
            is_error=True,
            error=error,
        )

    @property
    def text(self) -> str:
        return content_text(self.content)


def tool(
    name: str,
    description: str,
    input_schema: Optional[dict[str, Any]] = None,
    handler: Optional[ToolHandler] = None,
    *,
    risk_level: str = Config.DEFAULT_RISK_LEVEL,
):
    """
    Declare a tool.

    Used directly with a handler::

        add = tool("add", "Add two numbers", {"a": "number", "b": "number"}, add_fn)

    or as a decorator::

        @tool("add", "Add two numbers", {"a": "number", "b": "number"})
        def add(args):
            return args["a"] + args["b"]

    Returns:
        ToolDefinition, or a decorator producing one when handler is omitted
    """
    schema = {k: FieldSpec.from_value(v) for k, v in (input_schema or {}).items()}

    def build(fn: ToolHandler) -> ToolDefinition:
        definition = ToolDefinition(
            name=name,
            description=description,
            input_schema=schema,
            handler=fn,
            risk_level=risk_level,
        )
        definition.validate_invariants()
        return definition

    if handler is not None:
        return build(handler)
    return build
