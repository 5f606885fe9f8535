"""Input validation for tool calls, backed by pydantic models.

Each ToolDefinition's input schema is compiled once into a pydantic model in
strict mode, so a string never satisfies a numeric field. Validation reports
every failing field.
"""

from typing import Annotated, Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, create_model

from ..errors import FieldViolation, SchemaViolation
from .models import FieldSpec, ToolDefinition

_BASE_TYPES: dict[str, Any] = {
    "number": float,
    "integer": int,
    "string": str,
    "boolean": bool,
    "array": list,
    "object": dict,
}


def _annotation(spec: FieldSpec) -> Any:
    """Annotated type carrying the field constraints, nullable when optional."""
    constraints: dict[str, Any] = {}
    if spec.enum is not None:
        base = Literal[tuple(spec.enum)]
    else:
        base = _BASE_TYPES[spec.type]
        constraints["strict"] = True
    if spec.minimum is not None:
        constraints["ge"] = spec.minimum
    if spec.maximum is not None:
        constraints["le"] = spec.maximum
    if spec.min_length is not None:
        constraints["min_length"] = spec.min_length
    if spec.max_length is not None:
        constraints["max_length"] = spec.max_length
    if spec.pattern is not None:
        constraints["pattern"] = spec.pattern

    annotation = Annotated[base, Field(**constraints)] if constraints else base
    if not spec.required:
        annotation = Optional[annotation]
    return annotation


def _field_info(external_name: str, spec: FieldSpec) -> Any:
    description = spec.description or None
    if spec.required:
        return Field(alias=external_name, description=description)
    default = spec.default if spec.has_default else None
    return Field(default, alias=external_name, description=description)


class InputValidator:
    """Compiled validator for one tool's input schema."""

    def __init__(self, definition: ToolDefinition):
        self.tool_name = definition.name
        self._specs = dict(definition.input_schema)
        # Internal attribute names avoid clashes with BaseModel members.
        self._internal = {name: f"field_{i}" for i, name in enumerate(self._specs)}
        self._external = {v: k for k, v in self._internal.items()}
        fields = {
            self._internal[name]: (_annotation(spec), _field_info(name, spec))
            for name, spec in self._specs.items()
        }
        self._model: type[BaseModel] = create_model(
            f"{definition.name}_input",
            __config__=ConfigDict(
                extra="ignore", populate_by_name=False, regex_engine="python-re"
            ),
            **fields,
        )

    def _field_name(self, loc: tuple[Any, ...]) -> str:
        if not loc:
            return "<input>"
        head = str(loc[0])
        return self._external.get(head, head)

    def validate(self, raw_input: Any) -> dict[str, Any]:
        """
        Validate raw tool arguments.

        Returns:
            The validated arguments: supplied values unchanged, plus declared
            defaults for omitted optional fields. Undeclared keys are dropped.

        Raises:
            SchemaViolation: Listing every failing field
        """
        if not isinstance(raw_input, dict):
            raise SchemaViolation(
                self.tool_name,
                [FieldViolation("<input>", f"expected an object, got {type(raw_input).__name__}")],
            )

        try:
            self._model.model_validate(raw_input)
        except ValidationError as e:
            violations: list[FieldViolation] = []
            seen: set[tuple[str, str]] = set()
            for error in e.errors():
                key = (self._field_name(error.get("loc", ())), error.get("msg", "invalid"))
                if key not in seen:
                    seen.add(key)
                    violations.append(FieldViolation(*key))
            raise SchemaViolation(self.tool_name, violations) from None

        validated: dict[str, Any] = {}
        for name, spec in self._specs.items():
            if name in raw_input:
                validated[name] = raw_input[name]
            elif spec.has_default:
                validated[name] = spec.default
        return validated
