"""Tool registry implementation."""

import asyncio
import importlib
import inspect
from pathlib import Path
from typing import Any, Iterable, Optional

import yaml
from loguru import logger

from ..config import Config
from ..errors import (
    DuplicateToolName,
    InvalidConfiguration,
    SchemaViolation,
    ToolExecutionError,
    UnknownTool,
)
from .content import normalize_content
from .models import FieldSpec, ToolDefinition, ToolOutcome
from .schema import InputValidator


def _import_handler(path: str) -> Any:
    """Resolve a 'package.module:function' handler path."""
    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise InvalidConfiguration(
            f"Handler path must look like 'module:function', got {path!r}"
        )
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise InvalidConfiguration(f"Cannot import handler module {module_name!r}: {e}")
    try:
        return getattr(module, attr)
    except AttributeError:
        raise InvalidConfiguration(f"Module {module_name!r} has no attribute {attr!r}")


class ToolRegistry:
    """
    Registry mapping tool names to definitions.

    Features:
    - Registration-time invariant checks and duplicate detection
    - Schema validation reporting every failing field
    - Handler invocation with timeout, errors wrapped in ToolExecutionError
    - execute(): validate + invoke with failures converted to error outcomes
    - Read-only after freeze(); sessions receive frozen subsets
    """

    def __init__(self, tool_timeout: Optional[float] = Config.TOOL_TIMEOUT_SECONDS):
        """Initialize empty tool registry."""
        self._tools: dict[str, ToolDefinition] = {}
        self._validators: dict[str, InputValidator] = {}
        self._frozen = False
        self.tool_timeout = tool_timeout

    @classmethod
    def from_definitions(
        cls, definitions: Iterable[ToolDefinition], **kwargs: Any
    ) -> "ToolRegistry":
        """Build a registry from tool definitions."""
        registry = cls(**kwargs)
        for definition in definitions:
            registry.register(definition)
        return registry

    @classmethod
    def from_yaml(cls, yaml_path: str, **kwargs: Any) -> "ToolRegistry":
        """
        Load registry from YAML file.

        Expected layout::

            tools:
              - name: add
                description: Add two numbers
                handler: my_package.tools:add
                risk_level: safe
                input_schema:
                  a: {type: number}
                  b: number

        Raises:
            FileNotFoundError: If YAML file doesn't exist
            InvalidConfiguration: If the YAML structure or a tool is invalid
        """
        registry = cls(**kwargs)

        yaml_file = Path(yaml_path)
        if not yaml_file.exists():
            raise FileNotFoundError(f"Registry YAML not found: {yaml_path}")

        with open(yaml_file) as f:
            data = yaml.safe_load(f)

        if not isinstance(data, dict):
            raise InvalidConfiguration(
                f"Invalid YAML structure: expected dict, got {type(data).__name__}"
            )
        if "tools" in data and not isinstance(data["tools"], list):
            raise InvalidConfiguration("'tools' must be a list")

        for tool_data in data.get("tools", []):
            try:
                definition = ToolDefinition(
                    name=tool_data["name"],
                    description=tool_data.get("description", ""),
                    input_schema={
                        k: FieldSpec.from_value(v)
                        for k, v in (tool_data.get("input_schema") or {}).items()
                    },
                    handler=_import_handler(tool_data["handler"]),
                    risk_level=tool_data.get("risk_level", Config.DEFAULT_RISK_LEVEL),
                )
            except KeyError as e:
                raise InvalidConfiguration(f"Invalid tool entry (missing {e}): {tool_data}")
            registry.register(definition)

        logger.debug(f"Loaded {len(registry)} tools from {yaml_path}")
        return registry

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> "ToolRegistry":
        """Make the registry read-only. Returns self."""
        self._frozen = True
        return self

    def register(self, definition: ToolDefinition) -> None:
        """
        Add a tool to the registry.

        Raises:
            DuplicateToolName: If the name already exists
            InvalidConfiguration: If the definition violates its invariants
            RuntimeError: If the registry is frozen
        """
        if self._frozen:
            raise RuntimeError("Tool registry is frozen; register tools before sessions start")
        definition.validate_invariants()
        if definition.name in self._tools:
            raise DuplicateToolName(definition.name)
        self._validators[definition.name] = InputValidator(definition)
        self._tools[definition.name] = definition
        logger.debug(f"Registered tool: {definition.name} (risk={definition.risk_level})")

    def is_registered(self, name: str) -> bool:
        return name in self._tools

    def resolve(self, name: str) -> ToolDefinition:
        """
        Get tool definition by name.

        Raises:
            UnknownTool: If no tool has that name
        """
        try:
            return self._tools[name]
        except KeyError:
            raise UnknownTool(name) from None

    def get_all(self) -> list[ToolDefinition]:
        """All registered tool definitions, in registration order."""
        return list(self._tools.values())

    def subset(self, names: Iterable[str]) -> "ToolRegistry":
        """
        Frozen registry restricted to the given tool names.

        Raises:
            UnknownTool: If a name is not registered
        """
        restricted = ToolRegistry(tool_timeout=self.tool_timeout)
        for name in names:
            definition = self.resolve(name)
            if name not in restricted:
                restricted._tools[name] = definition
                restricted._validators[name] = self._validators[name]
        return restricted.freeze()

    def validate(self, name: str, raw_input: Any) -> dict[str, Any]:
        """
        Validate raw arguments against the tool's input schema.

        Raises:
            UnknownTool: If no tool has that name
            SchemaViolation: Listing every failing field
        """
        self.resolve(name)
        return self._validators[name].validate(raw_input)

    async def invoke(self, name: str, validated_input: dict[str, Any]) -> ToolOutcome:
        """
        Call the tool handler.

        Sync handlers run in a worker thread so the timeout applies to them too.

        Raises:
            UnknownTool: If no tool has that name
            ToolExecutionError: Wrapping any handler failure or timeout
        """
        definition = self.resolve(name)
        try:
            if inspect.iscoroutinefunction(definition.handler):
                call = definition.handler(validated_input)
            else:
                call = asyncio.to_thread(definition.handler, validated_input)
            if self.tool_timeout:
                result = await asyncio.wait_for(call, timeout=self.tool_timeout)
            else:
                result = await call
            if inspect.isawaitable(result):
                result = await result
        except asyncio.CancelledError:
            raise
        except asyncio.TimeoutError as e:
            raise ToolExecutionError(
                name, TimeoutError(f"timed out after {self.tool_timeout}s")
            ) from e
        except Exception as e:
            raise ToolExecutionError(name, e) from e

        if isinstance(result, ToolOutcome):
            return result
        try:
            content = normalize_content(result)
        except (TypeError, ValueError) as e:
            raise ToolExecutionError(name, e) from e
        return ToolOutcome(tool_name=name, content=content)

    async def execute(self, name: str, raw_input: Any) -> ToolOutcome:
        """
        Validate and invoke a tool, never raising tool-level errors.

        UnknownTool, SchemaViolation and ToolExecutionError are converted into
        an error-flagged ToolOutcome so one failing tool does not abort a session.
        """
        try:
            validated = self.validate(name, raw_input)
            return await self.invoke(name, validated)
        except (UnknownTool, SchemaViolation) as e:
            logger.warning(f"Rejected call to {name}: {e}")
            return ToolOutcome.failure(name, e)
        except ToolExecutionError as e:
            logger.error(f"Tool execution failed: {e}")
            return ToolOutcome.failure(name, e)
