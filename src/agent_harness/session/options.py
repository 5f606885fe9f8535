"""Session configuration: one agent invocation's parameters."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from ..config import Config
from ..errors import InvalidConfiguration
from ..governance import ApprovalProvider, PermissionMode
from ..hooks import HookEvent, approve_tools, deny_tools
from ..registry import ToolDefinition, ToolRegistry

_OPTION_KEYS = {
    "prompt",
    "model",
    "system_prompt",
    "allowed_tools",
    "permission_mode",
    "max_turns",
    "session_id",
    "audit_log_path",
    "tool_timeout",
}


@dataclass
class SessionOptions:
    """
    Parameters of one agent session.

    Constructed once per invocation and treated as read-only once the
    session starts. allowed_tools holds tool names or ToolDefinition objects;
    hooks maps a HookEvent to an ordered list of hooks or HookMatchers.
    """

    prompt: str
    model: str = Config.DEFAULT_MODEL
    system_prompt: Optional[str] = None
    allowed_tools: list[Union[str, ToolDefinition]] = field(default_factory=list)
    permission_mode: Union[PermissionMode, str] = Config.DEFAULT_PERMISSION_MODE
    max_turns: int = Config.DEFAULT_MAX_TURNS
    hooks: dict[Union[HookEvent, str], list[Any]] = field(default_factory=dict)
    approval_provider: Optional[ApprovalProvider] = None
    session_id: Optional[str] = None
    audit_log_path: Optional[str] = Config.AUDIT_LOG_PATH
    tool_timeout: Optional[float] = Config.TOOL_TIMEOUT_SECONDS

    @property
    def mode(self) -> PermissionMode:
        """Parsed permission mode. Call validate() first for a clear error."""
        mode = PermissionMode.parse(self.permission_mode)
        if mode is None:
            raise InvalidConfiguration(f"Unknown permission mode {self.permission_mode!r}")
        return mode

    def validate(self, registry: ToolRegistry) -> ToolRegistry:
        """
        Check the options and resolve the allowed tool set.

        Args:
            registry: Registry that tool names are resolved against

        Returns:
            Frozen registry holding exactly the allowed tools

        Raises:
            InvalidConfiguration: Listing every problem found
        """
        errors: list[str] = []

        if not isinstance(self.prompt, str) or not self.prompt.strip():
            errors.append("prompt must be a non-empty string")

        if (
            isinstance(self.max_turns, bool)
            or not isinstance(self.max_turns, int)
            or self.max_turns < 1
        ):
            errors.append(f"max_turns must be an integer >= 1, got {self.max_turns!r}")

        if PermissionMode.parse(self.permission_mode) is None:
            errors.append(
                f"permission_mode must be one of {[m.value for m in PermissionMode]}, "
                f"got {self.permission_mode!r}"
            )

        if self.tool_timeout is not None and (
            isinstance(self.tool_timeout, bool)
            or not isinstance(self.tool_timeout, (int, float))
            or self.tool_timeout <= 0
        ):
            errors.append(f"tool_timeout must be a number > 0, got {self.tool_timeout!r}")

        for event in self.hooks:
            try:
                HookEvent.parse(event)
            except ValueError as e:
                errors.append(str(e))

        allowed = ToolRegistry(tool_timeout=self.tool_timeout)
        for entry in self.allowed_tools:
            if isinstance(entry, ToolDefinition):
                existing = registry.resolve(entry.name) if entry.name in registry else None
                if existing is not None and existing is not entry:
                    errors.append(
                        f"allowed tool '{entry.name}' conflicts with a different "
                        "registered tool of the same name"
                    )
                    continue
                definition = entry
            elif isinstance(entry, str):
                if entry not in registry:
                    errors.append(f"allowed tool '{entry}' is not registered")
                    continue
                definition = registry.resolve(entry)
            else:
                errors.append(f"allowed_tools entries must be names or ToolDefinitions, got {entry!r}")
                continue

            if definition.name in allowed:
                continue
            try:
                allowed.register(definition)
            except InvalidConfiguration as e:
                errors.append(str(e))

        if errors:
            raise InvalidConfiguration(f"Invalid session options: {'; '.join(errors)}")

        return allowed.freeze()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SessionOptions":
        """
        Build options from a plain mapping (e.g. a parsed YAML file).

        Besides the option fields, ``deny_tools`` and ``approve_tools`` lists
        install the matching built-in pre-tool-use hooks. Unknown keys are
        rejected.
        """
        if not isinstance(data, dict):
            raise InvalidConfiguration(
                f"Invalid session options: expected mapping, got {type(data).__name__}"
            )

        unknown = set(data) - _OPTION_KEYS - {"deny_tools", "approve_tools", "script"}
        if unknown:
            raise InvalidConfiguration(f"Unknown session option(s): {sorted(unknown)}")
        if "prompt" not in data:
            raise InvalidConfiguration("Session options need a 'prompt'")

        kwargs = {k: v for k, v in data.items() if k in _OPTION_KEYS}
        kwargs["allowed_tools"] = list(kwargs.get("allowed_tools") or [])

        pre_hooks: list[Any] = []
        if data.get("deny_tools"):
            pre_hooks.append(deny_tools(*data["deny_tools"]))
        if data.get("approve_tools"):
            pre_hooks.append(approve_tools(*data["approve_tools"]))
        hooks: dict[Union[HookEvent, str], list[Any]] = {}
        if pre_hooks:
            hooks[HookEvent.PRE_TOOL_USE] = pre_hooks

        return cls(hooks=hooks, **kwargs)

    @classmethod
    def from_yaml(cls, yaml_path: str) -> "SessionOptions":
        """
        Load options from a YAML file.

        Raises:
            FileNotFoundError: If the file doesn't exist
            InvalidConfiguration: If the YAML is malformed or invalid
        """
        path = Path(yaml_path)
        if not path.exists():
            raise FileNotFoundError(f"Session file not found: {yaml_path}")
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise InvalidConfiguration(f"Failed to parse session file {yaml_path}: {e}")
        return cls.from_dict(data)
