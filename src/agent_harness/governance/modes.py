"""Permission modes for tool governance."""

from enum import Enum
from typing import Optional


class PermissionMode(str, Enum):
    """Policy governing whether tool invocations need explicit approval."""

    DEFAULT = "default"
    ACCEPT_EDITS = "acceptEdits"
    BYPASS_PERMISSIONS = "bypassPermissions"
    PLAN = "plan"

    @classmethod
    def parse(cls, value: "Optional[str | PermissionMode]") -> "Optional[PermissionMode]":
        """Parse a mode name, accepting the wire value or the enum member name."""
        if isinstance(value, PermissionMode):
            return value
        if not value:
            return None
        normalized = value.strip()
        for mode in cls:
            if normalized in (mode.value, mode.name) or normalized.lower() == mode.value.lower():
                return mode
        return None
