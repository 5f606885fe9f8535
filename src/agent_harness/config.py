"""Centralized configuration for the agent harness."""

import os
from typing import Optional


class Config:
    """
    Harness configuration with environment variable overrides.

    All configuration values are centralized here with sensible defaults.
    Values can be overridden via AGENT_HARNESS_* environment variables.
    """

    @staticmethod
    def _parse_timeout(value: Optional[str]) -> Optional[float]:
        """Parse an optional timeout in seconds. Empty or '0' disables it."""
        if value is None or value.strip() in ("", "0", "none"):
            return None
        try:
            timeout = float(value)
        except ValueError as e:
            raise ValueError(f"Invalid AGENT_HARNESS_TOOL_TIMEOUT: {e}")
        return timeout

    # ========================================================================
    # Session Defaults
    # ========================================================================
    DEFAULT_MODEL: str = os.getenv("AGENT_HARNESS_MODEL", "claude-3-5-sonnet-20241022")
    DEFAULT_MAX_TURNS: int = int(os.getenv("AGENT_HARNESS_MAX_TURNS", "10"))
    DEFAULT_PERMISSION_MODE: str = os.getenv("AGENT_HARNESS_PERMISSION_MODE", "default")

    # ========================================================================
    # Tool Execution
    # ========================================================================
    TOOL_TIMEOUT_SECONDS: Optional[float] = _parse_timeout.__func__(
        os.getenv("AGENT_HARNESS_TOOL_TIMEOUT", "30")
    )
    DEFAULT_RISK_LEVEL: str = "sensitive"
    RISK_LEVELS: tuple[str, ...] = ("safe", "sensitive", "dangerous")

    # ========================================================================
    # Logging and Audit
    # ========================================================================
    LOG_LEVEL: str = os.getenv("AGENT_HARNESS_LOG_LEVEL", "INFO")
    AUDIT_LOG_PATH: Optional[str] = os.getenv("AGENT_HARNESS_AUDIT_LOG") or None
    MAX_SUMMARY_LENGTH: int = 200

    @classmethod
    def validate(cls) -> bool:
        """
        Validate configuration consistency.

        Returns:
            True if validation passes

        Raises:
            ValueError: If validation fails
        """
        errors = []

        if cls.DEFAULT_MAX_TURNS < 1:
            errors.append(f"DEFAULT_MAX_TURNS must be >= 1, got {cls.DEFAULT_MAX_TURNS}")

        if cls.TOOL_TIMEOUT_SECONDS is not None and cls.TOOL_TIMEOUT_SECONDS <= 0:
            errors.append(
                f"TOOL_TIMEOUT_SECONDS must be > 0, got {cls.TOOL_TIMEOUT_SECONDS}"
            )

        if cls.DEFAULT_RISK_LEVEL not in cls.RISK_LEVELS:
            errors.append(
                f"DEFAULT_RISK_LEVEL must be one of {list(cls.RISK_LEVELS)}, "
                f"got '{cls.DEFAULT_RISK_LEVEL}'"
            )

        from .governance.modes import PermissionMode

        if PermissionMode.parse(cls.DEFAULT_PERMISSION_MODE) is None:
            errors.append(
                f"DEFAULT_PERMISSION_MODE '{cls.DEFAULT_PERMISSION_MODE}' is not a "
                f"known permission mode"
            )

        if cls.MAX_SUMMARY_LENGTH <= 0:
            errors.append(f"MAX_SUMMARY_LENGTH must be > 0, got {cls.MAX_SUMMARY_LENGTH}")

        if errors:
            raise ValueError(f"Config validation failed: {'; '.join(errors)}")

        return True
