"""
Command line interface: run a scripted session described in YAML.

Session file layout::

    prompt: "I'm 22 and drive a 2020 Honda Accord worth $24,000"
    allowed_tools: [calculate_premium, get_vehicle_info]
    permission_mode: bypassPermissions
    max_turns: 5
    deny_tools: [compare_quotes]
    script:
      - tool: calculate_premium
        arguments: {age: 22, vehicleValue: 24000, accidentHistory: 1}
        cost: 0.002
      - answer: "Your premium is $1,138.50 per year."
        cost: 0.001
"""

import argparse
import asyncio
import importlib
import json
import sys
from pathlib import Path
from typing import Any, Optional

import yaml
from loguru import logger

from . import __version__
from .config import Config
from .errors import InvalidConfiguration, TransportFailure
from .governance import ConsoleApprovalProvider
from .registry import ToolDefinition, ToolRegistry
from .session import (
    AssistantText,
    ScriptedModel,
    SessionDriver,
    SessionOptions,
    TerminalSummary,
    ToolInvocationRequest,
    ToolInvocationResult,
)

DEFAULT_TOOLS_MODULE = "agent_harness.tools.insurance"

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> | <level>{message}</level>"
)


def configure_logging(verbose: bool = False, log_file: Optional[str] = None) -> None:
    """Replace loguru's default handler with the harness sinks."""
    logger.remove()
    logger.add(sys.stderr, format=LOG_FORMAT, level="DEBUG" if verbose else Config.LOG_LEVEL)
    if log_file:
        logger.add(
            log_file,
            rotation="10 MB",
            retention="7 days",
            compression="zip",
            level="DEBUG",
        )


def load_tools(module_name: Optional[str] = None, tools_file: Optional[str] = None) -> ToolRegistry:
    """
    Build the registry for a CLI run.

    Tools come from a YAML tool file when given, else from a module exposing
    a ``TOOLS`` list (or module-level ToolDefinitions).

    Raises:
        InvalidConfiguration: If the module cannot be imported or holds no tools
    """
    if tools_file:
        return ToolRegistry.from_yaml(tools_file)

    module_name = module_name or DEFAULT_TOOLS_MODULE
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise InvalidConfiguration(f"Cannot import tools module {module_name!r}: {e}")

    definitions = getattr(module, "TOOLS", None)
    if definitions is None:
        definitions = [v for v in vars(module).values() if isinstance(v, ToolDefinition)]
    if not definitions:
        raise InvalidConfiguration(f"Tools module {module_name!r} defines no tools")
    return ToolRegistry.from_definitions(definitions)


def load_session_file(path: str) -> tuple[SessionOptions, ScriptedModel]:
    """
    Read a session file into options and the scripted model decisions.

    Raises:
        FileNotFoundError: If the file doesn't exist
        InvalidConfiguration: If the file is malformed
    """
    session_file = Path(path)
    if not session_file.exists():
        raise FileNotFoundError(f"Session file not found: {path}")
    try:
        with open(session_file) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise InvalidConfiguration(f"Failed to parse session file {path}: {e}")

    options = SessionOptions.from_dict(data)
    script = data.get("script") or []
    if not isinstance(script, list):
        raise InvalidConfiguration("'script' must be a list of model decisions")
    try:
        model = ScriptedModel.from_dicts(script)
    except ValueError as e:
        raise InvalidConfiguration(str(e))
    return options, model


def format_event(event: Any) -> str:
    """Human-readable one-line rendering of a session event."""
    if isinstance(event, AssistantText):
        return f"Assistant: {event.text}"
    if isinstance(event, ToolInvocationRequest):
        return f"-> {event.tool_name} {json.dumps(event.raw_arguments, default=str)}"
    if isinstance(event, ToolInvocationResult):
        status = "denied" if event.denied else ("error" if event.is_error else "ok")
        return f"<- {event.tool_name} [{status}]\n{event.text}"
    if isinstance(event, TerminalSummary):
        return (
            "\n--- Interaction Complete ---\n"
            f"Result: {event.subtype}\n"
            f"Total cost: {event.total_cost}\n"
            f"Total turns: {event.total_turns}"
        )
    return repr(event)


async def run_session(
    options: SessionOptions,
    registry: ToolRegistry,
    model: ScriptedModel,
    as_json: bool = False,
) -> Optional[TerminalSummary]:
    """Run one session, printing each event as it arrives."""
    async with SessionDriver(registry, model).run(options) as session:
        async for event in session:
            if as_json:
                print(json.dumps(event.to_dict(), default=str))
            else:
                print(format_event(event))
    return session.result


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="agent-harness",
        description="Run tool-augmented agent sessions against a scripted model",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run a session file with the insurance example tools
  python -m agent_harness run session.yaml

  # Ask on the terminal before running tools that need approval
  python -m agent_harness run session.yaml --interactive

  # List the tools a module provides
  python -m agent_harness tools --tools-module agent_harness.tools.insurance
        """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("run", help="Run a scripted session from a YAML file")
    run.add_argument("session_file", help="YAML file with session options and a script")
    run.add_argument(
        "--interactive",
        action="store_true",
        help="Prompt on the terminal for tool calls that require approval",
    )
    run.add_argument("--json", action="store_true", help="Print events as JSON lines")

    tools = subparsers.add_parser("tools", help="List available tools")

    for sub in (run, tools):
        source = sub.add_mutually_exclusive_group()
        source.add_argument(
            "--tools-module",
            type=str,
            help=f"Module providing tools (default: {DEFAULT_TOOLS_MODULE})",
        )
        source.add_argument("--tools-file", type=str, help="YAML tool definitions file")
        sub.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
        sub.add_argument("--log-file", type=str, help="Also log to this (rotated) file")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        0 on success, 1 on configuration or transport failure, 2 when the
        session ended with an error summary, 130 when interrupted
    """
    args = _build_parser().parse_args(argv)
    configure_logging(verbose=args.verbose, log_file=args.log_file)

    try:
        Config.validate()
        registry = load_tools(args.tools_module, args.tools_file)

        if args.command == "tools":
            for definition in registry.get_all():
                print(f"{definition.name} [{definition.risk_level}]: {definition.description}")
            return 0

        options, model = load_session_file(args.session_file)
        if args.interactive:
            options.approval_provider = ConsoleApprovalProvider()

        summary = asyncio.run(run_session(options, registry, model, as_json=args.json))
    except (InvalidConfiguration, FileNotFoundError, ValueError) as e:
        logger.error(f"Invalid configuration: {e}")
        return 1
    except TransportFailure as e:
        logger.error(f"Session failed: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130

    if summary is None or summary.is_error:
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
