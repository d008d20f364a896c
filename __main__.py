"""CLI entry point for patchrefine.

This module acts as the central entry point for the project's CLI tools.
It delegates commands to the appropriate submodules.
"""

import argparse
import json
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

from patchrefine.core import get_logger, setup_logging

# Load environment variables from .env file
load_dotenv()

logger = get_logger("cli")


# =============================================================================
# Refine Command
# =============================================================================


def _read_document(path: Path, kind: str) -> dict | None:
    """Read a JSON document, logging and returning None on failure."""
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        logger.error(f"Cannot read {kind} file {path}: {e}")
    except json.JSONDecodeError as e:
        logger.error(f"{kind.capitalize()} file {path} is not valid JSON: {e}")
    return None


def cmd_refine(args: argparse.Namespace) -> int:
    """Handle the refine command."""
    from patchrefine.models import ParsedRack, Patch
    from patchrefine.refine import refine_patch

    patch_doc = _read_document(args.patch, "patch")
    rack_doc = _read_document(args.rack, "rack")
    if patch_doc is None or rack_doc is None:
        return 1

    try:
        patch = Patch.model_validate(patch_doc)
        rack = ParsedRack.model_validate(rack_doc)
    except ValidationError as e:
        logger.error(f"Invalid document: {e}")
        return 1

    result = refine_patch(patch, " ".join(args.feedback), rack)

    output = json.dumps(result.to_dict(), indent=2, ensure_ascii=False)
    if args.output:
        args.output.write_text(output, encoding="utf-8")
        logger.info(f"Result written to {args.output}")
    else:
        print(output)

    return 0 if result.success else 1


def handle_refine_command(argv: list[str]) -> int:
    """Handle refine-specific arguments."""
    parser = argparse.ArgumentParser(
        prog="python . refine",
        description="Refine a patch from one feedback message",
    )
    parser.add_argument(
        "feedback",
        nargs="+",
        help='Feedback text, e.g. "make it darker"',
    )
    parser.add_argument(
        "--patch",
        "-p",
        type=Path,
        required=True,
        help="Patch JSON file",
    )
    parser.add_argument(
        "--rack",
        "-r",
        type=Path,
        required=True,
        help="Rack JSON file",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Output file path (prints to stdout if not specified)",
    )
    args = parser.parse_args(argv)
    return cmd_refine(args)


# =============================================================================
# Intents Command
# =============================================================================


def handle_intents_command(argv: list[str]) -> int:
    """Print the special intents detected in a chat message."""
    from patchrefine.intents import check_special_intents

    parser = argparse.ArgumentParser(
        prog="python . intents",
        description="Detect save, start fresh, variations and undo intents",
    )
    parser.add_argument("message", nargs="+", help="Chat message")
    args = parser.parse_args(argv)

    intents = check_special_intents(" ".join(args.message))
    print(json.dumps(intents.to_dict(), indent=2))
    return 0


# =============================================================================
# MCP Command
# =============================================================================


def handle_mcp_command(argv: list[str]) -> int:
    """Handle MCP server commands.

    Usage:
        python . mcp run              # Start in STDIO mode
        python . mcp serve            # Start in HTTP mode
        python . mcp serve --port 8080
        python . mcp info             # Show server info
    """
    if not argv:
        print("MCP Server Commands")
        print("\nUsage: python . mcp {command} [options]")
        print("\nCommands:")
        print("  run                 Start server in STDIO mode")
        print("  serve               Start server in HTTP mode")
        print("  info                Show server information")
        print("\nOptions for 'serve':")
        print("  --host HOST         Bind address (default: MCP_HOST or 0.0.0.0)")
        print("  --port PORT         Port number (default: MCP_PORT or 18090)")
        print("  --transport TYPE    Transport: http or sse (default: http)")
        return 1

    subcommand = argv[0]
    subargs = argv[1:]

    if subcommand == "run":
        from patchrefine.mcp import TransportType, run_server

        logger.info("Starting MCP server in STDIO mode...")
        run_server(transport=TransportType.STDIO)
        return 0

    elif subcommand == "serve":
        from patchrefine.mcp import ServerConfig, TransportType, run_server

        parser = argparse.ArgumentParser(prog="python . mcp serve")
        parser.add_argument("--host", type=str, default=None)
        parser.add_argument("--port", type=int, default=None)
        parser.add_argument(
            "--transport", type=str, choices=["http", "sse"], default="http"
        )
        args = parser.parse_args(subargs)

        config = ServerConfig.from_env(transport=TransportType(args.transport))
        host = args.host or config.host
        port = args.port or config.port

        logger.info(f"Starting MCP server in {config.transport.value} mode...")
        logger.info(f"Listening on {host}:{port}")
        run_server(transport=config.transport, host=host, port=port)
        return 0

    elif subcommand == "info":
        from patchrefine.mcp import get_server_capabilities, get_server_version

        print("Patch Refinement MCP Server")
        print("=" * 40)
        print(f"Version: {get_server_version()}")
        print("\nCapabilities:")
        for cap, enabled in get_server_capabilities().items():
            status = "enabled" if enabled else "disabled"
            print(f"  {cap}: {status}")
        print("\nAvailable Tools:")
        print("  - refine_patch: One-off refinement")
        print("  - check_intents: Special intent detection")
        print("  - start_session / send_message / undo: Chat sessions")
        print("  - get_session_history: Session snapshots and conversation")
        print("  - status: Server status")
        return 0

    else:
        logger.error(f"Unknown mcp command: {subcommand}")
        return handle_mcp_command([])


def show_help() -> None:
    """Display CLI help message."""
    print("Usage: python . {command} [args]")
    print("\nCommands:")
    print("  refine     Refine a patch from one feedback message")
    print("  intents    Detect special intents in a chat message")
    print("  mcp        Run MCP server (STDIO or HTTP mode)")
    print("\nExamples:")
    print("  python . refine --patch patch.json --rack rack.json 'make it darker'")
    print("  python . intents 'perfect, save it'")
    print("  python . mcp run                    # Start STDIO server")
    print("  python . mcp serve --port 18090     # Start HTTP server")


def main() -> int:
    """Main entry point for the CLI."""
    if len(sys.argv) < 2:
        show_help()
        return 1

    command = sys.argv[1]
    rest_args = sys.argv[2:]

    if command in ("-h", "--help"):
        show_help()
        return 0

    commands = {
        "refine": lambda: handle_refine_command(rest_args),
        "intents": lambda: handle_intents_command(rest_args),
        "mcp": lambda: handle_mcp_command(rest_args),
    }

    if command in commands:
        setup_logging()
        return commands[command]()

    logger.error(f"Unknown command: {command}")
    show_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
