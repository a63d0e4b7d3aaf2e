"""CLI entry point for Rave."""

from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from pathlib import Path
from typing import Any, NoReturn

from rave.config import get_settings
from rave.exceptions import RaveError
from rave.robot import Robot, load_robot
from rave.transport import HttpTransport, LocalFileTransport, OperationTransport


def main(argv: list[str] | None = None) -> NoReturn:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        prog="rave",
        description="Run and test wave robots",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # serve command
    serve_parser = subparsers.add_parser(
        "serve",
        help="Serve a robot over HTTP",
    )
    serve_parser.add_argument(
        "robot",
        nargs="?",
        help="Robot as module:attribute (default: RAVE_ROBOT)",
    )
    serve_parser.add_argument("--host", help="Bind address (default: RAVE_HOST)")
    serve_parser.add_argument("--port", type=int, help="Port (default: RAVE_PORT)")

    # replay command
    replay_parser = subparsers.add_parser(
        "replay",
        help="Run a robot against a saved event bundle and print its operations",
    )
    replay_parser.add_argument("robot", help="Robot as module:attribute")
    replay_parser.add_argument("event_file", help="JSON file holding an event bundle")
    replay_parser.add_argument(
        "--out",
        help="Also write the operation bundle into this directory",
    )
    replay_parser.add_argument(
        "--send-to",
        help="Also POST the operation bundle to this URL (default: RAVE_RPC_URL)",
    )
    replay_parser.add_argument(
        "--structure",
        action="store_true",
        help="Print the blip tree after handling to stderr",
    )

    # capabilities command
    capabilities_parser = subparsers.add_parser(
        "capabilities",
        help="Print the robot's capabilities.xml",
    )
    capabilities_parser.add_argument("robot", help="Robot as module:attribute")

    args = parser.parse_args(argv)

    # Robots are usually defined next to where the command is run.
    if os.getcwd() not in sys.path:
        sys.path.insert(0, os.getcwd())

    try:
        if args.command == "serve":
            cmd_serve(args)
        elif args.command == "replay":
            asyncio.run(cmd_replay(args))
        elif args.command == "capabilities":
            cmd_capabilities(args)
    except RaveError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nAborted", file=sys.stderr)
        sys.exit(130)

    sys.exit(0)


def cmd_serve(args: argparse.Namespace) -> None:
    """Execute the serve command."""
    import uvicorn

    from rave.app import create_app

    settings = get_settings()
    robot_path = args.robot or settings.robot
    robot = load_robot(robot_path) if robot_path else None

    app = create_app(robot, settings)
    uvicorn.run(
        app,
        host=args.host or settings.host,
        port=args.port or settings.port,
        log_config=None,
    )


async def cmd_replay(args: argparse.Namespace) -> None:
    """Execute the replay command."""
    robot = load_robot(args.robot)
    event_file = Path(args.event_file)

    if not event_file.exists():
        print(f"Error: File not found: {event_file}", file=sys.stderr)
        sys.exit(1)

    try:
        data = json.loads(event_file.read_text())
    except json.JSONDecodeError as e:
        print(f"Error: {event_file} is not valid JSON: {e}", file=sys.stderr)
        sys.exit(1)

    bundle = replay(robot, data, print_structure=args.structure)

    # Operation bundle to stdout
    print(json.dumps(bundle, indent=2))

    # Summary to stderr
    operations = bundle["operations"]["list"]
    print(f"\n# {len(operations)} operation(s)", file=sys.stderr)
    for op in operations:
        print(f"#   - {op['type']} {op['blipId'] or op['waveletId']}", file=sys.stderr)

    transports: list[OperationTransport] = []
    if args.out:
        transports.append(LocalFileTransport(Path(args.out)))
    settings = get_settings()
    send_to = args.send_to or settings.rpc_url
    if send_to:
        transports.append(HttpTransport(send_to, settings.rpc_token or None))

    for transport in transports:
        try:
            reply = await transport.send(bundle)
            print(f"# Sent: {json.dumps(reply)}", file=sys.stderr)
        finally:
            await transport.close()


def replay(robot: Robot, data: Any, *, print_structure: bool = False) -> dict[str, Any]:
    """Handle ``data`` with ``robot`` and return its operation bundle."""
    context = robot.process(data)
    if print_structure:
        print(context.print_structure(), file=sys.stderr)
    return context.to_dict()


def cmd_capabilities(args: argparse.Namespace) -> None:
    """Execute the capabilities command."""
    robot = load_robot(args.robot)
    print(robot.capabilities_xml(), end="")


if __name__ == "__main__":
    main()
