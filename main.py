"""Command-line interface for the users service."""

from __future__ import annotations
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Sequence

from userapi.client import ServiceError, UsersClient
from userapi.config import ServerConfig, load_config

logger = logging.getLogger("userapi.main")

_DEFAULT_SERVICE_URL = "http://localhost:8080"


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="In-memory users REST service")
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP service")
    serve_parser.add_argument("--host", default=None, help="Bind address (default: 0.0.0.0)")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="HTTP port for the REST server (default: 8080)",
    )
    serve_parser.add_argument(
        "--config",
        default=None,
        help="Path to a YAML configuration file with a 'server' section",
    )
    serve_parser.add_argument(
        "--log-level",
        default=None,
        help="Log level: critical, error, warning, info or debug",
    )

    users_parser = subparsers.add_parser("users", help="Manage users on a running service")
    users_parser.add_argument(
        "--service-url",
        default=_DEFAULT_SERVICE_URL,
        help=f"Base URL of a running service (default: {_DEFAULT_SERVICE_URL})",
    )
    actions = users_parser.add_subparsers(dest="action", required=True)
    actions.add_parser("list", help="List all users")
    get_parser = actions.add_parser("get", help="Show a single user")
    get_parser.add_argument("user_id", type=int)
    create_parser = actions.add_parser("create", help="Create a user")
    create_parser.add_argument("name")
    delete_parser = actions.add_parser("delete", help="Delete a user")
    delete_parser.add_argument("user_id", type=int)

    args_list = list(argv) if argv is not None else sys.argv[1:]
    known_commands = {"serve", "users"}

    if not args_list:
        args_list = ["serve"]
    else:
        first = args_list[0]
        if first in ("-h", "--help"):
            return parser.parse_args(args_list)
        if first not in known_commands:
            if any(flag in args_list for flag in ("-h", "--help")):
                return parser.parse_args(args_list)
            args_list = ["serve", *args_list]

    return parser.parse_args(args_list)


def _resolve_server_config(args: argparse.Namespace) -> ServerConfig:
    config_path = Path(args.config).expanduser() if args.config else None
    config = load_config(config_path)
    return ServerConfig.from_dict(
        {"host": args.host, "port": args.port, "log_level": args.log_level},
        base=config,
    )


def _serve(config: ServerConfig) -> None:
    from userapi.application import create_app
    import uvicorn

    logger.info("REST server listening on http://%s:%s", config.host, config.port)

    app = create_app(config=config)
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level)


def _run_users_command(args: argparse.Namespace) -> int:
    with UsersClient(args.service_url) as client:
        try:
            if args.action == "list":
                users = client.list_users()
                if not users:
                    print("No users are currently registered.")
                    return 0
                print(f"{len(users)} user(s) found:")
                print(f"{'ID':>4}  {'Name':<24}  Created")
                print("-" * 60)
                for user in sorted(users, key=lambda item: item.id):
                    created = user.created_at.strftime("%Y-%m-%d %H:%M:%S %Z")
                    print(f"{user.id:>4}  {user.name:<24}  {created}")
            elif args.action == "get":
                print(json.dumps(client.get_user(args.user_id).to_dict(), indent=2))
            elif args.action == "create":
                user = client.create_user(args.name)
                print(f"Created user #{user.id}: {user.name}")
            elif args.action == "delete":
                client.delete_user(args.user_id)
                print(f"Deleted user #{args.user_id}")
        except ServiceError as exc:
            print(f"Request failed: {exc.message} ({exc.code})", file=sys.stderr)
            return 1
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for CLI usage."""

    args = _parse_args(argv)

    if args.command == "users":
        logging.basicConfig(level=logging.WARNING, format="%(asctime)s [%(levelname)s] %(message)s")
        raise SystemExit(_run_users_command(args))

    try:
        config = _resolve_server_config(args)
    except (OSError, ValueError) as exc:
        raise SystemExit(f"Invalid configuration: {exc}") from exc

    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
    _serve(config)


if __name__ == "__main__":
    main()
