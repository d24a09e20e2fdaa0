"""Command-line interface for the Carbon Ledger service."""

import argparse
import json
import sys
from typing import List, Optional

from .config import get_config, validate_startup_config


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="carbon-ledger",
        description="Carbon Ledger - issuance, transfer and retirement of carbon credit tokens",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Create the ledger tables")

    serve = subparsers.add_parser("serve", help="Run the HTTP API with uvicorn")
    serve.add_argument("--host", help="Bind address (default: from config)")
    serve.add_argument("--port", type=int, help="Bind port (default: from config)")
    serve.add_argument(
        "--reload",
        action="store_true",
        help="Restart the server when source files change (development only)",
    )

    issue = subparsers.add_parser(
        "issue-token", help="Print a signed bearer token for a principal"
    )
    issue.add_argument("principal", help="Identity the token authenticates as")
    issue.add_argument(
        "--minutes",
        type=int,
        help="Token lifetime in minutes (default: from config)",
    )

    subparsers.add_parser(
        "show-config", help="Print the effective configuration as JSON"
    )

    return parser.parse_args(argv)


def _init_db(ns: argparse.Namespace) -> int:
    from .db.database import get_database_url, init_db
    from .utils.logging_config import get_logger, initialize_logging

    initialize_logging()
    init_db()
    get_logger('database').info(f"Ledger tables ready at {get_database_url()}")
    print(f"Initialized database at {get_database_url()}")
    return 0


def _serve(ns: argparse.Namespace) -> int:
    import uvicorn

    config = get_config()
    validate_startup_config()
    uvicorn.run(
        "carbon_ledger.main:app",
        host=ns.host or config.server.host,
        port=ns.port or config.server.port,
        reload=ns.reload or config.server.auto_reload,
        log_level=config.app.log_level.lower(),
    )
    return 0


def _issue_token(ns: argparse.Namespace) -> int:
    from .auth.jwt_auth import jwt_manager

    if ns.minutes is not None and ns.minutes < 1:
        print("--minutes must be positive", file=sys.stderr)
        return 2
    try:
        token, expires_at = jwt_manager.create_access_token(
            ns.principal, expires_minutes=ns.minutes
        )
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 2
    print(token)
    print(f"# expires {expires_at.isoformat()}", file=sys.stderr)
    return 0


def _show_config(ns: argparse.Namespace) -> int:
    data = get_config().to_dict()
    data["app"]["jwt_secret_key"] = "***"
    print(json.dumps(data, indent=2))
    return 0


COMMANDS = {
    "init-db": _init_db,
    "serve": _serve,
    "issue-token": _issue_token,
    "show-config": _show_config,
}


def main(argv: Optional[List[str]] = None) -> int:
    ns = parse_args(argv)
    return COMMANDS[ns.command](ns)


if __name__ == "__main__":
    sys.exit(main())
