from __future__ import annotations

import argparse
import json
import logging
from typing import Optional, Sequence

from .api import TOOLS
from .config import get_settings
from .errors import ConfigurationError
from .logging import configure_logging


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Google Calendar MCP command line interface.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Start the event-stream server and OAuth callback.")
    serve_parser.add_argument("--host", default=settings.server.host)
    serve_parser.add_argument("--port", type=int, default=settings.server.port)

    subparsers.add_parser("tools", help="Print the registered tool definitions as JSON.")

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "tools":
        print(json.dumps([definition.describe() for definition in TOOLS.definitions()], indent=2))
        return 0

    configure_logging()
    logger = logging.getLogger(__name__)

    if args.command == "serve":
        settings = get_settings()
        try:
            settings.oauth.require_configured()
        except ConfigurationError as exc:
            logger.error("%s", exc)
            return 1
        from .services.http import run_local_server

        logger.info("Google Calendar MCP starting")
        run_local_server(host=args.host, port=args.port)
        return 0

    parser.print_help()  # pragma: no cover - argparse enforces choices
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
