"""Entry point for the counter POS terminal app and its HTTP server."""

from __future__ import annotations

import argparse
import logging

from counter_pos.backend import LocalBackend, open_backend
from counter_pos.config import DB_PATH, DEBUG_LOG_PATH, SERVER_HOST, SERVER_PORT, SERVER_URL
from counter_pos.logs import configure_logging
from counter_pos.persistence import Database

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="counter-pos", description="Restaurant counter billing.")
    parser.add_argument("--db", default=DB_PATH, help=f"SQLite file for the local backend (default: {DB_PATH})")
    parser.add_argument(
        "--server-url",
        default=SERVER_URL,
        help="Talk to a counter-pos server instead of opening the SQLite file directly.",
    )
    parser.add_argument("--log", default=DEBUG_LOG_PATH, help=f"Debug log file (default: {DEBUG_LOG_PATH})")

    sub = parser.add_subparsers(dest="command")
    serve = sub.add_parser("serve", help="Share the SQLite file with other terminals over HTTP")
    serve.add_argument("--host", default=SERVER_HOST, help=f"HTTP host to bind (default: {SERVER_HOST})")
    serve.add_argument("--port", type=int, default=SERVER_PORT, help=f"HTTP port (default: {SERVER_PORT})")
    sub.add_parser("init-db", help="Create the SQLite schema, seed the menu and exit")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    if args.command == "serve":
        from counter_pos.server import serve

        configure_logging(args.log, console=True)
        serve(LocalBackend(Database(args.db)), args.host, args.port)
        return

    if args.command == "init-db":
        configure_logging(args.log, console=True)
        backend = LocalBackend(Database(args.db))
        logger.info("init_db path=%s items=%d", args.db, backend.catalog.count())
        return

    from counter_pos.pos_app import CounterPosApp

    configure_logging(args.log)
    CounterPosApp(open_backend(server_url=args.server_url, db_path=args.db)).run()


if __name__ == "__main__":
    main()
