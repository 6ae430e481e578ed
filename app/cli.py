"""
CLI entry point for the copytrade back-office.

Usage:
    # Create the database tables
    python -m app.cli init-db

    # Create tables in another database
    python -m app.cli init-db --database-url postgresql+psycopg2://u:p@host/copytrade

    # Start the API server
    python -m app.cli serve --port 8000
"""

import argparse
import logging
from typing import Optional, Sequence

from app.core.config import settings
from app.infrastructure.database import build_engine, create_schema
from app.shared.logging import configure_logging

logger = logging.getLogger(__name__)


def cmd_init_db(args: argparse.Namespace) -> None:
    """Create every copytrade table that does not exist yet."""
    engine = build_engine(args.database_url, echo=settings.database_echo)
    try:
        create_schema(engine)
    finally:
        engine.dispose()


def cmd_serve(args: argparse.Namespace) -> None:
    """Start the FastAPI application with uvicorn."""
    import uvicorn

    logger.info("Starting %s at http://%s:%d", settings.project_name, args.host, args.port)
    uvicorn.run("app.main:app", host=args.host, port=args.port, reload=args.reload)


def main(argv: Optional[Sequence[str]] = None) -> None:
    configure_logging(level=settings.log_level)

    parser = argparse.ArgumentParser(description="Copytrade Back-Office CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init-db", help="Create database tables")
    init_parser.add_argument(
        "--database-url", default=settings.database_url, dest="database_url",
        help="SQLAlchemy URL (defaults to DATABASE_URL)",
    )
    init_parser.set_defaults(func=cmd_init_db)

    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)
    serve_parser.add_argument("--reload", action="store_true")
    serve_parser.set_defaults(func=cmd_serve)

    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
