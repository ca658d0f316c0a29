"""
Command-line interface for ShopLabel operations.

Creates the database schema, runs the API server and prints the effective
configuration.
"""

import argparse
import json
import sys
from typing import List, Optional

from pydantic import ValidationError as SettingsValidationError

from shoplabel.core.config import Settings, get_settings
from shoplabel.database.connection import create_db_engine, drop_db, init_db
from shoplabel.utils.logger import get_logger, setup_logging

cli_logger = get_logger(__name__)


class ShopLabelCLI:
    """Command-line interface for ShopLabel operations."""

    def __init__(self, settings: Optional[Settings] = None):
        self._settings = settings

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    def cmd_init_db(self, args) -> int:
        """Create (or recreate) the database tables."""
        engine = create_db_engine(self.settings.DATABASE_URL)
        try:
            if args.drop:
                cli_logger.warning("Dropping all tables")
                drop_db(engine)
            init_db(engine)
        finally:
            engine.dispose()

        print(f"Database initialized: {self.settings.DATABASE_URL.split('@')[-1]}")
        return 0

    def cmd_serve(self, args) -> int:
        """Run the API with uvicorn."""
        import uvicorn

        uvicorn.run(
            "shoplabel.api.main:create_app",
            factory=True,
            host=args.host or self.settings.API_HOST,
            port=args.port or self.settings.API_PORT,
            reload=args.reload,
        )
        return 0

    def cmd_config(self, args) -> int:
        """Handle configuration commands."""
        if args.config_action == "validate":
            try:
                settings = Settings()
            except SettingsValidationError as e:
                print(f"Configuration validation failed: {e}")
                return 1
            self._settings = settings
            print("Configuration is valid")

        print(json.dumps(self.settings.summary(), indent=2))
        return 0


def create_parser() -> argparse.ArgumentParser:
    """Create command-line argument parser."""
    parser = argparse.ArgumentParser(
        prog="shoplabel",
        description="ShopLabel CLI - database setup, server and configuration",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  shoplabel init-db                 # Create tables in DATABASE_URL
  shoplabel serve --port 3000       # Run the API
  shoplabel config show             # Print sanitized configuration
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    init_parser = subparsers.add_parser("init-db", help="Create database tables")
    init_parser.add_argument(
        "--drop",
        action="store_true",
        help="Drop existing tables first"
    )

    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", help="Bind address (default: API_HOST)")
    serve_parser.add_argument("--port", type=int, help="Port (default: API_PORT)")
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes")

    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_parser.add_argument(
        "config_action",
        choices=["show", "validate"],
        help="Configuration action to perform"
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging()

    if not args.command:
        parser.print_help()
        return 1

    cli = ShopLabelCLI()

    try:
        if args.command == "init-db":
            return cli.cmd_init_db(args)
        elif args.command == "serve":
            return cli.cmd_serve(args)
        elif args.command == "config":
            return cli.cmd_config(args)
        else:
            print(f"Unknown command: {args.command}")
            return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        return 130
    except Exception as e:
        cli_logger.error(f"CLI operation failed: {e}", exc_info=True)
        print(f"Operation failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
