"""Command-line interface for the column registry."""

import argparse
import logging
import sys
from typing import Optional

from .config import settings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Column Registry - keep script column references in sync with sheet edits"
    )
    parser.add_argument(
        "--spreadsheet", "-s", help="Spreadsheet ID (default: COLREG_SPREADSHEET_ID)"
    )
    parser.add_argument(
        "--headless",
        action="store_true",
        default=settings.headless,
        help="Never prompt; accept marker matches and leave the rest unresolved",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    update_parser = subparsers.add_parser("update", help="Reconcile all columns of a script")
    update_parser.add_argument("script", help="Script identifier")

    lookup_parser = subparsers.add_parser("lookup", help="Show cached column positions")
    lookup_parser.add_argument("script", help="Script identifier")
    lookup_parser.add_argument("variable", nargs="?", help="Variable identifier")

    subparsers.add_parser("maintain", help="Prune, reconcile all scripts, rebuild notes")

    register_parser = subparsers.add_parser("register", help="Add a registry entry")
    register_parser.add_argument("script", help="Script identifier")
    register_parser.add_argument("variable", help="Variable identifier")
    register_parser.add_argument("sheet", help="Sheet the column lives in")
    register_parser.add_argument("--header", default="", help="Current header text")
    register_parser.add_argument("--position", type=int, default=-1, help="1-based column")

    subparsers.add_parser("auth", help="Authenticate with Google Sheets API")

    return parser


def main(argv: Optional[list[str]] = None):
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.command == "auth":
        run_auth()
        return

    try:
        registry = create_registry(args.spreadsheet, args.headless)
        run_command(registry, args)
    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)


def create_registry(spreadsheet_id: Optional[str], headless: bool):
    """Build a registry bound to a Google Spreadsheet."""
    from .prompts import ConsolePrompt
    from .registry import ColumnRegistry
    from .sheets import GoogleSheetsClient

    client = GoogleSheetsClient(spreadsheet_id)
    return ColumnRegistry(client, prompt=None if headless else ConsolePrompt())


def run_command(registry, args: argparse.Namespace):
    """Dispatch a parsed command to the registry."""
    if args.command == "update":
        results = registry.update_columns(args.script)
        for result in results:
            print(
                f"{result.entry.marker}: {result.status.value} "
                f"({result.old_position} -> {result.new_position})"
            )
    elif args.command == "lookup":
        if args.variable:
            print(registry.get_column_position(args.script, args.variable))
        else:
            for variable, position in registry.get_column_positions(args.script).items():
                print(f"{variable}\t{position}")
    elif args.command == "maintain":
        report = registry.perform_registry_maintenance()
        # The console prompt already reported the summary
        if registry.prompt is None:
            print(report.summary())
    elif args.command == "register":
        entry = registry.register_entry(
            args.script, args.variable, args.sheet, args.header, args.position
        )
        print(f"Registered {entry.marker}")


def run_auth():
    """Run the Google authentication flow."""
    from .sheets import GoogleSheetsClient

    print("Authenticating with Google Sheets API...")
    try:
        client = GoogleSheetsClient()
        # Accessing the service property triggers auth
        _ = client.service
        print("Authentication successful!")
        print("Token saved. You can now use the column registry with Google Sheets.")
    except Exception as e:
        print(f"Authentication failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
