"""Command-line interface for SheetMate."""

import argparse
import asyncio
import json
import logging
import sys

import uvicorn

from .config import settings


def main():
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(description="SheetMate - LLM spreadsheet assistant")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Server command
    server_parser = subparsers.add_parser("serve", help="Start the web server")
    server_parser.add_argument(
        "--host", default=settings.host, help=f"Host to bind to (default: {settings.host})"
    )
    server_parser.add_argument(
        "--port", type=int, default=settings.port, help=f"Port to bind to (default: {settings.port})"
    )
    server_parser.add_argument(
        "--reload", action="store_true", help="Enable auto-reload for development"
    )

    # Interactive command
    subparsers.add_parser("interactive", help="Start an interactive CLI session")

    # Auth command
    subparsers.add_parser("auth", help="Authenticate with Google Sheets API")

    args = parser.parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "serve":
        run_server(args.host, args.port, args.reload)
    elif args.command == "interactive":
        asyncio.run(run_interactive())
    elif args.command == "auth":
        run_auth()
    else:
        parser.print_help()
        sys.exit(1)


def run_server(host: str, port: int, reload: bool):
    """Run the web server."""
    uvicorn.run(
        "sheetmate.api:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
    )


def _print_report(report):
    mode = "simulated" if report.simulated else "applied"
    print(f"\n{report.queued}/{report.attempted} operations {mode}.")
    for error in report.errors:
        print(f"  Operation {error['index']} ({error['action']}) failed: {error['message']}")
    if report.sync_error:
        print(f"  Commit failed: {report.sync_error}")
    print()


async def run_interactive():
    """Run an interactive CLI session."""
    from .agent import Assistant
    from .errors import SheetMateError

    print("SheetMate Interactive Mode")
    print("=" * 40)
    print("Type 'quit' or 'exit' to exit.")
    print("Type 'reset' to clear conversation.")
    print("Type 'apply' or 'discard' to act on proposed changes.")
    print()

    assistant = Assistant()
    await assistant.initialize()
    print(f"Spreadsheet host: {assistant.host.name}")
    print()

    try:
        while True:
            try:
                user_input = input("You: ").strip()
            except EOFError:
                break

            if not user_input:
                continue

            command = user_input.lower()
            if command in ("quit", "exit"):
                print("Goodbye!")
                break

            if command == "reset":
                await assistant.reset_conversation()
                print("Conversation reset.")
                continue

            if command == "apply":
                if not assistant.pending_operations:
                    print("No pending changes.")
                    continue
                _print_report(await assistant.apply_pending())
                continue

            if command == "discard":
                count = assistant.discard_pending()
                print(f"Discarded {count} pending change(s).")
                continue

            try:
                reply = await assistant.chat(user_input)
            except SheetMateError as e:
                print(f"\nError: {e}\n")
                continue

            print(f"\nSheetMate: {reply.text}\n")
            if reply.operations:
                print(f"Proposed {len(reply.operations)} change(s):")
                for op in reply.operations:
                    print(f"  {json.dumps(op)}")
                print("Type 'apply' to update the sheet or 'discard' to drop them.\n")

    finally:
        await assistant.shutdown()


def run_auth():
    """Run the Google authentication flow."""
    from .sheets import GoogleSheetsHost

    print("Authenticating with Google Sheets API...")
    try:
        host = GoogleSheetsHost(settings.spreadsheet_id or "")
        # Accessing the service property triggers auth
        _ = host.service
        print("Authentication successful!")
        print("Token saved. You can now use SheetMate with Google Sheets.")
    except Exception as e:
        print(f"Authentication failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
