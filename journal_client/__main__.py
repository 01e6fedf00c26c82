"""Command-line entrypoint for inspecting and managing the local session."""

from __future__ import annotations

import argparse
import asyncio
import getpass
import sys
from typing import List, Optional

from journal_client.app_state import JournalAppState
from journal_client.config import ClientSettings, configure_logging
from journal_client.errors import ApiError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="journal_client", description="Journal client session tools")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("status", help="Restore the stored session and show who is signed in")

    login = sub.add_parser("login", help="Sign in and store the credential")
    login.add_argument("email")
    login.add_argument("--password", help="Read from the terminal when omitted")

    sub.add_parser("logout", help="Forget the stored credential")
    return parser


async def _run(args: argparse.Namespace, settings: ClientSettings) -> int:
    app = JournalAppState(settings)
    try:
        if args.command == "status":
            await app.start()
            snapshot = app.session.snapshot()
            if snapshot.user is None:
                print(f"{snapshot.phase.value}: not signed in")
            else:
                print(f"{snapshot.phase.value}: {snapshot.user.username} <{snapshot.user.email}> ({snapshot.plan.value})")
            return 0

        if args.command == "login":
            password = args.password or getpass.getpass("Password: ")
            user = await app.session.login(args.email, password)
            print(f"Signed in as {user.username}")
            return 0

        app.session.logout()
        print("Signed out")
        return 0
    except ApiError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        await app.close()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = ClientSettings.from_env()
    configure_logging(settings.log_level)
    return asyncio.run(_run(args, settings))


if __name__ == "__main__":
    sys.exit(main())
