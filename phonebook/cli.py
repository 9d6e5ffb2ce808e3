"""Command line entry for the Phonebook service."""

from __future__ import annotations

import argparse
from datetime import timedelta
from typing import Optional, Sequence

import uvicorn

from phonebook.core.security import create_access_token


def run_server(host: str = "0.0.0.0", port: int = 8080) -> None:
    uvicorn.run("phonebook.api.main:app", host=host, port=port)


def issue_token(user_id: str, username: Optional[str] = None, expires_minutes: Optional[int] = None) -> str:
    expires = timedelta(minutes=expires_minutes) if expires_minutes else None
    return create_access_token(user_id, username=username, expires_delta=expires)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="phonebook", description="Phonebook persons service")
    commands = parser.add_subparsers(dest="command", required=True)

    serve = commands.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8080)

    token = commands.add_parser("token", help="Print a bearer token for a user id")
    token.add_argument("user_id")
    token.add_argument("--username")
    token.add_argument("--expires-minutes", type=int)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    if args.command == "serve":
        run_server(args.host, args.port)
    elif args.command == "token":
        print(issue_token(args.user_id, args.username, args.expires_minutes))


if __name__ == "__main__":
    main()
