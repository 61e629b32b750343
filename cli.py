#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import os
import subprocess
import sys


def run(cmd: list[str]) -> int:
    print("$", " ".join(cmd))
    return subprocess.call(cmd)


def cmd_test(args: argparse.Namespace) -> int:
    os.environ.setdefault("PYTHONUNBUFFERED", "1")
    pytest_args = ["pytest"]
    if args.quiet:
        pytest_args.append("-q")
    if args.k:
        pytest_args += ["-k", args.k]
    return run(pytest_args)


def cmd_serve(args: argparse.Namespace) -> int:
    from technews.config import SERVER_HOST, SERVER_PORT

    cmd = [
        sys.executable, "-m", "uvicorn", "technews.main:app",
        "--host", args.host or SERVER_HOST,
        "--port", str(args.port or SERVER_PORT),
    ]
    if args.reload:
        cmd.append("--reload")
    return run(cmd)


def cmd_init_db(args: argparse.Namespace) -> int:
    from technews.db import sa as db_sa

    async def _init() -> None:
        await db_sa.init_sa_engine(args.dsn)
        try:
            await db_sa.create_tables()
        finally:
            await db_sa.close_sa_engine()

    asyncio.run(_init())
    print("tables created")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="technews-cli", description="Project CLI helper")
    sub = parser.add_subparsers(dest="command", required=True)

    p_test = sub.add_parser("test", help="Run pytest")
    p_test.add_argument("-q", "--quiet", action="store_true", help="Quiet mode (-q)")
    p_test.add_argument("-k", help="Only run tests matching expression")
    p_test.set_defaults(func=cmd_test)

    p_serve = sub.add_parser("serve", help="Run the API with uvicorn")
    p_serve.add_argument("--host", help="Bind address (default: SERVER_HOST)")
    p_serve.add_argument("--port", type=int, help="Port (default: SERVER_PORT)")
    p_serve.add_argument("--reload", action="store_true", help="Auto-reload on code changes")
    p_serve.set_defaults(func=cmd_serve)

    p_init = sub.add_parser("init-db", help="Create database tables")
    p_init.add_argument("--dsn", help="Database URL (default: DATABASE_URL)")
    p_init.set_defaults(func=cmd_init_db)

    args = parser.parse_args(argv)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
