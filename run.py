"""
Server runner and command line entry point.

Usage:
    python run.py                      Start the API server
    python run.py archive <permalink>  Archive one conversation and exit

Environment variables (set in .env file):
    DEBUG=true - Enable debug logging
    PORT=8000 - Set server port (default: 8000)
    HOST=127.0.0.1 - Set server host (default: 127.0.0.1)
    SLACK_API_TOKEN / SLACK_API_COOKIE - Default credentials
    ARCHIVE_DIR=archive - Where archived conversations are written
"""

import argparse
import os
import sys

import uvicorn
from slack_archiver.cli import add_archive_arguments, run_archive
from slack_archiver.config import get_settings
from slack_archiver.main import configure_logging


def serve(args: argparse.Namespace) -> int:
    settings = get_settings()
    log_level = "debug" if settings.debug else "info"

    print(f"Starting {settings.app_name} server...")
    print(f"Host: {args.host}")
    print(f"Port: {args.port}")
    print(f"Log Level: {log_level}")
    print(f"Archive directory: {settings.archive_dir}")
    print(f"Docs available at: http://{args.host}:{args.port}/docs")

    uvicorn.run(
        "slack_archiver.main:app",
        host=args.host,
        port=args.port,
        reload=settings.debug,
        log_level=log_level,
        access_log=True,
    )
    return 0


def main(argv: list[str]) -> int:
    settings = get_settings()
    configure_logging(settings)

    parser = argparse.ArgumentParser(description=settings.app_name)
    parser.set_defaults(handler=serve, host=os.getenv("HOST", "127.0.0.1"), port=int(os.getenv("PORT", "8000")))
    commands = parser.add_subparsers(dest="command")

    serve_parser = commands.add_parser("serve", help="Start the API server")
    serve_parser.add_argument("--host", default=os.getenv("HOST", "127.0.0.1"))
    serve_parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "8000")))
    serve_parser.set_defaults(handler=serve)

    archive_parser = commands.add_parser("archive", help="Archive one permalink and exit")
    add_archive_arguments(archive_parser)
    archive_parser.set_defaults(handler=run_archive)

    args = parser.parse_args(argv)
    return args.handler(args)


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
