"""
Command line archiving.

Usage:
    python run.py archive <permalink> [--users/--no-users] [--channel/--no-channel]
                                      [--team/--no-team] [--files/--no-files] [--force]

Credentials come from --token / --cookie or SLACK_API_TOKEN / SLACK_API_COOKIE.
Feature flag defaults come from FETCH_USERS, FETCH_CHANNEL, FETCH_TEAM and
FETCH_FILES.
"""

import argparse
import asyncio
import logging
from typing import Optional

from slack_archiver.config import get_settings
from slack_archiver.integrations.slack.exceptions import UrlError
from slack_archiver.integrations.slack.models import Credentials, FeatureFlags
from slack_archiver.integrations.slack.parser import parse_permalink
from slack_archiver.integrations.slack.transport import Transport
from slack_archiver.services.archive_store import ArchiveStore
from slack_archiver.services.assembler import create_file_name
from slack_archiver.services.retrieval import retrieve_or_message

logger = logging.getLogger(__name__)


def add_archive_arguments(parser: argparse.ArgumentParser) -> None:
    settings = get_settings()
    flag = argparse.BooleanOptionalAction
    parser.add_argument("permalink", help="Slack message permalink")
    parser.add_argument("--token", help="xoxc token (default: SLACK_API_TOKEN)")
    parser.add_argument("--cookie", help="xoxd cookie (default: SLACK_API_COOKIE)")
    parser.add_argument("--output", default=settings.archive_dir, help="Archive directory")
    parser.add_argument("--users", action=flag, default=settings.fetch_users)
    parser.add_argument("--channel", action=flag, default=settings.fetch_channel)
    parser.add_argument("--team", action=flag, default=settings.fetch_team)
    parser.add_argument("--files", action=flag, default=settings.fetch_files)
    parser.add_argument(
        "--force", action="store_true", help="Fetch again even if the archive file exists"
    )


def existing_archive(store: ArchiveStore, permalink: str) -> Optional[str]:
    """Path of the archive already written for ``permalink``, if any."""
    try:
        file_name = create_file_name(parse_permalink(permalink))
    except UrlError:
        # Reported by the retrieval itself
        return None
    if not store.exists(file_name):
        return None
    return str(store.path_for(file_name))


async def archive(args: argparse.Namespace, transport: Optional[Transport] = None) -> int:
    """Archive one permalink. Returns the process exit code."""
    settings = get_settings()
    store = ArchiveStore(args.output)

    if not args.force:
        path = existing_archive(store, args.permalink)
        if path is not None:
            logger.info(f"Skipping {args.permalink}: already archived")
            print(f"Already archived at {path} (use --force to fetch again)")
            return 0

    credentials = Credentials(
        api_token=args.token or settings.slack_api_token,
        cookie=args.cookie or settings.slack_api_cookie,
    )
    flags = FeatureFlags(
        fetch_users=args.users,
        fetch_channel=args.channel,
        fetch_team=args.team,
        fetch_files=args.files,
    )

    result = await retrieve_or_message(credentials, args.permalink, flags, transport=transport)
    if not result.success:
        print(result.error)
        return 1

    path = store.save(result.components)
    print(f"Archived {len(result.components.message_and_thread.thread)} messages to {path}")
    return 0


def run_archive(args: argparse.Namespace) -> int:
    return asyncio.run(archive(args))
