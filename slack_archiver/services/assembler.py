"""
Output assembly: archive file naming, file links and finalization.
"""

import logging

from slack_archiver.integrations.slack.models import (
    ComponentsAggregate,
    ComponentsBuilder,
    FeatureFlags,
    MessageAndThread,
)
from slack_archiver.integrations.slack.parser import ParsedUrl
from slack_archiver.services.finalizer import finalize

logger = logging.getLogger(__name__)


def create_file_name(parsed: ParsedUrl) -> str:
    """
    Derive the archive file name for a permalink.

    Examples:
        C123, ts=1.1, no thread_ts   -> "C123-1.1.json"
        C123, ts=2.2, thread_ts=1.1  -> "C123-1.1-2.2.json"
    """
    timestamps = sorted({parsed.effective_thread_ts, parsed.ts})
    return "-".join([parsed.channel_id, *timestamps]) + ".json"


def collect_file_links(message_and_thread: MessageAndThread) -> dict[str, str]:
    """Map "{user_team}-{file id}" to the private URL of every file in the thread."""
    links = {}
    for message in message_and_thread.thread:
        for file in message.files or []:
            if file.url_private is None:
                logger.warning(f"File {file.id} in message {message.ts} has no private url")
                continue
            if file.user_team is None:
                logger.warning(f"File {file.id} in message {message.ts} has no team")
                continue
            links[f"{file.user_team}-{file.id}"] = file.url_private
    return links


def assemble(
    builder: ComponentsBuilder, parsed: ParsedUrl, flags: FeatureFlags
) -> ComponentsAggregate:
    """Name, attach file links (when requested) and finalize."""
    file_name = create_file_name(parsed)

    file_links = None
    if flags.fetch_files and builder.message_and_thread is not None:
        file_links = collect_file_links(builder.message_and_thread)

    return finalize(builder, file_name=file_name, file_links=file_links)
