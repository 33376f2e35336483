"""
Conversation Retrieval

Entry point: permalink in, finalized archive document out.

Pipeline:
1. Validate credentials (no network activity before this passes)
2. Parse the permalink
3. Run the aggregation state machine
4. Name, finalize and return the aggregate
"""

import logging
from dataclasses import dataclass
from typing import Optional

from slack_archiver.integrations.slack.client import SlackClient, validate_credentials
from slack_archiver.integrations.slack.exceptions import SlackArchiverError, describe_error
from slack_archiver.integrations.slack.fetcher import RemoteEntityFetcher
from slack_archiver.integrations.slack.models import (
    ComponentsAggregate,
    Credentials,
    FeatureFlags,
)
from slack_archiver.integrations.slack.parser import parse_permalink
from slack_archiver.integrations.slack.transport import Transport
from slack_archiver.services.assembler import assemble
from slack_archiver.services.state_machine import AggregationStateMachine

logger = logging.getLogger(__name__)

ERROR_PREFIX = "There was a problem getting slack messages. Error message: "


async def retrieve(
    credentials: Credentials,
    permalink: str,
    feature_flags: FeatureFlags,
    transport: Optional[Transport] = None,
    api_base: Optional[str] = None,
) -> ComponentsAggregate:
    """
    Retrieve the conversation a permalink points to.

    Args:
        credentials: xoxc token and xoxd cookie
        permalink: Slack message permalink
        feature_flags: Which optional entities to fetch
        transport: Async request function (default: RequestsTransport)
        api_base: Slack API base URL (default: from settings)

    Returns:
        The finalized ComponentsAggregate

    Raises:
        SlackArchiverError: Any validation, remote or consistency failure.
            Nothing partial is returned.
    """
    validate_credentials(credentials)
    parsed = parse_permalink(permalink)

    logger.info(
        f"Retrieving conversation: channel={parsed.channel_id}, ts={parsed.ts}, "
        f"thread_ts={parsed.thread_ts}, flags={feature_flags.model_dump()}"
    )

    client = SlackClient(credentials, transport=transport, api_base=api_base)
    fetcher = RemoteEntityFetcher(client)
    machine = AggregationStateMachine(fetcher, parsed, feature_flags)

    builder = await machine.run()
    components = assemble(builder, parsed, feature_flags)

    logger.info(
        f"Retrieval complete: {components.file_name} "
        f"({len(components.message_and_thread.thread)} messages in thread)"
    )
    return components


@dataclass
class RetrievalResult:
    """Outcome of a retrieval, for hosts that display errors instead of raising."""

    success: bool
    components: ComponentsAggregate | None = None
    error: str | None = None


async def retrieve_or_message(
    credentials: Credentials,
    permalink: str,
    feature_flags: FeatureFlags,
    transport: Optional[Transport] = None,
    api_base: Optional[str] = None,
) -> RetrievalResult:
    """Like retrieve(), but failures come back as a user-facing message."""
    try:
        components = await retrieve(
            credentials, permalink, feature_flags, transport=transport, api_base=api_base
        )
    except SlackArchiverError as e:
        message = ERROR_PREFIX + describe_error(e)
        logger.error(message, exc_info=True)
        return RetrievalResult(success=False, error=message)

    return RetrievalResult(success=True, components=components)
