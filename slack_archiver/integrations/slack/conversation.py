"""
Conversation fetching

Fetches the thread a permalink points into and picks out the permalinked
message itself.
"""

import logging

from slack_archiver.integrations.slack.exceptions import (
    EntityMissing,
    InvalidMessageResponse,
    MessageNotFoundInThread,
    ResponseNotOk,
)
from slack_archiver.integrations.slack.fetcher import RemoteEntityFetcher
from slack_archiver.integrations.slack.models import MessageAndThread, MessagesResponse
from slack_archiver.integrations.slack.parser import ParsedUrl

logger = logging.getLogger(__name__)


async def fetch_message_and_thread(
    fetcher: RemoteEntityFetcher, parsed: ParsedUrl
) -> MessageAndThread:
    """
    Fetch the thread for a permalink.

    The thread is looked up by ``thread_ts`` (falling back to ``ts``), and
    ``message`` keeps only the entries whose own ts equals the permalink's
    ts. A permalink to a reply therefore resolves to that reply while the
    full thread is still returned.

    Raises:
        InvalidMessageResponse: Slack rejected the replies request
        MessageNotFoundInThread: The permalinked ts is not in the thread
    """
    thread_ts = parsed.effective_thread_ts
    request = fetcher.client.conversations_replies(parsed.channel_id, thread_ts)

    logger.info(f"Fetching thread {thread_ts} in channel {parsed.channel_id}")
    try:
        response = await fetcher.fetch_one(thread_ts, request, MessagesResponse)
    except ResponseNotOk as e:
        raise InvalidMessageResponse(parsed.channel_id, thread_ts) from e

    if response.messages is None:
        raise EntityMissing(thread_ts, "messages")

    thread = response.messages
    message = [msg for msg in thread if msg.ts == parsed.ts]

    if not message:
        raise MessageNotFoundInThread(parsed.ts, thread_ts)

    logger.info(f"Fetched {len(thread)} messages from thread {thread_ts}")
    return MessageAndThread(message=message, thread=thread)
