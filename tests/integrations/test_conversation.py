"""
Tests for fetching the message and thread behind a permalink.
"""

import pytest

from slack_archiver.integrations.slack.client import SlackClient
from slack_archiver.integrations.slack.conversation import fetch_message_and_thread
from slack_archiver.integrations.slack.exceptions import (
    InvalidMessageResponse,
    MessageNotFoundInThread,
    ResponseNotOk,
)
from slack_archiver.integrations.slack.fetcher import RemoteEntityFetcher
from slack_archiver.integrations.slack.parser import ParsedUrl

from fakes import (
    CHANNEL_ID,
    CREDENTIALS,
    REPLY_TS,
    ROOT_TS,
    FakeTransport,
    error_response,
    raw_message,
    replies_response,
)

THREAD = [
    raw_message(ROOT_TS, user="U1", text="root"),
    raw_message(REPLY_TS, user="U2", text="first reply"),
    raw_message("1700000099.000300", user="U1", text="second reply"),
]


def make_fetcher(response):
    transport = FakeTransport({("conversations.replies", ROOT_TS): response})
    return RemoteEntityFetcher(SlackClient(CREDENTIALS, transport=transport)), transport


@pytest.mark.asyncio
async def test_root_permalink_selects_root_message():
    fetcher, transport = make_fetcher(replies_response(THREAD))

    result = await fetch_message_and_thread(fetcher, ParsedUrl(CHANNEL_ID, ROOT_TS))

    assert [m.ts for m in result.thread] == [ROOT_TS, REPLY_TS, "1700000099.000300"]
    assert [m.ts for m in result.message] == [ROOT_TS]
    assert transport.calls_to("conversations.replies") == [ROOT_TS]


@pytest.mark.asyncio
async def test_reply_permalink_selects_reply_but_keeps_thread():
    """The thread is looked up by thread_ts while message matches ts."""
    fetcher, transport = make_fetcher(replies_response(THREAD))

    result = await fetch_message_and_thread(fetcher, ParsedUrl(CHANNEL_ID, REPLY_TS, ROOT_TS))

    assert len(result.thread) == 3
    assert [m.text for m in result.message] == ["first reply"]
    assert transport.calls_to("conversations.replies") == [ROOT_TS]


@pytest.mark.asyncio
async def test_message_is_subset_of_thread():
    fetcher, _ = make_fetcher(replies_response(THREAD))

    result = await fetch_message_and_thread(fetcher, ParsedUrl(CHANNEL_ID, REPLY_TS, ROOT_TS))

    assert result.message
    assert all(m in result.thread for m in result.message)
    assert all(m.ts == REPLY_TS for m in result.message)


@pytest.mark.asyncio
async def test_missing_permalinked_message_is_an_error():
    """A deleted reply must not silently yield an empty message list."""
    fetcher, _ = make_fetcher(replies_response(THREAD[:1]))

    with pytest.raises(MessageNotFoundInThread) as exc_info:
        await fetch_message_and_thread(fetcher, ParsedUrl(CHANNEL_ID, REPLY_TS, ROOT_TS))

    assert exc_info.value.ts == REPLY_TS
    assert exc_info.value.thread_ts == ROOT_TS


@pytest.mark.asyncio
async def test_not_ok_replies_response():
    fetcher, _ = make_fetcher(error_response("thread_not_found"))

    with pytest.raises(InvalidMessageResponse) as exc_info:
        await fetch_message_and_thread(fetcher, ParsedUrl(CHANNEL_ID, ROOT_TS))

    assert isinstance(exc_info.value.__cause__, ResponseNotOk)
    assert "thread_not_found" in exc_info.value.__cause__.response
