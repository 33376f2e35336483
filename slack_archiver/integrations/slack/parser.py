"""
Slack Permalink Parser

Parses Slack message permalinks to extract channel_id, ts and thread_ts.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import parse_qs, urlsplit

from slack_archiver.integrations.slack.exceptions import (
    ChannelIdNotFound,
    TimestampMalformed,
    TimestampNotFound,
    UrlParseError,
)

logger = logging.getLogger(__name__)

# Channel ids are prefixed with C (public), D (direct message) or G (group)
CHANNEL_PREFIXES = ("C", "D", "G")
THREAD_TS_KEY = "thread_ts"
TS_INTEGER_DIGITS = 10

_TS_SEGMENT = re.compile(r"^p(\d+)$")


@dataclass(frozen=True)
class ParsedUrl:
    """Parsed Slack permalink components."""

    channel_id: str
    ts: str
    thread_ts: Optional[str] = None

    @property
    def effective_thread_ts(self) -> str:
        """Timestamp of the thread root; the message itself when not in a thread."""
        return self.thread_ts or self.ts


def parse_permalink(permalink: str) -> ParsedUrl:
    """
    Parse a Slack permalink to extract channel and timestamps.

    Examples:
        https://myworkspace.slack.com/archives/C123ABC456/p1234567890123456
        -> channel_id: C123ABC456
        -> ts: 1234567890.123456

        https://myworkspace.slack.com/archives/C123ABC456/p1234567899000100?thread_ts=1234567890.123456&cid=C123ABC456
        -> ts: 1234567899.000100
        -> thread_ts: 1234567890.123456

    Args:
        permalink: Full Slack permalink URL

    Returns:
        ParsedUrl with channel_id, ts and optional thread_ts

    Raises:
        UrlParseError: If the permalink is not a URL
        ChannelIdNotFound: If no path segment starts with C, D or G
        TimestampNotFound: If no path segment looks like p<digits>
        TimestampMalformed: If the timestamp has fewer than 10 digits
    """
    try:
        url = urlsplit(permalink.strip())
    except (ValueError, AttributeError) as e:
        raise UrlParseError(str(permalink), str(e)) from e

    if not url.scheme or not url.netloc:
        raise UrlParseError(permalink, "relative URL without a base")

    segments = [segment for segment in url.path.split("/") if segment]

    channel_id = _parse_channel_id(permalink, segments)
    ts = _parse_ts(permalink, segments)
    thread_ts = _parse_thread_ts(url.query)

    logger.debug(f"Parsed permalink: channel={channel_id}, ts={ts}, thread_ts={thread_ts}")
    return ParsedUrl(channel_id=channel_id, ts=ts, thread_ts=thread_ts)


def _parse_channel_id(permalink: str, segments: list[str]) -> str:
    for segment in segments:
        if segment.startswith(CHANNEL_PREFIXES):
            return segment
    raise ChannelIdNotFound(permalink, segments)


def _parse_ts(permalink: str, segments: list[str]) -> str:
    # p1234567890123456 -> 1234567890.123456 (10 integer digits, rest fractional)
    for segment in segments:
        match = _TS_SEGMENT.match(segment)
        if not match:
            continue
        digits = match.group(1)
        if len(digits) < TS_INTEGER_DIGITS:
            raise TimestampMalformed(permalink, segment)
        return f"{digits[:TS_INTEGER_DIGITS]}.{digits[TS_INTEGER_DIGITS:]}"
    raise TimestampNotFound(permalink, segments)


def _parse_thread_ts(query: str) -> Optional[str]:
    values = parse_qs(query).get(THREAD_TS_KEY)
    return values[0] if values else None
