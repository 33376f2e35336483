"""
Slack API Client

Responsibilities:
- Credential validation (xoxc token, xoxd cookie) before any network call
- Building requests for conversations.replies, conversations.info,
  users.info and team.info
- Sending them through the injected transport

The client authenticates as the Slack web client does, so no Slack app has
to be installed in the workspace.
"""

import logging
from typing import Optional
from urllib.parse import urlencode

from slack_archiver.config import get_settings
from slack_archiver.integrations.slack.exceptions import InvalidApiCookie, InvalidApiToken
from slack_archiver.integrations.slack.models import Credentials
from slack_archiver.integrations.slack.transport import (
    get_default_transport,
    SlackRequest,
    Transport,
)

logger = logging.getLogger(__name__)

TOKEN_PREFIX = "xoxc"
COOKIE_PREFIX = "xoxd"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


def validate_credentials(credentials: Credentials) -> Credentials:
    """
    Check the token and cookie prefixes.

    Raises:
        InvalidApiToken: If the token does not start with 'xoxc'
        InvalidApiCookie: If the cookie does not start with 'xoxd'
    """
    if not credentials.api_token.startswith(TOKEN_PREFIX):
        raise InvalidApiToken(TOKEN_PREFIX)
    if not credentials.cookie.startswith(COOKIE_PREFIX):
        raise InvalidApiCookie(COOKIE_PREFIX)
    return credentials


class SlackClient:
    """Builds Slack web API requests and sends them through a transport."""

    def __init__(
        self,
        credentials: Credentials,
        transport: Optional[Transport] = None,
        api_base: Optional[str] = None,
    ):
        settings = get_settings()
        self.credentials = validate_credentials(credentials)
        self.transport = transport or get_default_transport()
        self.api_base = (api_base or settings.slack_api_base).rstrip("/")

    async def send(self, request: SlackRequest) -> str:
        return await self.transport(request)

    def _build_request_url(self, endpoint: str, params: list[tuple[str, str]]) -> str:
        query = urlencode([*params, ("pretty", "1")])
        return f"{self.api_base}/{endpoint}?{query}"

    def _base_headers(self) -> dict[str, str]:
        return {
            "content-type": FORM_CONTENT_TYPE,
            "cookie": f"d={self.credentials.cookie}",
        }

    def _post(self, url: str) -> SlackRequest:
        return SlackRequest(
            url=url,
            method="POST",
            headers=self._base_headers(),
            body=urlencode({"token": self.credentials.api_token}),
        )

    def _get(self, url: str) -> SlackRequest:
        headers = self._base_headers()
        headers["authorization"] = f"Bearer {self.credentials.api_token}"
        return SlackRequest(url=url, method="GET", headers=headers)

    def conversations_replies(self, channel_id: str, ts: str) -> SlackRequest:
        """Request for the thread rooted at ``ts`` in ``channel_id``."""
        logger.debug(f"Building conversations.replies request: channel={channel_id}, ts={ts}")
        url = self._build_request_url(
            "conversations.replies",
            [("channel", channel_id), ("ts", ts), ("inclusive", "true")],
        )
        return self._post(url)

    def conversations_info(self, channel_id: str) -> SlackRequest:
        logger.debug(f"Building conversations.info request: channel={channel_id}")
        return self._get(self._build_request_url("conversations.info", [("channel", channel_id)]))

    def users_info(self, user_id: str) -> SlackRequest:
        logger.debug(f"Building users.info request: user={user_id}")
        return self._get(self._build_request_url("users.info", [("user", user_id)]))

    def team_info(self, team_id: str) -> SlackRequest:
        logger.debug(f"Building team.info request: team={team_id}")
        return self._get(self._build_request_url("team.info", [("team", team_id)]))
