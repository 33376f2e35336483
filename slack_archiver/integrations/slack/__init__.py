# Slack integration module
from slack_archiver.integrations.slack.client import SlackClient, validate_credentials
from slack_archiver.integrations.slack.conversation import fetch_message_and_thread
from slack_archiver.integrations.slack.fetcher import RemoteEntityFetcher
from slack_archiver.integrations.slack.models import (
    Channel,
    ComponentsAggregate,
    ComponentsBuilder,
    Credentials,
    FeatureFlags,
    Message,
    MessageAndThread,
    Reaction,
    Team,
    User,
)
from slack_archiver.integrations.slack.parser import ParsedUrl, parse_permalink
from slack_archiver.integrations.slack.transport import RequestsTransport, SlackRequest, get_default_transport

__all__ = [
    "SlackClient",
    "validate_credentials",
    "fetch_message_and_thread",
    "RemoteEntityFetcher",
    "Channel",
    "ComponentsAggregate",
    "ComponentsBuilder",
    "Credentials",
    "FeatureFlags",
    "Message",
    "MessageAndThread",
    "Reaction",
    "Team",
    "User",
    "ParsedUrl",
    "parse_permalink",
    "RequestsTransport",
    "SlackRequest",
    "get_default_transport",
]
