"""
Aggregation State Machine

Walks a fixed state graph, deciding from the feature flags which auxiliary
entities to fetch after the conversation itself:

    START -> MESSAGE_AND_THREAD -> [CHANNEL_INFO] -> [USER_INFO -> [TEAM_INFO]] -> END

Channel info comes before users so a direct message counterpart is included
in the user fetch; teams come after users because team ids are only known
from fetched user records.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional

from slack_archiver.integrations.slack.conversation import fetch_message_and_thread
from slack_archiver.integrations.slack.exceptions import (
    ChannelFetchFailed,
    InvalidStateTransition,
    MessageFetchFailed,
    MissingComponent,
    SlackArchiverError,
    StepFailed,
    TeamFetchFailed,
    TeamIdMissing,
    UserFetchFailed,
    UserIdMissing,
)
from slack_archiver.integrations.slack.fetcher import RemoteEntityFetcher
from slack_archiver.integrations.slack.models import (
    Channel,
    ChannelResponse,
    ComponentsBuilder,
    FeatureFlags,
    MessageAndThread,
    TeamResponse,
    User,
    UserResponse,
)
from slack_archiver.integrations.slack.parser import ParsedUrl
from slack_archiver.utils.identifiers import IdentifierSet

logger = logging.getLogger(__name__)


class AggregationState(str, Enum):
    """States of one retrieval."""

    START = "start"
    MESSAGE_AND_THREAD = "message_and_thread"
    CHANNEL_INFO = "channel_info"
    USER_INFO = "user_info"
    TEAM_INFO = "team_info"
    END = "end"


@dataclass(frozen=True)
class Transition:
    """Move from ``source`` to ``target`` when ``condition(flags)`` holds."""

    source: AggregationState
    condition: Callable[[FeatureFlags], bool]
    target: AggregationState


def _always(flags: FeatureFlags) -> bool:
    return True


TRANSITIONS: list[Transition] = [
    Transition(AggregationState.START, _always, AggregationState.MESSAGE_AND_THREAD),
    Transition(
        AggregationState.MESSAGE_AND_THREAD,
        lambda f: not f.fetch_channel and not f.fetch_users,
        AggregationState.END,
    ),
    Transition(
        AggregationState.MESSAGE_AND_THREAD,
        lambda f: f.fetch_channel,
        AggregationState.CHANNEL_INFO,
    ),
    Transition(
        AggregationState.MESSAGE_AND_THREAD,
        lambda f: f.fetch_users and not f.fetch_channel,
        AggregationState.USER_INFO,
    ),
    Transition(AggregationState.CHANNEL_INFO, lambda f: not f.fetch_users, AggregationState.END),
    Transition(AggregationState.CHANNEL_INFO, lambda f: f.fetch_users, AggregationState.USER_INFO),
    Transition(AggregationState.USER_INFO, lambda f: not f.fetch_team, AggregationState.END),
    Transition(AggregationState.USER_INFO, lambda f: f.fetch_team, AggregationState.TEAM_INFO),
    Transition(AggregationState.TEAM_INFO, _always, AggregationState.END),
]


def next_state(
    state: AggregationState,
    flags: FeatureFlags,
    transitions: list[Transition] = TRANSITIONS,
) -> AggregationState:
    """Return the state that follows ``state`` for ``flags``."""
    for transition in transitions:
        if transition.source == state and transition.condition(flags):
            return transition.target
    raise InvalidStateTransition(state, flags)


# ---------------------------------------------------------------------------
# Identifier collection
# ---------------------------------------------------------------------------


def collect_user_ids(
    message_and_thread: MessageAndThread, channel: Optional[Channel] = None
) -> IdentifierSet:
    """
    Collect every user id the conversation references.

    Senders and reacting users of all messages in ``message`` and
    ``thread``, plus the direct message counterpart of ``channel``.

    Raises:
        UserIdMissing: A message has no sender id
    """
    user_ids = IdentifierSet()
    for message in [*message_and_thread.message, *message_and_thread.thread]:
        if message.user is None:
            raise UserIdMissing(message.ts)
        user_ids.add(message.user)
        for reaction in message.reactions or []:
            user_ids.update(reaction.users)

    if channel is not None and channel.user is not None:
        user_ids.add(channel.user)

    return user_ids


def collect_team_ids(users: dict[str, User]) -> IdentifierSet:
    """
    Collect the team id of every fetched user.

    Raises:
        TeamIdMissing: A user has no team id
    """
    team_ids = IdentifierSet()
    for user_id, user in users.items():
        if user.team_id is None:
            raise TeamIdMissing(user_id)
        team_ids.add(user.team_id)
    return team_ids


# ---------------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------------


Step = Callable[[RemoteEntityFetcher, ParsedUrl, ComponentsBuilder], Awaitable[ComponentsBuilder]]


async def message_and_thread_step(
    fetcher: RemoteEntityFetcher, parsed: ParsedUrl, builder: ComponentsBuilder
) -> ComponentsBuilder:
    message_and_thread = await fetch_message_and_thread(fetcher, parsed)
    return builder.model_copy(update={"message_and_thread": message_and_thread})


async def channel_info_step(
    fetcher: RemoteEntityFetcher, parsed: ParsedUrl, builder: ComponentsBuilder
) -> ComponentsBuilder:
    channel = await fetcher.fetch_entity(
        parsed.channel_id,
        fetcher.client.conversations_info(parsed.channel_id),
        ChannelResponse,
        "channel",
    )
    return builder.model_copy(update={"channel": channel})


async def user_info_step(
    fetcher: RemoteEntityFetcher, parsed: ParsedUrl, builder: ComponentsBuilder
) -> ComponentsBuilder:
    if builder.message_and_thread is None:
        raise MissingComponent("message_and_thread")

    user_ids = collect_user_ids(builder.message_and_thread, builder.channel)
    users = await fetcher.fetch_many(
        user_ids, fetcher.client.users_info, UserResponse, "user"
    )
    return builder.model_copy(update={"users": users})


async def team_info_step(
    fetcher: RemoteEntityFetcher, parsed: ParsedUrl, builder: ComponentsBuilder
) -> ComponentsBuilder:
    if builder.users is None:
        raise MissingComponent("users")

    team_ids = collect_team_ids(builder.users)
    teams = await fetcher.fetch_many(
        team_ids, fetcher.client.team_info, TeamResponse, "team"
    )
    return builder.model_copy(update={"teams": teams})


STEPS: dict[AggregationState, tuple[Step, type[StepFailed]]] = {
    AggregationState.MESSAGE_AND_THREAD: (message_and_thread_step, MessageFetchFailed),
    AggregationState.CHANNEL_INFO: (channel_info_step, ChannelFetchFailed),
    AggregationState.USER_INFO: (user_info_step, UserFetchFailed),
    AggregationState.TEAM_INFO: (team_info_step, TeamFetchFailed),
}


class AggregationStateMachine:
    """
    Drives one retrieval from START to END.

    Each state's step must finish before the next transition is evaluated,
    since later steps consume what earlier ones fetched. The accumulator is
    passed into and returned from every step.
    """

    def __init__(
        self,
        fetcher: RemoteEntityFetcher,
        parsed: ParsedUrl,
        flags: FeatureFlags,
        transitions: list[Transition] = TRANSITIONS,
    ):
        self.fetcher = fetcher
        self.parsed = parsed
        self.flags = flags
        self.transitions = transitions

    async def transition(
        self, state: AggregationState, builder: ComponentsBuilder
    ) -> tuple[AggregationState, ComponentsBuilder]:
        """Move to the next state, running its step if it has one."""
        target = next_state(state, self.flags, self.transitions)
        logger.info(f"Transition {state.value} -> {target.value}")

        if target not in STEPS:
            return target, builder

        step, step_error = STEPS[target]
        try:
            builder = await step(self.fetcher, self.parsed, builder)
        except SlackArchiverError as e:
            logger.error(f"Step {target.value} failed: {e}")
            raise step_error() from e

        return target, builder

    async def run(self, builder: Optional[ComponentsBuilder] = None) -> ComponentsBuilder:
        """Run until END and return the filled accumulator."""
        state = AggregationState.START
        builder = builder or ComponentsBuilder()

        while state != AggregationState.END:
            state, builder = await self.transition(state, builder)

        return builder
