"""
Finalizer

Denormalizes the accumulator: every id reference (message sender, reaction
users, channel counterpart, user's team) is replaced by the fetched entity.
Enrichment is additive; when users were never fetched, the raw graph is
returned as it is.
"""

import logging
from typing import Optional

from slack_archiver.integrations.slack.exceptions import (
    MissingComponent,
    TeamIdMissing,
    TeamIdNotFoundInTeamMap,
    UserIdMissing,
    UserIdNotFoundInUserMap,
)
from slack_archiver.integrations.slack.models import (
    Channel,
    ComponentsAggregate,
    ComponentsBuilder,
    Message,
    MessageAndThread,
    Reaction,
    Team,
    User,
)
from slack_archiver.utils.identifiers import resolve

logger = logging.getLogger(__name__)


def finalize_users(users: dict[str, User], teams: dict[str, Team]) -> dict[str, User]:
    """Attach each user's team."""
    finalized = {}
    for user_id, user in users.items():
        if user.team_id is None:
            raise TeamIdMissing(user_id)
        team = resolve(user.team_id, teams, TeamIdNotFoundInTeamMap)
        finalized[user_id] = user.model_copy(update={"team_info": team})
    return finalized


def finalize_reaction(reaction: Reaction, users: dict[str, User]) -> Reaction:
    users_info = [resolve(user_id, users, UserIdNotFoundInUserMap) for user_id in reaction.users]
    return reaction.model_copy(update={"users_info": users_info})


def finalize_message(message: Message, users: dict[str, User]) -> Message:
    if message.user is None:
        raise UserIdMissing(message.ts)

    update = {"user_info": resolve(message.user, users, UserIdNotFoundInUserMap)}
    if message.reactions is not None:
        update["reactions"] = [finalize_reaction(r, users) for r in message.reactions]
    return message.model_copy(update=update)


def finalize_message_and_thread(
    message_and_thread: MessageAndThread, users: dict[str, User]
) -> MessageAndThread:
    return MessageAndThread(
        message=[finalize_message(m, users) for m in message_and_thread.message],
        thread=[finalize_message(m, users) for m in message_and_thread.thread],
    )


def finalize_channel(channel: Channel, users: dict[str, User]) -> Channel:
    if channel.user is None:
        return channel
    user = resolve(channel.user, users, UserIdNotFoundInUserMap)
    return channel.model_copy(update={"user_info": user})


def finalize(
    builder: ComponentsBuilder,
    file_name: str,
    file_links: Optional[dict[str, str]] = None,
) -> ComponentsAggregate:
    """
    Produce the final aggregate from a filled accumulator.

    Order matters: users get their teams first, so the users attached to
    messages, reactions and the channel already carry team info.

    Raises:
        MissingComponent: The conversation was never fetched
        TeamIdNotFoundInTeamMap: A user's team was not fetched
        UserIdNotFoundInUserMap: A referenced user was not fetched
    """
    if builder.message_and_thread is None:
        raise MissingComponent("message_and_thread")

    users = builder.users
    message_and_thread = builder.message_and_thread
    channel = builder.channel

    if users is not None and builder.teams is not None:
        users = finalize_users(users, builder.teams)

    if users is not None:
        message_and_thread = finalize_message_and_thread(message_and_thread, users)
        if channel is not None:
            channel = finalize_channel(channel, users)
        logger.info(f"Finalized conversation with {len(users)} users")

    return ComponentsAggregate(
        message_and_thread=message_and_thread,
        file_name=file_name,
        users=users,
        channel=channel,
        teams=builder.teams,
        file_links=file_links,
    )
