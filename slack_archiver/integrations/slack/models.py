"""
Slack Data Models

Entities as returned by the Slack web API plus the aggregate produced by a
retrieval. Raw entities reference each other by id (``Message.user``,
``Reaction.users``, ``Channel.user``, ``User.team_id``); the ``*_info``
fields stay empty until the finalizer populates them.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class FeatureFlags(BaseModel):
    """Which optional entities a retrieval fetches."""

    model_config = ConfigDict(frozen=True)

    fetch_users: bool = False
    fetch_channel: bool = False
    fetch_team: bool = False
    fetch_files: bool = False  # Only exposes file links, no fetch


class Credentials(BaseModel):
    """Slack web client token (xoxc) and its matching "d" cookie (xoxd)."""

    api_token: str = Field(repr=False)
    cookie: str = Field(repr=False)


class Team(BaseModel):
    id: str
    name: str
    domain: str | None = None
    email_domain: str | None = None
    enterprise_id: str | None = None
    enterprise_name: str | None = None


class User(BaseModel):
    id: str
    team_id: str | None = None
    team_info: Team | None = None
    name: str | None = None
    real_name: str | None = None


class File(BaseModel):
    """File attached to a message. ``url_private`` needs auth to download."""

    id: str | None = None
    name: str | None = None
    user_team: str | None = None
    title: str | None = None
    mimetype: str | None = None
    filetype: str | None = None
    size: int | None = None
    url_private: str | None = None
    url_private_download: str | None = None
    permalink: str | None = None
    permalink_public: str | None = None


class Reaction(BaseModel):
    name: str
    users: list[str] = []
    users_info: list[User] | None = None
    count: int = 0


class Message(BaseModel):
    """One Slack message."""

    type: str | None = None
    user: str | None = None  # Sender id
    user_info: User | None = None
    text: str | None = None
    thread_ts: str | None = None
    reply_count: int | None = None
    ts: str | None = None
    reactions: list[Reaction] | None = None
    files: list[File] | None = None


class MessageAndThread(BaseModel):
    """The permalinked message(s) and the full thread they belong to."""

    message: list[Message]
    thread: list[Message]


class ChannelAuxData(BaseModel):
    """Topic or purpose of a channel."""

    value: str | None = None
    creator: str | None = None
    last_set: int | None = None


class Channel(BaseModel):
    id: str | None = None
    name: str | None = None
    is_channel: bool | None = None
    is_group: bool | None = None
    is_im: bool | None = None
    is_mpim: bool | None = None
    is_private: bool | None = None
    is_archived: bool | None = None
    is_general: bool | None = None
    is_shared: bool | None = None
    is_org_shared: bool | None = None
    is_member: bool | None = None
    is_read_only: bool | None = None
    is_open: bool | None = None
    created: int | None = None
    creator: str | None = None
    unlinked: int | None = None
    name_normalized: str | None = None
    last_read: str | None = None
    topic: ChannelAuxData | None = None
    purpose: ChannelAuxData | None = None
    previous_names: list[str] | None = None
    locale: str | None = None
    user: str | None = None  # Counterpart id, direct messages only
    user_info: User | None = None
    latest: Message | None = None
    unread_count: int | None = None
    unread_count_display: int | None = None
    priority: float | None = None


# Response envelopes


class SlackResponse(BaseModel):
    """Common envelope of every Slack web API response."""

    ok: bool | None = None
    error: str | None = None


class MessagesResponse(SlackResponse):
    messages: list[Message] | None = None


class ChannelResponse(SlackResponse):
    channel: Channel | None = None


class UserResponse(SlackResponse):
    user: User | None = None


class TeamResponse(SlackResponse):
    team: Team | None = None


# Aggregate


class ComponentsBuilder(BaseModel):
    """Accumulator the state machine fills in, one step at a time."""

    message_and_thread: Optional[MessageAndThread] = None
    users: Optional[dict[str, User]] = None
    channel: Optional[Channel] = None
    teams: Optional[dict[str, Team]] = None


class ComponentsAggregate(BaseModel):
    """Finalized, denormalized result of one retrieval."""

    model_config = ConfigDict(frozen=True)

    message_and_thread: MessageAndThread
    file_name: str
    users: Optional[dict[str, User]] = None
    channel: Optional[Channel] = None
    teams: Optional[dict[str, Team]] = None
    file_links: Optional[dict[str, str]] = None
