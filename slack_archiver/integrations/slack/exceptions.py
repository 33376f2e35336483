"""
Slack Archiver Exceptions

Every failure raised while retrieving a conversation derives from
SlackArchiverError. Errors are chained with ``raise ... from ...`` so the
full cause chain is available for diagnostics, while ``describe_error``
renders it as a single string for display.
"""


class SlackArchiverError(Exception):
    """Base exception for all retrieval errors."""

    pass


# ---------------------------------------------------------------------------
# Input / credential validation
# ---------------------------------------------------------------------------


class ValidationError(SlackArchiverError):
    """Input rejected before any network activity."""

    pass


class InvalidApiToken(ValidationError):
    """The api token does not carry the required prefix."""

    def __init__(self, prefix: str):
        self.prefix = prefix
        super().__init__(f"Provided api token was invalid. Api token must start with '{prefix}'")


class InvalidApiCookie(ValidationError):
    """The api cookie does not carry the required prefix."""

    def __init__(self, prefix: str):
        self.prefix = prefix
        super().__init__(f"Provided api cookie was invalid. Cookie must start with '{prefix}'")


class UrlError(ValidationError):
    """Base exception for permalink parsing errors."""

    def __init__(self, message: str, url: str):
        self.url = url
        super().__init__(f"{message}. url: {url}")


class UrlParseError(UrlError):
    """The permalink could not be parsed as a URL at all."""

    def __init__(self, url: str, diagnostic: str):
        self.diagnostic = diagnostic
        super().__init__(f"There was an issue parsing the slack url: {diagnostic}", url)


class ChannelIdNotFound(UrlError):
    """No path segment looks like a channel id."""

    def __init__(self, url: str, segments: list[str]):
        self.segments = segments
        super().__init__(
            f"No channel ID found. Channel id must start with 'C', 'D', or 'G'. path segments: {segments}",
            url,
        )


class TimestampNotFound(UrlError):
    """No path segment carries a p-prefixed timestamp."""

    def __init__(self, url: str, segments: list[str]):
        self.segments = segments
        super().__init__(f"No timestamp found in path segments: {segments}", url)


class TimestampMalformed(UrlError):
    """The p-prefixed timestamp is too short to split."""

    def __init__(self, url: str, segment: str):
        self.segment = segment
        super().__init__(
            f"Timestamp segment '{segment}' must carry at least 10 digits after 'p'",
            url,
        )


# ---------------------------------------------------------------------------
# Remote errors
# ---------------------------------------------------------------------------


class RemoteError(SlackArchiverError):
    """Base exception for failures talking to the Slack API."""

    pass


class TransportError(RemoteError):
    """The transport failed to deliver a request."""

    def __init__(self, identifier: str, original_error: Exception):
        self.identifier = identifier
        self.original_error = original_error
        super().__init__(f"Request for '{identifier}' failed in transport: {original_error}")


class ResponseDecodeError(RemoteError):
    """The response body was not a JSON object matching the envelope."""

    def __init__(self, identifier: str, body: str, reason: str):
        self.identifier = identifier
        self.body = body
        super().__init__(
            f"Could not decode response for '{identifier}': {reason} - body: {body[:500]}"
        )


class ResponseNotOk(RemoteError):
    """The Slack API answered with ok = false (or without an ok field)."""

    def __init__(self, identifier: str, response: str):
        self.identifier = identifier
        self.response = response
        super().__init__(f"The slack response for '{identifier}' was not ok: {response}")


class InvalidMessageResponse(RemoteError):
    """The replies response was rejected by Slack."""

    def __init__(self, channel_id: str, ts: str):
        self.channel_id = channel_id
        self.ts = ts
        super().__init__(f"The message response for {channel_id}/{ts} was not ok")


class EntityMissing(RemoteError):
    """An ok response did not contain the requested entity."""

    def __init__(self, identifier: str, field: str):
        self.identifier = identifier
        self.field = field
        super().__init__(f"Response for '{identifier}' was ok but had no '{field}'")


# ---------------------------------------------------------------------------
# Consistency errors
# ---------------------------------------------------------------------------


class ConsistencyError(SlackArchiverError):
    """Fetched data is internally inconsistent."""

    pass


class MessageNotFoundInThread(ConsistencyError):
    """The permalinked message is not part of the thread that was fetched."""

    def __init__(self, ts: str, thread_ts: str):
        self.ts = ts
        self.thread_ts = thread_ts
        super().__init__(
            f"Message with ts {ts} was not found in thread {thread_ts}"
        )


class UserIdMissing(ConsistencyError):
    """A message has no sender id."""

    def __init__(self, ts: str | None):
        self.ts = ts
        super().__init__(f"Attempted to retrieve the user id for message {ts}, but found none")


class TeamIdMissing(ConsistencyError):
    """A user record has no team id."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"Attempted to retrieve the team id for user {user_id}, but found none")


class IdNotFoundInMap(ConsistencyError):
    """An id referenced by the graph was never fetched."""

    kind = "entity"

    def __init__(self, identifier: str, known: list[str]):
        self.identifier = identifier
        self.known = known
        super().__init__(
            f"{self.kind} id was not in {self.kind.lower()} map. "
            f"{self.kind.lower()}_id: {identifier} - known ids: {sorted(known)}"
        )


class UserIdNotFoundInUserMap(IdNotFoundInMap):
    kind = "User"


class TeamIdNotFoundInTeamMap(IdNotFoundInMap):
    kind = "Team"


class MissingComponent(ConsistencyError):
    """A component required by a later step was never populated."""

    def __init__(self, component: str):
        self.component = component
        super().__init__(f"Expected component '{component}' to be populated, but it was not")


# ---------------------------------------------------------------------------
# State machine errors
# ---------------------------------------------------------------------------


class StateMachineError(SlackArchiverError):
    """Base exception for aggregation steps."""

    pass


class InvalidStateTransition(StateMachineError):
    """No transition is defined for the current state and flags."""

    def __init__(self, state, flags):
        self.state = state
        self.flags = flags
        super().__init__(f"Transition from state: {state} with flags {flags} was invalid")


class StepFailed(StateMachineError):
    """A state's fetch step failed; the cause carries the detail."""

    step = "step"

    def __init__(self):
        super().__init__(f"Could not get {self.step} from api")


class MessageFetchFailed(StepFailed):
    step = "messages"


class ChannelFetchFailed(StepFailed):
    step = "channel"


class UserFetchFailed(StepFailed):
    step = "users"


class TeamFetchFailed(StepFailed):
    step = "teams"


def describe_error(exc: BaseException) -> str:
    """Render an exception and its cause chain as one line."""
    parts = []
    seen = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        parts.append(str(current) or type(current).__name__)
        if current.__cause__ is not None or current.__suppress_context__:
            current = current.__cause__
        else:
            current = current.__context__
    return " - source: ".join(parts)
